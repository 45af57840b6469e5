"""
Centralized constants for the booking engine and scheduler (Encapsulate What Changes).

Change job IDs, statuses or reason codes here instead of scattering literals across main,
routes and services. Environment-driven values live in app.config.Settings.
"""

# Scheduler job IDs (must match ids used in main.py add_job)
FEEDBACK_REMINDER_JOB_ID = "feedback_reminders"

# Payment intent statuses that allow a booking to be committed
ACCEPTED_PAYMENT_STATUSES = frozenset({"succeeded", "processing", "requires_capture"})

# Minor units per major currency unit (paisa per rupee, cents per dollar)
MINOR_UNITS_PER_MAJOR = 100

# Feedback becomes eligible this long after the slot ends
REVIEW_ELIGIBLE_AFTER_HOURS = 24

# Quote: reasons for an empty slot list
NO_SLOTS_PAST_TIME = "past_time"
NO_SLOTS_FULLY_BOOKED = "fully_booked"
NO_SLOTS_PAST_TIME_MESSAGE = "No time slots remain for today. Please choose another date."
NO_SLOTS_FULLY_BOOKED_MESSAGE = "This date is fully booked. Please choose another date."

# Ledger rejection reasons
LEDGER_SLOT_FULL = "slot_full"
LEDGER_DAY_FULL = "day_full"

# Feedback reminder job: cap per run to avoid an email burst
FEEDBACK_REMINDER_BATCH_LIMIT = 200

# Host earnings: number of recent bookings returned
EARNINGS_RECENT_BOOKINGS_LIMIT = 10
