"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE in reset scripts).
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "activities",
    "users",
    "capacity_days",
    "capacity_slots",
    "booking_records",
    "payment_records",
)

# Tables cleared when resetting booking state. Children first.
BOOKING_TABLE_NAMES = (
    "booking_records",
    "payment_records",
    "capacity_slots",
    "capacity_days",
)
