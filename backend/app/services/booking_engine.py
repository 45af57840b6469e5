"""
Booking engine: quote available slots, create payment intents, commit reservations.

One booking attempt runs validate -> verify payment -> load activity -> reserve in the ledger
-> record payment -> re-evaluate listing -> notify guest and host. Everything before the ledger
commit raises a BookingError and leaves nothing behind. Everything after it is best effort:
failures are logged and reported as flags, never undo the booking.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

from sqlalchemy.orm import Session

from app.core.constants import (
    NO_SLOTS_FULLY_BOOKED,
    NO_SLOTS_FULLY_BOOKED_MESSAGE,
    NO_SLOTS_PAST_TIME,
    NO_SLOTS_PAST_TIME_MESSAGE,
    REVIEW_ELIGIBLE_AFTER_HOURS,
)
from app.core.errors import (
    MSG_MISSING_FIELDS,
    ActivityNotFoundError,
    BookingValidationError,
    DateOutOfRangeError,
    PastDateError,
    PaymentNotCompletedError,
    SlotUnavailableError,
    UnknownSlotError,
)
from app.models.activity import Activity
from app.models.user import User
from app.services.capacity_ledger import BookingDraft, CapacityLedger
from app.services.email_notify import BookingNotifier
from app.services.listing_state import reevaluate_listing_status
from app.services.payment_gate import PaymentGate, PaymentIntentHandle, is_payment_final, to_minor_units
from app.services.payment_record_service import record_payment
from app.services.slot_calendar import (
    TimeSlot,
    activity_slots,
    derive_slots,
    display_label_for_slot,
    local_now,
    slot_end_utc,
    utc_now,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class SlotAvailability:
    slot_id: str
    display: str
    total_guests_booked: int
    remaining: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "slotId": self.slot_id,
            "display": self.display,
            "totalGuestsBooked": self.total_guests_booked,
            "remaining": self.remaining,
        }


@dataclass
class SlotQuote:
    time_slots: list[SlotAvailability]
    total_guests_for_day: int
    remaining_day_capacity: int
    max_guests_per_day: int
    day_fully_booked: bool
    no_slots_reason: str | None = None
    no_slots_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "timeSlots": [s.to_dict() for s in self.time_slots],
            "totalGuestsForDay": self.total_guests_for_day,
            "remainingDayCapacity": self.remaining_day_capacity,
            "maxGuestsPerDay": self.max_guests_per_day,
            "dayFullyBooked": self.day_fully_booked,
        }
        if self.no_slots_reason:
            out["noSlotsReason"] = self.no_slots_reason
            out["noSlotsMessage"] = self.no_slots_message
        return out


@dataclass
class BookSlotCommand:
    activity_id: str
    date: str | None
    slot_id: str | None
    requested_guests: int | None
    user_id: str | None
    payment_intent_id: str | None


@dataclass
class BookingConfirmation:
    booking_id: str
    listing_status: str
    email_sent: bool
    host_notified: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": "Booking successful!",
            "bookingId": self.booking_id,
            "emailSent": self.email_sent,
            "hostNotified": self.host_notified,
        }


@dataclass(frozen=True)
class EarningsSplit:
    payment_amount: Decimal
    host_earnings: Decimal
    platform_fee: Decimal


def split_earnings(price_per_guest: Decimal, guests: int, host_share_percent: int = 80) -> EarningsSplit:
    """Total = price x guests; host keeps host_share_percent, the platform the rest (to the cent)."""
    amount = (Decimal(price_per_guest) * guests).quantize(CENT)
    host = (amount * host_share_percent / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    return EarningsSplit(payment_amount=amount, host_earnings=host, platform_fee=amount - host)


def review_eligible_timestamp(slot_date: date, slot: TimeSlot, local_utc_offset_minutes: int) -> int:
    """Epoch ms when feedback opens: the slot's end in the fixed local offset, plus 24 hours."""
    eligible_at = slot_end_utc(slot_date, slot, local_utc_offset_minutes) + timedelta(hours=REVIEW_ELIGIBLE_AFTER_HOURS)
    return int(eligible_at.timestamp() * 1000)


def parse_booking_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise BookingValidationError("Date must be in YYYY-MM-DD format.") from None


def _require_positive_guests(value: int | None) -> int:
    if value is None:
        raise BookingValidationError(MSG_MISSING_FIELDS)
    if value <= 0:
        raise BookingValidationError("requestedGuests must be a positive integer.")
    return value


class BookingEngine:
    """Quote and commit flows over the slot calendar, payment gate and capacity ledger."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        ledger: CapacityLedger,
        payment_gate: PaymentGate,
        notifier: BookingNotifier,
        *,
        clock: Callable[[], datetime] = utc_now,
        cutoff_buffer_minutes: int = 30,
        local_utc_offset_minutes: int = 300,
        host_share_percent: int = 80,
    ) -> None:
        self._session_factory = session_factory
        self._ledger = ledger
        self._payment_gate = payment_gate
        self._notifier = notifier
        self._clock = clock
        self._cutoff_buffer_minutes = cutoff_buffer_minutes
        self._offset_minutes = local_utc_offset_minutes
        self._host_share_percent = host_share_percent

    # --- Helpers ---

    def _load_activity(self, db: Session, activity_id: str) -> Activity:
        activity = db.get(Activity, activity_id)
        if activity is None:
            logger.warning("Activity not found: %s", activity_id)
            raise ActivityNotFoundError(activity_id)
        return activity

    @staticmethod
    def _check_in_range(activity: Activity, on_date: date) -> None:
        if not activity.start_date <= on_date <= activity.end_date:
            logger.warning("Date %s out of range for activity %s", on_date, activity.id)
            raise DateOutOfRangeError()

    def now_local(self) -> datetime:
        return local_now(self._clock(), self._offset_minutes)

    def _check_not_past(self, on_date: date) -> None:
        if on_date < self.now_local().date():
            logger.warning("Date %s is before today", on_date)
            raise PastDateError()

    # --- Quote ---

    def get_available_slots(self, activity_id: str, date_str: str | None, requested_guests: int | None = None) -> SlotQuote:
        """
        Slots for one date with per-slot remaining capacity. An empty list is either a sold-out
        day (noSlotsReason=fully_booked) or a today whose slots all start too soon (past_time).
        """
        if not date_str:
            raise BookingValidationError("Date query parameter is required (YYYY-MM-DD).")
        on_date = parse_booking_date(date_str)
        self._check_not_past(on_date)

        db = self._session_factory()
        try:
            activity = self._load_activity(db, activity_id)
        finally:
            db.close()
        self._check_in_range(activity, on_date)

        all_slots = activity_slots(activity)
        slots = derive_slots(activity, on_date, self.now_local(), self._cutoff_buffer_minutes)
        snapshot = self._ledger.read_day(activity_id, on_date)

        results = [
            SlotAvailability(
                slot_id=s.slot_id,
                display=s.display,
                total_guests_booked=snapshot.booked(s.slot_id),
                remaining=max(activity.max_guests_per_time - snapshot.booked(s.slot_id), 0),
            )
            for s in slots
        ]
        total_for_day = snapshot.total_guests_for_day
        day_fully_booked = total_for_day >= activity.max_guests_per_day
        reason = message = None
        if day_fully_booked:
            results = []
            reason, message = NO_SLOTS_FULLY_BOOKED, NO_SLOTS_FULLY_BOOKED_MESSAGE
        elif all_slots and not slots:
            day_fully_booked = True
            reason, message = NO_SLOTS_PAST_TIME, NO_SLOTS_PAST_TIME_MESSAGE

        if requested_guests is not None and requested_guests > 0:
            results = [r for r in results if r.remaining >= requested_guests]

        logger.debug("Quote %s %s: %s slots, day total %s", activity_id, on_date, len(results), total_for_day)
        return SlotQuote(
            time_slots=results,
            total_guests_for_day=total_for_day,
            remaining_day_capacity=max(activity.max_guests_per_day - total_for_day, 0),
            max_guests_per_day=activity.max_guests_per_day,
            day_fully_booked=day_fully_booked,
            no_slots_reason=reason,
            no_slots_message=message,
        )

    # --- Payment intent ---

    def create_payment_intent(
        self,
        activity_id: str,
        date_str: str | None,
        slot_id: str | None,
        requested_guests: int | None,
        user_id: str | None,
    ) -> PaymentIntentHandle:
        if not date_str or not slot_id or not requested_guests or not user_id:
            raise BookingValidationError(MSG_MISSING_FIELDS)
        guests = _require_positive_guests(requested_guests)
        db = self._session_factory()
        try:
            activity = self._load_activity(db, activity_id)
        finally:
            db.close()
        split = split_earnings(activity.price_per_guest, guests, self._host_share_percent)
        amount = to_minor_units(split.payment_amount)
        logger.debug("Creating payment intent for %s: %s minor units", activity_id, amount)
        return self._payment_gate.create_intent(
            amount,
            {
                "activityId": activity_id,
                "userId": user_id,
                "date": date_str,
                "slotId": slot_id,
                "requestedGuests": guests,
            },
        )

    # --- Commit ---

    def _validate_command(self, command: BookSlotCommand) -> tuple[date, TimeSlot, int]:
        if (
            not command.date
            or not command.slot_id
            or not command.requested_guests
            or not command.user_id
            or not command.payment_intent_id
        ):
            raise BookingValidationError(MSG_MISSING_FIELDS)
        guests = _require_positive_guests(command.requested_guests)
        on_date = parse_booking_date(command.date)
        self._check_not_past(on_date)
        try:
            slot = TimeSlot.parse(command.slot_id)
        except ValueError:
            raise UnknownSlotError(command.slot_id) from None
        return on_date, slot, guests

    def book_slot(self, command: BookSlotCommand) -> BookingConfirmation:
        on_date, slot, guests = self._validate_command(command)

        logger.info("Verifying payment intent %s for activity %s", command.payment_intent_id, command.activity_id)
        status = self._payment_gate.get_status(command.payment_intent_id)
        if not is_payment_final(status):
            logger.warning("Payment intent %s status is %r; booking cannot proceed", command.payment_intent_id, status)
            raise PaymentNotCompletedError(status)

        db = self._session_factory()
        try:
            activity = self._load_activity(db, command.activity_id)
            self._check_in_range(activity, on_date)
            if slot not in activity_slots(activity):
                raise UnknownSlotError(command.slot_id)

            split = split_earnings(activity.price_per_guest, guests, self._host_share_percent)
            draft = BookingDraft(
                user_id=command.user_id,
                host_id=activity.host_id,
                payment_intent_id=command.payment_intent_id,
                payment_amount=split.payment_amount,
                host_earnings=split.host_earnings,
                platform_fee=split.platform_fee,
                review_eligible_timestamp=review_eligible_timestamp(on_date, slot, self._offset_minutes),
            )
            outcome = self._ledger.commit_reservation(
                activity.id,
                on_date,
                slot.slot_id,
                guests,
                draft,
                max_guests_per_time=activity.max_guests_per_time,
                max_guests_per_day=activity.max_guests_per_day,
            )
            if not outcome.committed:
                raise SlotUnavailableError(outcome.reason)

            # Committed: nothing below may fail the request.
            self._record_payment(db, activity, command, outcome.booking_id, split, status)
            listing_status = self._reevaluate_listing(db, activity)
            email_sent, host_notified = self._notify(db, activity, command.user_id, command.date, slot, guests)
        finally:
            db.close()

        logger.info("Booking %s confirmed for activity %s", outcome.booking_id, command.activity_id)
        return BookingConfirmation(
            booking_id=outcome.booking_id,
            listing_status=listing_status,
            email_sent=email_sent,
            host_notified=host_notified,
        )

    def _record_payment(self, db, activity, command, booking_id, split, status) -> None:
        try:
            record_payment(
                db,
                payment_intent_id=command.payment_intent_id,
                booking_id=booking_id,
                activity_id=activity.id,
                user_id=command.user_id,
                host_id=activity.host_id,
                amount=split.payment_amount,
                host_earnings=split.host_earnings,
                platform_fee=split.platform_fee,
                currency=self._payment_gate.currency,
                status=status,
            )
        except Exception as e:
            db.rollback()
            logger.exception("Failed to record payment for booking %s: %s", booking_id, e)

    def _reevaluate_listing(self, db: Session, activity: Activity) -> str:
        current = activity.listing_status
        try:
            return reevaluate_listing_status(db, self._ledger, activity)
        except Exception as e:
            db.rollback()
            logger.exception("Listing status check failed for activity %s: %s", activity.id, e)
            return current

    def _notify(self, db: Session, activity: Activity, user_id: str, date_str: str, slot: TimeSlot, guests: int) -> tuple[bool, bool]:
        slot_label = display_label_for_slot(activity, slot.slot_id) or "Timing not available"
        guest = None
        email_sent = host_notified = False
        try:
            guest = db.get(User, user_id)
            email_sent = self._notifier.send_guest_confirmation(
                guest.email if guest is not None else None,
                (guest.name if guest is not None else None) or "Customer",
                activity,
                date_str,
                slot_label,
                guests,
            )
        except Exception as e:
            logger.exception("Guest confirmation failed for user %s: %s", user_id, e)
        if not email_sent:
            logger.warning("Booking confirmation email not sent to user %s", user_id)

        if activity.host_id:
            try:
                host = db.get(User, activity.host_id)
                host_notified = self._notifier.send_host_new_booking(
                    host.email if host is not None else None,
                    (guest.name if guest is not None else None) or "a customer",
                    activity,
                    date_str,
                    slot_label,
                    guests,
                )
            except Exception as e:
                logger.exception("Host notification failed for activity %s: %s", activity.id, e)
        return email_sent, host_notified
