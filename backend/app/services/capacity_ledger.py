"""
Capacity ledger: per-activity, per-date guest counters and the booking records under them.

This is the only writer of capacity_days, capacity_slots and booking_records inserts. Each
commit is one optimistic transaction: read the day row and its version, check both caps
against that read, then swap the day row with UPDATE ... WHERE version = :seen. Losing the
swap (or losing the race to create a brand-new day row) rolls the whole transaction back and
retries from a fresh read, so two commits can never both pass a cap check against the same
state. Mutual exclusion is per (activity, date); different days never contend.
"""
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import LEDGER_DAY_FULL, LEDGER_SLOT_FULL
from app.core.errors import LedgerContentionError
from app.models.booking_record import BookingRecord
from app.models.capacity_day import CapacityDay
from app.models.capacity_slot import CapacitySlot

logger = logging.getLogger(__name__)


@dataclass
class BookingDraft:
    """BookingRecord fields known before the ledger assigns the record id."""

    user_id: str
    host_id: str | None
    payment_intent_id: str
    payment_amount: Decimal
    host_earnings: Decimal
    platform_fee: Decimal
    review_eligible_timestamp: int


@dataclass(frozen=True)
class LedgerOutcome:
    committed: bool
    booking_id: str | None = None
    reason: str | None = None  # slot_full | day_full when not committed
    attempts: int = 1


@dataclass
class DaySnapshot:
    total_guests_for_day: int = 0
    slots: dict[str, int] = field(default_factory=dict)

    def booked(self, slot_id: str) -> int:
        return self.slots.get(slot_id, 0)


class _SwapLost(Exception):
    """Another writer changed the day row between our read and our swap."""


class CapacityLedger:
    """Atomic reservation commits plus read access to day/slot counters."""

    def __init__(self, session_factory: Callable[[], Session], *, max_retries: int = 25) -> None:
        self._session_factory = session_factory
        self._max_retries = max_retries

    def commit_reservation(
        self,
        activity_id: str,
        slot_date: date,
        slot_id: str,
        requested_guests: int,
        draft: BookingDraft,
        *,
        max_guests_per_time: int,
        max_guests_per_day: int,
    ) -> LedgerOutcome:
        """
        Reserve requested_guests in slot_id on slot_date, or reject if either cap would be exceeded.
        Rejections are final; only lost swaps are retried. Raises LedgerContentionError when the
        retry budget runs out.
        """
        for attempt in range(1, self._max_retries + 1):
            db = self._session_factory()
            try:
                outcome = self._attempt(
                    db,
                    activity_id,
                    slot_date,
                    slot_id,
                    requested_guests,
                    draft,
                    max_guests_per_time=max_guests_per_time,
                    max_guests_per_day=max_guests_per_day,
                )
            except _SwapLost:
                db.rollback()
                logger.debug(
                    "Ledger swap lost for %s/%s/%s (attempt %s); retrying",
                    activity_id, slot_date, slot_id, attempt,
                )
                continue
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()
            return replace(outcome, attempts=attempt)
        logger.warning(
            "Ledger gave up on %s/%s/%s after %s lost swaps", activity_id, slot_date, slot_id, self._max_retries
        )
        raise LedgerContentionError()

    def _attempt(
        self,
        db: Session,
        activity_id: str,
        slot_date: date,
        slot_id: str,
        requested_guests: int,
        draft: BookingDraft,
        *,
        max_guests_per_time: int,
        max_guests_per_day: int,
    ) -> LedgerOutcome:
        day = db.execute(
            select(CapacityDay).where(
                CapacityDay.activity_id == activity_id,
                CapacityDay.slot_date == slot_date,
            )
        ).scalar_one_or_none()
        if day is None:
            seen_version, day_total = 0, 0
            db.add(CapacityDay(activity_id=activity_id, slot_date=slot_date, total_guests_for_day=0, version=0))
            try:
                db.flush()
            except IntegrityError as e:
                raise _SwapLost() from e
        else:
            seen_version, day_total = day.version, day.total_guests_for_day

        slot = db.execute(
            select(CapacitySlot).where(
                CapacitySlot.activity_id == activity_id,
                CapacitySlot.slot_date == slot_date,
                CapacitySlot.slot_id == slot_id,
            )
        ).scalar_one_or_none()
        slot_total = slot.total_guests_booked if slot is not None else 0

        # Counters only grow, so a rejection against a read that is already stale still holds.
        if slot_total + requested_guests > max_guests_per_time:
            db.rollback()
            logger.info(
                "Slot %s on %s for activity %s is full (%s + %s > %s)",
                slot_id, slot_date, activity_id, slot_total, requested_guests, max_guests_per_time,
            )
            return LedgerOutcome(committed=False, reason=LEDGER_SLOT_FULL)
        if day_total + requested_guests > max_guests_per_day:
            db.rollback()
            logger.info(
                "Day %s for activity %s is full (%s + %s > %s)",
                slot_date, activity_id, day_total, requested_guests, max_guests_per_day,
            )
            return LedgerOutcome(committed=False, reason=LEDGER_DAY_FULL)

        swapped = db.execute(
            update(CapacityDay)
            .where(
                CapacityDay.activity_id == activity_id,
                CapacityDay.slot_date == slot_date,
                CapacityDay.version == seen_version,
            )
            .values(
                total_guests_for_day=day_total + requested_guests,
                version=seen_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if swapped.rowcount != 1:
            raise _SwapLost()

        if slot is None:
            db.add(
                CapacitySlot(
                    activity_id=activity_id,
                    slot_date=slot_date,
                    slot_id=slot_id,
                    total_guests_booked=requested_guests,
                )
            )
        else:
            slot.total_guests_booked = slot_total + requested_guests

        booking_id = str(uuid.uuid4())
        db.add(
            BookingRecord(
                id=booking_id,
                activity_id=activity_id,
                slot_date=slot_date,
                slot_id=slot_id,
                user_id=draft.user_id,
                host_id=draft.host_id,
                requested_guests=requested_guests,
                payment_intent_id=draft.payment_intent_id,
                payment_amount=draft.payment_amount,
                host_earnings=draft.host_earnings,
                platform_fee=draft.platform_fee,
                review_eligible_timestamp=draft.review_eligible_timestamp,
                has_feedback=False,
                feedback_reminder_sent=False,
            )
        )
        try:
            db.commit()
        except IntegrityError as e:
            raise _SwapLost() from e
        logger.info(
            "Reserved %s guests in %s on %s for activity %s (booking %s)",
            requested_guests, slot_id, slot_date, activity_id, booking_id,
        )
        return LedgerOutcome(committed=True, booking_id=booking_id)

    def read_day(self, activity_id: str, slot_date: date) -> DaySnapshot:
        """Committed counters for one day. May be stale by the time the caller uses it."""
        db = self._session_factory()
        try:
            day = db.execute(
                select(CapacityDay).where(
                    CapacityDay.activity_id == activity_id,
                    CapacityDay.slot_date == slot_date,
                )
            ).scalar_one_or_none()
            rows = db.execute(
                select(CapacitySlot.slot_id, CapacitySlot.total_guests_booked).where(
                    CapacitySlot.activity_id == activity_id,
                    CapacitySlot.slot_date == slot_date,
                )
            ).all()
            return DaySnapshot(
                total_guests_for_day=day.total_guests_for_day if day is not None else 0,
                slots={r.slot_id: r.total_guests_booked for r in rows},
            )
        finally:
            db.close()

    def day_totals(self, activity_id: str, start: date, end: date) -> dict[date, int]:
        """totalGuestsForDay for every day row in [start, end]. Days without a row are absent."""
        db = self._session_factory()
        try:
            rows = db.execute(
                select(CapacityDay.slot_date, CapacityDay.total_guests_for_day).where(
                    CapacityDay.activity_id == activity_id,
                    CapacityDay.slot_date >= start,
                    CapacityDay.slot_date <= end,
                )
            ).all()
            return {r.slot_date: r.total_guests_for_day for r in rows}
        finally:
            db.close()
