"""
Feedback bookkeeping on booking records: the has-feedback flag and reminder eligibility.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models.booking_record import BookingRecord

logger = logging.getLogger(__name__)


def mark_feedback_submitted(db: Session, activity_id: str, user_id: str) -> int:
    """Flag every booking the user holds for the activity as reviewed. Returns rows updated."""
    result = db.execute(
        update(BookingRecord)
        .where(
            BookingRecord.activity_id == activity_id,
            BookingRecord.user_id == user_id,
            BookingRecord.has_feedback.is_(False),
        )
        .values(has_feedback=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    logger.info("Marked %s booking records reviewed for user %s on activity %s", result.rowcount, user_id, activity_id)
    return result.rowcount


def due_feedback_reminders(db: Session, now: datetime, limit: int) -> list[BookingRecord]:
    """Bookings past their review-eligible time with no feedback and no reminder yet, oldest first."""
    now_ms = int(now.timestamp() * 1000)
    return (
        db.query(BookingRecord)
        .filter(
            BookingRecord.review_eligible_timestamp <= now_ms,
            BookingRecord.has_feedback.is_(False),
            BookingRecord.feedback_reminder_sent.is_(False),
        )
        .order_by(BookingRecord.review_eligible_timestamp.asc())
        .limit(limit)
        .all()
    )


def mark_reminder_sent(db: Session, record: BookingRecord, now: datetime | None = None) -> None:
    record.feedback_reminder_sent = True
    record.feedback_reminder_sent_at = now or datetime.now(timezone.utc)
    db.commit()
