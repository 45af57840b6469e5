"""
Feedback reminders: every FEEDBACK_REMINDER_INTERVAL_MINUTES, find bookings whose slot ended
more than 24 hours ago, that have no feedback and no reminder yet, and email the guest once.

A booking is marked as reminded only when the email actually went out, so SMTP outages are
retried on the next run. One bad booking never stops the batch.
"""
import logging
from datetime import datetime, timezone

from app.core.constants import FEEDBACK_REMINDER_BATCH_LIMIT
from app.db.session import SessionLocal
from app.models.activity import Activity
from app.models.user import User
from app.services.email_notify import BookingNotifier
from app.services.feedback_service import due_feedback_reminders, mark_reminder_sent

logger = logging.getLogger(__name__)


def send_feedback_reminders(db, notifier: BookingNotifier, now: datetime | None = None) -> int:
    """Send due reminders using an open session. Returns the number of emails sent."""
    now = now or datetime.now(timezone.utc)
    due = due_feedback_reminders(db, now, FEEDBACK_REMINDER_BATCH_LIMIT)
    logger.info("Feedback reminders: %s bookings eligible", len(due))
    sent = 0
    for record in due:
        try:
            activity = db.get(Activity, record.activity_id)
            if activity is None:
                logger.warning("Activity %s not found; skipping reminder for booking %s", record.activity_id, record.id)
                continue
            user = db.get(User, record.user_id)
            if user is None or not user.email:
                logger.warning("User email not found for %s; skipping reminder", record.user_id)
                continue
            if notifier.send_feedback_reminder(user.email, user.name or "Valued Customer", activity):
                mark_reminder_sent(db, record, now)
                sent += 1
                logger.info("Feedback reminder sent for booking %s (%s)", record.id, activity.title)
            else:
                logger.error("Failed to send feedback reminder for booking %s", record.id)
        except Exception as e:
            db.rollback()
            logger.exception("Error processing feedback reminder for booking %s: %s", record.id, e)
    return sent


def run_feedback_reminder_job() -> None:
    db = SessionLocal()
    try:
        send_feedback_reminders(db, BookingNotifier())
    except Exception as e:
        logger.exception("Feedback reminder job failed: %s", e)
        db.rollback()
    finally:
        db.close()
