"""Feedback reminder job: who gets reminded, and that a reminder is only marked once it went out."""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.models.booking_record import BookingRecord
from app.scheduler.feedback_reminder_job import send_feedback_reminders
from app.services.feedback_service import due_feedback_reminders, mark_feedback_submitted

NOW = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)


def _ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


@pytest.fixture
def add_booking(db):
    counter = {"n": 0}

    def _add(user_id="user-1", activity_id="act-1", eligible_at=NOW - timedelta(hours=1), **overrides) -> BookingRecord:
        counter["n"] += 1
        fields = dict(
            id=f"booking-{counter['n']}",
            activity_id=activity_id,
            slot_date=date(2026, 3, 15),
            slot_id="9-00_am_-_11-00_am",
            user_id=user_id,
            host_id="host-1",
            requested_guests=1,
            payment_intent_id=f"pi_{counter['n']}",
            payment_amount=Decimal("1500.00"),
            review_eligible_timestamp=_ms(eligible_at),
            has_feedback=False,
            feedback_reminder_sent=False,
        )
        fields.update(overrides)
        record = BookingRecord(**fields)
        db.add(record)
        db.commit()
        return record

    return _add


def test_due_reminders_filter_and_order(db, add_booking):
    later = add_booking(eligible_at=NOW - timedelta(hours=1))
    earlier = add_booking(eligible_at=NOW - timedelta(days=2))
    add_booking(eligible_at=NOW + timedelta(hours=1))
    add_booking(has_feedback=True)
    add_booking(feedback_reminder_sent=True)

    due = due_feedback_reminders(db, NOW, limit=10)

    assert [r.id for r in due] == [earlier.id, later.id]


def test_sends_once_and_marks_sent(db, make_activity, users, add_booking, notifier):
    make_activity()
    record = add_booking()

    assert send_feedback_reminders(db, notifier, now=NOW) == 1
    assert notifier.sent == [("feedback", "bilal@example.com")]

    db.refresh(record)
    assert record.feedback_reminder_sent is True
    assert record.feedback_reminder_sent_at is not None

    # Second run finds nothing
    assert send_feedback_reminders(db, notifier, now=NOW) == 0
    assert len(notifier.sent) == 1


def test_failed_send_is_retried_next_run(db, make_activity, users, add_booking, notifier):
    make_activity()
    record = add_booking()
    notifier.result = False

    assert send_feedback_reminders(db, notifier, now=NOW) == 0
    db.refresh(record)
    assert record.feedback_reminder_sent is False

    notifier.result = True
    assert send_feedback_reminders(db, notifier, now=NOW) == 1


def test_skips_missing_activity_or_email_without_stopping(db, make_activity, users, add_booking, notifier):
    make_activity()
    add_booking(activity_id="gone")
    add_booking(user_id="no-such-user")
    ok = add_booking(user_id="user-2")

    assert send_feedback_reminders(db, notifier, now=NOW) == 1
    assert notifier.sent == [("feedback", "sana@example.com")]
    db.refresh(ok)
    assert ok.feedback_reminder_sent is True


def test_submitted_feedback_suppresses_reminder(db, make_activity, users, add_booking, notifier):
    make_activity()
    add_booking()
    add_booking(user_id="user-2")

    assert mark_feedback_submitted(db, "act-1", "user-1") == 1

    assert send_feedback_reminders(db, notifier, now=NOW) == 1
    assert notifier.sent == [("feedback", "sana@example.com")]
