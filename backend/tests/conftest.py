"""
Shared fixtures: a fresh SQLite file database per test, fake payment gate and notifier,
and a booking engine pinned to a fixed clock.
"""
import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SMTP_USER", "")
os.environ.setdefault("SMTP_PASSWORD", "")
os.environ.setdefault("STRIPE_SECRET_KEY", "")

from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.db.session import build_engine
from app.models.activity import LISTING_LIST, Activity
from app.models.user import User
from app.services.booking_engine import BookingEngine, BookSlotCommand
from app.services.capacity_ledger import CapacityLedger
from app.services.payment_gate import PaymentIntentHandle

# 11:50 local time (UTC+05:00) on 2026-03-10
FIXED_NOW = datetime(2026, 3, 10, 6, 50, tzinfo=timezone.utc)
TODAY = "2026-03-10"
FUTURE_DAY = "2026-03-15"


class FakePaymentGate:
    """Stands in for Stripe: every intent has `status` unless overridden in `statuses`."""

    currency = "pkr"

    def __init__(self, status: str = "succeeded") -> None:
        self.status = status
        self.statuses: dict[str, str] = {}
        self.status_calls: list[str] = []
        self.created: list[tuple[int, dict]] = []

    def get_status(self, intent_id: str) -> str:
        self.status_calls.append(intent_id)
        return self.statuses.get(intent_id, self.status)

    def create_intent(self, amount_minor_units: int, metadata: dict) -> PaymentIntentHandle:
        self.created.append((amount_minor_units, metadata))
        return PaymentIntentHandle(intent_id=f"pi_test_{len(self.created)}", client_secret="pi_secret")


class RecordingNotifier:
    """Records every email the engine or jobs ask for; `result` is what each send returns."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[tuple[str, str | None]] = []

    def send_guest_confirmation(self, to_email, guest_name, activity, date_str, slot_label, guests):
        self.sent.append(("guest", to_email))
        return self.result

    def send_host_new_booking(self, to_email, guest_name, activity, date_str, slot_label, guests):
        self.sent.append(("host", to_email))
        return self.result

    def send_feedback_reminder(self, to_email, guest_name, activity):
        self.sent.append(("feedback", to_email))
        return self.result


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def ledger(session_factory):
    return CapacityLedger(session_factory, max_retries=100)


@pytest.fixture
def payment_gate():
    return FakePaymentGate()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def booking_engine(session_factory, ledger, payment_gate, notifier):
    return BookingEngine(
        session_factory,
        ledger,
        payment_gate,
        notifier,
        clock=lambda: FIXED_NOW,
        cutoff_buffer_minutes=30,
        local_utc_offset_minutes=300,
        host_share_percent=80,
    )


@pytest.fixture
def make_activity(db):
    """Insert an activity (9:00-13:00, 2h slots, 5 per slot, 10 per day, March 2026) with overrides."""

    def _make(**overrides) -> Activity:
        fields = dict(
            id="act-1",
            host_id="host-1",
            host_name="Ayesha",
            title="Hunza Valley Hike",
            address="Karimabad, Hunza",
            start_time=time(9, 0),
            end_time=time(13, 0),
            duration=2,
            start_date=date(2026, 3, 1),
            end_date=date(2026, 3, 31),
            max_guests_per_time=5,
            max_guests_per_day=10,
            price_per_guest=Decimal("1500.00"),
            listing_status=LISTING_LIST,
            status="Accepted",
        )
        fields.update(overrides)
        activity = Activity(**fields)
        db.add(activity)
        db.commit()
        return activity

    return _make


@pytest.fixture
def users(db):
    db.add_all(
        [
            User(id="user-1", name="Bilal", email="bilal@example.com"),
            User(id="user-2", name="Sana", email="sana@example.com"),
            User(id="host-1", name="Ayesha", email="ayesha@example.com"),
        ]
    )
    db.commit()


@pytest.fixture
def book_command():
    def _command(**overrides) -> BookSlotCommand:
        fields = dict(
            activity_id="act-1",
            date=FUTURE_DAY,
            slot_id="9-00_am_-_11-00_am",
            requested_guests=2,
            user_id="user-1",
            payment_intent_id="pi_paid",
        )
        fields.update(overrides)
        return BookSlotCommand(**fields)

    return _command
