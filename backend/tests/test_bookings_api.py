"""HTTP surface: response shapes and the {success: false, message} error contract."""
import pytest
from fastapi.testclient import TestClient

from app.core.errors import (
    BOOKING_ERROR_RULES,
    LedgerContentionError,
    PaymentGateError,
    SlotUnavailableError,
    booking_error_status,
)
from app.db.session import get_db
from app.main import create_app
from conftest import FUTURE_DAY

SLOT_A = "9-00_am_-_11-00_am"
SLOT_B = "11-00_am_-_1-00_pm"


@pytest.fixture
def client(booking_engine, session_factory):
    app = create_app(booking_engine, run_scheduler=False)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c


def _book(client, activity_id="act-1", **overrides):
    body = {
        "date": FUTURE_DAY,
        "slotId": SLOT_B,
        "requestedGuests": 3,
        "userId": "user-1",
        "paymentIntentId": "pi_paid",
    }
    body.update(overrides)
    return client.post(f"/bookings/{activity_id}/book", json=body)


class TestSlots:
    def test_slots_for_date(self, client, make_activity):
        make_activity()

        resp = client.get("/bookings/act-1/slots", params={"date": FUTURE_DAY})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert [s["slotId"] for s in data["timeSlots"]] == [SLOT_A, SLOT_B]
        assert data["timeSlots"][0] == {
            "slotId": SLOT_A,
            "display": "9:00 a.m. - 11:00 a.m.",
            "totalGuestsBooked": 0,
            "remaining": 5,
        }
        assert data["totalGuestsForDay"] == 0
        assert data["maxGuestsPerDay"] == 10
        assert data["dayFullyBooked"] is False

    def test_requested_guests_filter(self, client, make_activity):
        make_activity()
        _book(client, slotId=SLOT_A, requestedGuests=4)

        resp = client.get("/bookings/act-1/slots", params={"date": FUTURE_DAY, "requestedGuests": 2})

        assert [s["slotId"] for s in resp.json()["data"]["timeSlots"]] == [SLOT_B]

    def test_missing_date(self, client, make_activity):
        make_activity()

        resp = client.get("/bookings/act-1/slots")

        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_unknown_activity(self, client):
        resp = client.get("/bookings/nope/slots", params={"date": FUTURE_DAY})

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Activity not found."}

    def test_out_of_range(self, client, make_activity):
        make_activity()

        resp = client.get("/bookings/act-1/slots", params={"date": "2026-05-01"})

        assert resp.status_code == 400
        assert resp.json()["success"] is False


class TestPaymentIntent:
    def test_creates_intent(self, client, make_activity, payment_gate):
        make_activity()

        resp = client.post(
            "/bookings/act-1/payment-intent",
            json={"date": FUTURE_DAY, "slotId": SLOT_B, "requestedGuests": 3, "userId": "user-1"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "paymentIntentId": "pi_test_1", "clientSecret": "pi_secret"}
        assert payment_gate.created[0][0] == 450000

    def test_missing_fields(self, client, make_activity, payment_gate):
        make_activity()

        resp = client.post("/bookings/act-1/payment-intent", json={"date": FUTURE_DAY})

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Missing required fields"}
        assert payment_gate.created == []


class TestBook:
    def test_books_a_slot(self, client, make_activity, users):
        make_activity()

        resp = _book(client)

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Booking successful!"
        assert body["bookingId"]
        assert body["emailSent"] is True
        assert body["hostNotified"] is True

    def test_unpaid_intent(self, client, make_activity, payment_gate):
        make_activity()
        payment_gate.statuses["pi_unpaid"] = "requires_payment_method"

        resp = _book(client, paymentIntentId="pi_unpaid")

        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "message": "Payment not completed. Current status: requires_payment_method",
        }

    def test_missing_fields(self, client, make_activity):
        make_activity()

        resp = _book(client, paymentIntentId=None)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Missing required fields"

    def test_full_slot(self, client, make_activity):
        make_activity()
        assert _book(client, requestedGuests=5, paymentIntentId="pi_1").status_code == 200

        resp = _book(client, requestedGuests=1, paymentIntentId="pi_2")

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Slot fully booked. Please choose another."}


class TestTripsAndFeedback:
    def test_trips_for_user(self, client, make_activity, users):
        make_activity(image_url="https://img.example.com/hunza.jpg")
        booking_id = _book(client).json()["bookingId"]

        resp = client.get("/trips/user/user-1")

        assert resp.status_code == 200
        (trip,) = resp.json()["trips"]
        assert trip["bookingId"] == booking_id
        assert trip["id"] == "act-1"
        assert trip["title"] == "Hunza Valley Hike"
        assert trip["image"] == "https://img.example.com/hunza.jpg"
        assert trip["host"] == "Ayesha"
        assert trip["bookingDate"] == "Mar 15, 2026"
        assert trip["startTime"] == "11:00 AM"
        assert trip["endTime"] == "1:00 PM"
        assert trip["price"].startswith("Rs. 4500")
        assert trip["guests"] == "3 guests"
        assert trip["hasFeedback"] is False

    def test_no_trips(self, client):
        assert client.get("/trips/user/user-9").json() == {"trips": []}

    def test_feedback_submitted_flags_bookings(self, client, make_activity):
        make_activity()
        _book(client, slotId=SLOT_A, requestedGuests=1, paymentIntentId="pi_1")
        _book(client, slotId=SLOT_B, requestedGuests=1, paymentIntentId="pi_2")

        resp = client.post("/feedback/act-1/submitted", json={"userId": "user-1"})

        assert resp.json() == {"success": True, "bookingsUpdated": 2}
        assert all(t["hasFeedback"] for t in client.get("/trips/user/user-1").json()["trips"])
        # Already flagged
        assert client.post("/feedback/act-1/submitted", json={"userId": "user-1"}).json()["bookingsUpdated"] == 0

    def test_feedback_submitted_requires_user(self, client):
        resp = client.post("/feedback/act-1/submitted", json={})

        assert resp.status_code == 400
        assert resp.json()["message"] == "Missing required fields"


class TestEarnings:
    def test_host_earnings(self, client, make_activity):
        make_activity()
        _book(client, slotId=SLOT_A, requestedGuests=2, paymentIntentId="pi_1")
        _book(client, slotId=SLOT_B, requestedGuests=3, paymentIntentId="pi_2")

        body = client.get("/earnings/host/host-1").json()

        assert body["success"] is True
        assert body["bookingCount"] == 2
        # (2 + 3) guests x 1500 x 80%
        assert body["totalEarnings"] == pytest.approx(6000.0)
        assert body["weeklyEarnings"] == pytest.approx(6000.0)
        assert sum(body["monthlyEarnings"].values()) == pytest.approx(6000.0)
        assert len(body["recentBookings"]) == 2
        assert {b["activityTitle"] for b in body["recentBookings"]} == {"Hunza Valley Hike"}

    def test_host_without_bookings(self, client):
        body = client.get("/earnings/host/host-9").json()

        assert body["bookingCount"] == 0
        assert body["totalEarnings"] == 0
        assert body["recentBookings"] == []


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


@pytest.mark.parametrize(
    "exc,status",
    [
        (SlotUnavailableError("slot_full"), 400),
        (PaymentGateError("Error verifying payment."), 502),
        (LedgerContentionError(), 503),
    ],
)
def test_error_status_rules(exc, status):
    assert booking_error_status(exc) == status


def test_every_rule_maps_a_booking_error():
    assert all(400 <= code < 600 for _, code in BOOKING_ERROR_RULES)


class TestMalformedRequests:
    def test_non_integer_guests_on_book(self, client, make_activity):
        make_activity()

        resp = _book(client, requestedGuests="two")

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Invalid value for requestedGuests."}

    def test_missing_body_on_book(self, client, make_activity):
        make_activity()

        resp = client.post("/bookings/act-1/book")

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Missing required fields"}

    @pytest.mark.parametrize("hint", ["", "abc", "2.5"])
    def test_unparseable_guest_hint_is_ignored(self, client, make_activity, hint):
        make_activity()

        resp = client.get("/bookings/act-1/slots", params={"date": FUTURE_DAY, "requestedGuests": hint})

        assert resp.status_code == 200
        assert [s["slotId"] for s in resp.json()["data"]["timeSlots"]] == [SLOT_A, SLOT_B]

    def test_past_date(self, client, make_activity):
        make_activity()

        resp = client.get("/bookings/act-1/slots", params={"date": "2026-03-05"})

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Requested date has already passed."}

    def test_unexpected_error_is_json(self, booking_engine, make_activity, monkeypatch):
        make_activity()

        def _boom(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(booking_engine, "get_available_slots", _boom)
        app = create_app(booking_engine, run_scheduler=False)

        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.get("/bookings/act-1/slots", params={"date": FUTURE_DAY})

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Internal server error."}


class TestHostBookings:
    def test_lists_bookings_on_the_hosts_activities(self, client, make_activity, users):
        make_activity(image_url="https://img.example.com/hunza.jpg")
        make_activity(id="act-2", host_id="host-2", title="Lahore Food Walk")
        first = _book(client, slotId=SLOT_A, requestedGuests=2, userId="user-1", paymentIntentId="pi_1").json()
        second = _book(client, slotId=SLOT_B, requestedGuests=1, userId="user-9", paymentIntentId="pi_2").json()
        _book(client, activity_id="act-2", slotId=SLOT_A, requestedGuests=1, paymentIntentId="pi_3")

        body = client.get("/analytics/host/host-1").json()

        assert body["hostName"] == "Ayesha"
        by_id = {b["bookingId"]: b for b in body["bookings"]}
        assert by_id == {
            first["bookingId"]: {
                "bookingId": first["bookingId"],
                "activityId": "act-1",
                "activityTitle": "Hunza Valley Hike",
                "activityImages": ["https://img.example.com/hunza.jpg"],
                "totalGuestsBooked": 2,
                "bookingDate": FUTURE_DAY,
                "timeSlot": SLOT_A,
                "userName": "Bilal",
            },
            second["bookingId"]: {
                "bookingId": second["bookingId"],
                "activityId": "act-1",
                "activityTitle": "Hunza Valley Hike",
                "activityImages": ["https://img.example.com/hunza.jpg"],
                "totalGuestsBooked": 1,
                "bookingDate": FUTURE_DAY,
                "timeSlot": SLOT_B,
                "userName": "Anonymous User",
            },
        }

    def test_unknown_host(self, client):
        assert client.get("/analytics/host/nobody").json() == {"hostName": "", "bookings": []}
