"""
Trips: a traveler's bookings joined with their activities, for the app's Trips tab.
"""
from sqlalchemy.orm import Session

from app.models.activity import Activity
from app.models.booking_record import BookingRecord
from app.services.slot_calendar import TimeSlot


def _clock_upper(t) -> str:
    # "9:00 a.m." -> "9:00 AM"
    hour = t.hour % 12 or 12
    return f"{hour}:{t.minute:02d} {'AM' if t.hour < 12 else 'PM'}"


def slot_times(slot_id: str) -> tuple[str, str]:
    """("6:00 AM", "10:00 AM") for a slot id; the raw id and "" if it does not decode."""
    try:
        slot = TimeSlot.parse(slot_id)
    except ValueError:
        return slot_id, ""
    return _clock_upper(slot.start), _clock_upper(slot.end)


def get_user_trips(db: Session, user_id: str) -> list[dict]:
    """All bookings for user_id, newest slot date first."""
    rows = (
        db.query(BookingRecord, Activity)
        .outerjoin(Activity, Activity.id == BookingRecord.activity_id)
        .filter(BookingRecord.user_id == user_id)
        .order_by(BookingRecord.slot_date.desc(), BookingRecord.created_at.desc())
        .all()
    )
    trips = []
    for record, activity in rows:
        start, end = slot_times(record.slot_id)
        guests = record.requested_guests
        trips.append(
            {
                "bookingId": record.id,
                "id": record.activity_id,
                "title": activity.title if activity is not None else "Untitled",
                "image": (activity.image_url if activity is not None else None) or "",
                "host": (activity.host_name if activity is not None else None) or "Unknown Host",
                "bookingDate": record.slot_date.strftime("%b %d, %Y").replace(" 0", " "),
                "startTime": start,
                "endTime": end,
                "price": f"Rs. {record.payment_amount}",
                "guests": "1 guest" if guests == 1 else f"{guests} guests",
                "hasFeedback": bool(record.has_feedback),
            }
        )
    return trips
