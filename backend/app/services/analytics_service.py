"""
Host-facing booking list: every booking on the host's activities, with the guest's name.
"""
from sqlalchemy.orm import Session

from app.models.activity import Activity
from app.models.booking_record import BookingRecord
from app.models.user import User

ANONYMOUS_GUEST = "Anonymous User"


def get_host_bookings(db: Session, host_id: str) -> dict:
    """hostName (empty if the host has no user row) and all bookings across the host's activities."""
    host = db.get(User, host_id)
    rows = (
        db.query(BookingRecord, Activity, User.name)
        .join(Activity, Activity.id == BookingRecord.activity_id)
        .outerjoin(User, User.id == BookingRecord.user_id)
        .filter(Activity.host_id == host_id)
        .order_by(BookingRecord.slot_date.asc(), BookingRecord.created_at.asc())
        .all()
    )
    bookings = [
        {
            "bookingId": record.id,
            "activityId": record.activity_id,
            "activityTitle": activity.title or "Untitled",
            "activityImages": [activity.image_url] if activity.image_url else [],
            "totalGuestsBooked": record.requested_guests,
            "bookingDate": record.slot_date.isoformat(),
            "timeSlot": record.slot_id,
            "userName": user_name or ANONYMOUS_GUEST,
        }
        for record, activity, user_name in rows
    ]
    return {"hostName": (host.name if host is not None else None) or "", "bookings": bookings}
