"""
Host earnings from booking records (host_id is denormalized onto each record).
"""
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.constants import EARNINGS_RECENT_BOOKINGS_LIMIT
from app.models.activity import Activity
from app.models.booking_record import BookingRecord


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_host_earnings(db: Session, host_id: str, host_share_percent: int = 80, now: datetime | None = None) -> dict:
    """
    Totals for a host: all-time, last 7 days (by booking creation), per month (YYYY-MM) and the
    most recent bookings. Records without a stored split fall back to host_share_percent of the amount.
    """
    now = now or datetime.now(timezone.utc)
    week_ago = now - timedelta(days=7)
    rows = (
        db.query(BookingRecord, Activity.title)
        .outerjoin(Activity, Activity.id == BookingRecord.activity_id)
        .filter(BookingRecord.host_id == host_id)
        .order_by(BookingRecord.created_at.desc())
        .all()
    )
    total = Decimal("0")
    weekly = Decimal("0")
    monthly: dict[str, Decimal] = defaultdict(Decimal)
    recent = []
    for record, title in rows:
        earned = record.host_earnings
        if earned is None:
            earned = (Decimal(record.payment_amount) * host_share_percent / 100).quantize(Decimal("0.01"))
        total += earned
        created = _as_utc(record.created_at)
        if created is not None:
            monthly[created.strftime("%Y-%m")] += earned
            if created >= week_ago:
                weekly += earned
        if len(recent) < EARNINGS_RECENT_BOOKINGS_LIMIT:
            recent.append(
                {
                    "bookingId": record.id,
                    "activityId": record.activity_id,
                    "activityTitle": title or "Unknown Activity",
                    "bookingDate": record.slot_date.isoformat(),
                    "timeSlot": record.slot_id,
                    "paymentAmount": float(record.payment_amount),
                    "hostEarnings": float(earned),
                    "requestedGuests": record.requested_guests,
                    "createdAt": created.isoformat() if created else None,
                }
            )
    return {
        "hostId": host_id,
        "bookingCount": len(rows),
        "totalEarnings": float(total),
        "weeklyEarnings": float(weekly),
        "monthlyEarnings": {k: float(v) for k, v in sorted(monthly.items())},
        "recentBookings": recent,
    }
