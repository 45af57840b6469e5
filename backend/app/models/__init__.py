from app.models.activity import Activity
from app.models.booking_record import BookingRecord
from app.models.capacity_day import CapacityDay
from app.models.capacity_slot import CapacitySlot
from app.models.payment_record import PaymentRecord
from app.models.user import User

__all__ = [
    "Activity",
    "BookingRecord",
    "CapacityDay",
    "CapacitySlot",
    "PaymentRecord",
    "User",
]
