"""One confirmed reservation. Created once per successful commit; only the feedback flags change afterwards."""
from sqlalchemy import BigInteger, Boolean, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.db.base import Base


class BookingRecord(Base):
    __tablename__ = "booking_records"

    id = Column(String(36), primary_key=True)  # uuid4
    activity_id = Column(String(64), nullable=False, index=True)
    slot_date = Column(Date, nullable=False)
    slot_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False, index=True)
    host_id = Column(String(64), nullable=True, index=True)  # denormalized for earnings
    requested_guests = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    payment_intent_id = Column(String(128), nullable=False)
    payment_amount = Column(Numeric(12, 2), nullable=False)
    host_earnings = Column(Numeric(12, 2), nullable=True)
    platform_fee = Column(Numeric(12, 2), nullable=True)
    review_eligible_timestamp = Column(BigInteger, nullable=False)  # epoch ms: slot end + 24h
    has_feedback = Column(Boolean, nullable=False, default=False)
    feedback_reminder_sent = Column(Boolean, nullable=False, default=False)
    feedback_reminder_sent_at = Column(DateTime(timezone=True), nullable=True)
