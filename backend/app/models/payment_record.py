"""Payment tracking side ledger, one row per payment intent."""
from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.db.base import Base


class PaymentRecord(Base):
    __tablename__ = "payment_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_intent_id = Column(String(128), nullable=False, unique=True)
    booking_id = Column(String(36), nullable=True)
    activity_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    host_id = Column(String(64), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    host_earnings = Column(Numeric(12, 2), nullable=True)
    platform_fee = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(8), nullable=False)
    status = Column(String(32), nullable=False)  # payment intent status at commit time
    created_at = Column(DateTime(timezone=True), server_default=func.now())
