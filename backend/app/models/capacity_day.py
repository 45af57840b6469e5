"""Per-activity, per-date guest aggregate. `version` is the compare-and-swap generation for the ledger."""
from sqlalchemy import Column, Date, DateTime, Integer, String
from sqlalchemy.sql import func

from app.db.base import Base


class CapacityDay(Base):
    __tablename__ = "capacity_days"

    activity_id = Column(String(64), primary_key=True)
    slot_date = Column(Date, primary_key=True)
    total_guests_for_day = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
