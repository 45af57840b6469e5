"""Guests booked per slot. Only written by the ledger, inside the same transaction as its CapacityDay swap."""
from sqlalchemy import Column, Date, Integer, String

from app.db.base import Base


class CapacitySlot(Base):
    __tablename__ = "capacity_slots"

    activity_id = Column(String(64), primary_key=True)
    slot_date = Column(Date, primary_key=True)
    slot_id = Column(String(64), primary_key=True)  # e.g. 9-00_am_-_11-00_am
    total_guests_booked = Column(Integer, nullable=False, default=0)
