"""Bookable activity: operating window, date range, guest caps, price. CRUD lives outside this service."""
from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text, Time
from sqlalchemy.sql import func

from app.db.base import Base

LISTING_LIST = "List"
LISTING_UNLIST = "UnList"
LISTING_DEACTIVATE = "Deactivate"


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String(64), primary_key=True)
    host_id = Column(String(64), nullable=False, index=True)
    host_name = Column(String(256), nullable=True)
    title = Column(String(256), nullable=False)
    address = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    start_time = Column(Time, nullable=False)  # time of day
    end_time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False)  # hours per slot
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    max_guests_per_time = Column(Integer, nullable=False)
    max_guests_per_day = Column(Integer, nullable=False)
    price_per_guest = Column(Numeric(12, 2), nullable=False)
    listing_status = Column(String(16), nullable=False, default=LISTING_LIST)  # List | UnList | Deactivate
    status = Column(String(16), nullable=False, default="Pending")  # Pending | Accepted | Rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
