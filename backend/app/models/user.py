"""Travelers and hosts. Only the fields booking notifications need."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(256), nullable=True)
    email = Column(String(320), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
