from app.db.base import Base
from app.db.session import build_engine, get_db, engine, SessionLocal
from app.db.tables import ALL_TABLE_NAMES, BOOKING_TABLE_NAMES

__all__ = ["build_engine", "get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES", "BOOKING_TABLE_NAMES"]
