#!/usr/bin/env python3
"""
Completely clear booking state (booking_records, payment_records, capacity_slots, capacity_days). Fast (TRUNCATE).
Activities and users are kept. Run with backend stopped to avoid locks:
cd backend && python scripts/clear_booking_tables.py
"""
import sys
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text

from app.db.session import engine
from app.db.tables import BOOKING_TABLE_NAMES


def main():
    tables = ", ".join(BOOKING_TABLE_NAMES)
    print(f"Connecting to DB and truncating {tables} ...")
    with engine.connect() as conn:
        conn.execute(text(f"TRUNCATE TABLE {tables} RESTART IDENTITY CASCADE"))
        conn.commit()
    print("Done. Booking tables are empty; every slot is back to full capacity.")


if __name__ == "__main__":
    main()
