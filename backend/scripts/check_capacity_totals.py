#!/usr/bin/env python3
"""
Check that every capacity_days.total_guests_for_day equals the sum of its capacity_slots.
Read-only; prints mismatches and exits 1 if any are found.
Run: cd backend && python scripts/check_capacity_totals.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import func

from app.db.session import SessionLocal
from app.models.capacity_day import CapacityDay
from app.models.capacity_slot import CapacitySlot


def main() -> int:
    db = SessionLocal()
    try:
        slot_sums = dict(
            ((r.activity_id, r.slot_date), r.booked)
            for r in db.query(
                CapacitySlot.activity_id,
                CapacitySlot.slot_date,
                func.sum(CapacitySlot.total_guests_booked).label("booked"),
            ).group_by(CapacitySlot.activity_id, CapacitySlot.slot_date)
        )
        mismatches = 0
        days = db.query(CapacityDay).all()
        for day in days:
            booked = int(slot_sums.get((day.activity_id, day.slot_date)) or 0)
            if booked != day.total_guests_for_day:
                mismatches += 1
                print(
                    f"MISMATCH {day.activity_id} {day.slot_date}: "
                    f"day total={day.total_guests_for_day} slots sum={booked}"
                )
        print(f"Checked {len(days)} day(s); {mismatches} mismatch(es).")
        return 1 if mismatches else 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
