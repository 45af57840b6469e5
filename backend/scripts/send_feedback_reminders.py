#!/usr/bin/env python3
"""
Send due feedback reminder emails once (same work as the scheduled job).
Run: cd backend && python scripts/send_feedback_reminders.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.scheduler.feedback_reminder_job import send_feedback_reminders
from app.services.email_notify import BookingNotifier


def main():
    db = SessionLocal()
    try:
        sent = send_feedback_reminders(db, BookingNotifier())
        print(f"Done. Sent {sent} feedback reminder(s).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
