#!/usr/bin/env python3
"""
Preflight for the bookings backend: .env, database and schema, Stripe and SMTP settings.
Run from backend/:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []
    warnings = []

    if not (backend_dir / ".env").exists():
        errors.append("backend/.env missing. Copy backend/.env.example and set DATABASE_URL and STRIPE_SECRET_KEY.")
    else:
        print("OK  .env exists")

    from dotenv import load_dotenv

    load_dotenv(backend_dir / ".env")

    try:
        from sqlalchemy import inspect, text

        from app.db.session import engine
        from app.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = sorted(set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names()))
        if missing:
            errors.append(f"Tables missing: {', '.join(missing)}. Run: alembic upgrade head")
            print("FAIL Schema:", ", ".join(missing))
        else:
            print("OK  Booking tables present")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    from app.config import settings
    from app.services.payment_gate import PaymentGate

    if PaymentGate().is_configured():
        print(f"OK  Stripe key set (currency {settings.stripe_currency})")
    else:
        errors.append("STRIPE_SECRET_KEY not set; payment intents cannot be created or verified.")
        print("FAIL Stripe key")

    if settings.smtp_user and settings.smtp_password:
        print(f"OK  SMTP credentials for {settings.smtp_user}")
    else:
        warnings.append("SMTP_USER/SMTP_PASSWORD not set; bookings succeed but no emails go out.")
        print("WARN SMTP credentials")

    try:
        from app.main import app  # noqa: F401

        print("OK  App import (app.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    for w in warnings:
        print("•", w)
    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn app.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
