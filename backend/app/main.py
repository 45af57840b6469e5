"""
FastAPI app entrypoint.

Booking engine (slots, payment intents, reservations) plus trips, earnings and the
feedback reminder job.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from app.api.routes import analytics, bookings, earnings, trips
from app.config import settings
from app.core.constants import FEEDBACK_REMINDER_JOB_ID
from app.core.errors import (
    BookingError,
    booking_error_handler,
    request_validation_error_handler,
    unhandled_error_handler,
)
from app.db.session import SessionLocal
from app.scheduler.feedback_reminder_job import run_feedback_reminder_job
from app.services.booking_engine import BookingEngine
from app.services.capacity_ledger import CapacityLedger
from app.services.email_notify import BookingNotifier
from app.services.payment_gate import PaymentGate
from app.services.slot_calendar import utc_now

logger = logging.getLogger(__name__)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
_CORS_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8081",
    "http://127.0.0.1:8081",
    "http://localhost:19006",
]


def build_booking_engine(
    session_factory: Callable[[], Session] = SessionLocal,
    payment_gate: PaymentGate | None = None,
    notifier: BookingNotifier | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> BookingEngine:
    return BookingEngine(
        session_factory,
        CapacityLedger(session_factory, max_retries=settings.ledger_max_retries),
        payment_gate or PaymentGate(),
        notifier or BookingNotifier(),
        clock=clock,
        cutoff_buffer_minutes=settings.slot_cutoff_buffer_minutes,
        local_utc_offset_minutes=settings.local_utc_offset_minutes,
        host_share_percent=settings.host_share_percent,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_feedback_reminder_job,
        "interval",
        minutes=settings.feedback_reminder_interval_minutes,
        id=FEEDBACK_REMINDER_JOB_ID,
    )
    scheduler.start()
    app.state.scheduler = scheduler
    logger.info(
        "Scheduler started; feedback reminders every %s minutes", settings.feedback_reminder_interval_minutes
    )
    yield
    scheduler.shutdown(wait=False)


def create_app(booking_engine: BookingEngine | None = None, *, run_scheduler: bool = True) -> FastAPI:
    app = FastAPI(
        title="TouristGuide Bookings",
        version="0.1.0",
        lifespan=lifespan if run_scheduler else None,
    )
    app.state.booking_engine = booking_engine or build_booking_engine()

    cors_origins = list(_CORS_DEV_ORIGINS)
    if settings.cors_origins:
        cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
    app.include_router(trips.router, tags=["trips"])
    app.include_router(earnings.router, prefix="/earnings", tags=["earnings"])
    app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])

    @app.get("/", include_in_schema=False)
    def root():
        """Root: point to API docs and health."""
        return {"message": "TouristGuide Bookings API", "docs": "/docs", "health": "/health"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
