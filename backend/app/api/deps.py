"""Request-scoped access to the services wired in create_app."""
from fastapi import Request

from app.services.booking_engine import BookingEngine


def get_booking_engine(request: Request) -> BookingEngine:
    return request.app.state.booking_engine
