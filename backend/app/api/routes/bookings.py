"""
Bookings: available slots for a date, payment intent creation, and slot reservation.

Failures are raised as BookingError and rendered as {success: false, message} by the handler in main.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_booking_engine
from app.services.booking_engine import BookingEngine, BookSlotCommand

router = APIRouter()
logger = logging.getLogger(__name__)


class PaymentIntentBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str | None = None
    slot_id: str | None = Field(None, alias="slotId")
    requested_guests: int | None = Field(None, alias="requestedGuests")
    user_id: str | None = Field(None, alias="userId")


class BookSlotBody(PaymentIntentBody):
    payment_intent_id: str | None = Field(None, alias="paymentIntentId")


def _guest_hint(raw: str | None) -> int | None:
    # Only a filter: a value that is not an integer is ignored rather than rejected
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@router.get("/{activity_id}/slots")
def get_time_slots_for_date(
    activity_id: str,
    date: str | None = Query(None, description="YYYY-MM-DD"),
    requested_guests: str | None = Query(None, alias="requestedGuests"),
    engine: BookingEngine = Depends(get_booking_engine),
) -> dict[str, Any]:
    """Time slots for one date with remaining capacity; optionally only those fitting requestedGuests."""
    quote = engine.get_available_slots(activity_id, date, _guest_hint(requested_guests))
    return {"success": True, "data": quote.to_dict()}


@router.post("/{activity_id}/payment-intent")
def create_payment_intent(
    activity_id: str,
    body: PaymentIntentBody,
    engine: BookingEngine = Depends(get_booking_engine),
) -> dict[str, Any]:
    """Create a payment intent for price x guests. The client pays it before calling /book."""
    handle = engine.create_payment_intent(
        activity_id, body.date, body.slot_id, body.requested_guests, body.user_id
    )
    return {"success": True, "paymentIntentId": handle.intent_id, "clientSecret": handle.client_secret}


@router.post("/{activity_id}/book")
def book_time_slot(
    activity_id: str,
    body: BookSlotBody,
    engine: BookingEngine = Depends(get_booking_engine),
) -> dict[str, Any]:
    """
    Reserve a slot after the payment intent has been paid.
    The response reflects the booking itself; emailSent/hostNotified only report the confirmation emails.
    """
    confirmation = engine.book_slot(
        BookSlotCommand(
            activity_id=activity_id,
            date=body.date,
            slot_id=body.slot_id,
            requested_guests=body.requested_guests,
            user_id=body.user_id,
            payment_intent_id=body.payment_intent_id,
        )
    )
    return confirmation.to_dict()
