"""
Centralized error handling for booking API failures.
Exception types, user-facing messages and a rule table so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

MSG_MISSING_FIELDS = "Missing required fields"
MSG_ACTIVITY_NOT_FOUND = "Activity not found."
MSG_SLOT_FULLY_BOOKED = "Slot fully booked. Please choose another."
MSG_PAYMENT_NOT_COMPLETED = "Payment not completed. Current status: {status}"
MSG_PAYMENT_VERIFY_FAILED = "Error verifying payment."
MSG_PAYMENT_CREATE_FAILED = "Failed to create PaymentIntent"
MSG_DATE_OUT_OF_RANGE = "Requested date is out of the activity's dateRange."
MSG_DATE_IN_PAST = "Requested date has already passed."
MSG_INVALID_FIELD = "Invalid value for {field}."
MSG_INTERNAL_ERROR = "Internal server error."
MSG_UNKNOWN_SLOT = "Requested time slot does not exist for this activity."
MSG_LEDGER_BUSY = "Too many concurrent bookings for this date. Please try again."

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500
STATUS_BAD_GATEWAY = 502
STATUS_SERVICE_UNAVAILABLE = 503


# ---------------------------------------------------------------------------
# Exception types
# ---------------------------------------------------------------------------


class BookingError(Exception):
    """Base for every expected booking failure. `message` is shown to the client as-is."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingError):
    """Missing or malformed request fields. Raised before any I/O."""


class ActivityNotFoundError(BookingError):
    def __init__(self, activity_id: str) -> None:
        super().__init__(MSG_ACTIVITY_NOT_FOUND)
        self.activity_id = activity_id


class DateOutOfRangeError(BookingError):
    def __init__(self) -> None:
        super().__init__(MSG_DATE_OUT_OF_RANGE)


class PastDateError(BookingError):
    def __init__(self) -> None:
        super().__init__(MSG_DATE_IN_PAST)


class UnknownSlotError(BookingError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(MSG_UNKNOWN_SLOT)
        self.slot_id = slot_id


class PaymentNotCompletedError(BookingError):
    def __init__(self, status: str) -> None:
        super().__init__(MSG_PAYMENT_NOT_COMPLETED.format(status=status))
        self.status = status


class PaymentGateError(BookingError):
    """The payment provider could not be reached or refused the call."""


class SlotUnavailableError(BookingError):
    """The ledger rejected the reservation (slot or day cap). Routine under contention."""

    def __init__(self, reason: str) -> None:
        super().__init__(MSG_SLOT_FULLY_BOOKED)
        self.reason = reason


class LedgerContentionError(BookingError):
    """Compare-and-swap kept losing; retry budget exhausted without a business decision."""

    def __init__(self) -> None:
        super().__init__(MSG_LEDGER_BUSY)


# ---------------------------------------------------------------------------
# Error rules: exception type -> status code. First match wins.
# ---------------------------------------------------------------------------

BOOKING_ERROR_RULES: list[tuple[type[BookingError], int]] = [
    (BookingValidationError, STATUS_BAD_REQUEST),
    (DateOutOfRangeError, STATUS_BAD_REQUEST),
    (PastDateError, STATUS_BAD_REQUEST),
    (UnknownSlotError, STATUS_BAD_REQUEST),
    (PaymentNotCompletedError, STATUS_BAD_REQUEST),
    (SlotUnavailableError, STATUS_BAD_REQUEST),
    (ActivityNotFoundError, STATUS_NOT_FOUND),
    (PaymentGateError, STATUS_BAD_GATEWAY),
    (LedgerContentionError, STATUS_SERVICE_UNAVAILABLE),
]


def booking_error_status(exc: BookingError) -> int:
    for exc_type, status_code in BOOKING_ERROR_RULES:
        if isinstance(exc, exc_type):
            return status_code
    return STATUS_INTERNAL_ERROR


def booking_error_to_response(exc: BookingError) -> JSONResponse:
    """
    Map a BookingError into the `{success: false, message}` body clients expect.
    Uses BOOKING_ERROR_RULES for the status code; unknown subclasses become 500.
    """
    return JSONResponse(
        status_code=booking_error_status(exc),
        content={"success": False, "message": exc.message},
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return booking_error_to_response(exc)


# ---------------------------------------------------------------------------
# Framework errors rendered in the same {success: false, message} shape
# ---------------------------------------------------------------------------


def validation_error_message(exc: RequestValidationError) -> str:
    """MSG_MISSING_FIELDS when a field or the body is absent, else names the first bad field."""
    errors = exc.errors()
    if not errors or any(e.get("type") == "missing" for e in errors):
        return MSG_MISSING_FIELDS
    loc = [str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query", "path")]
    return MSG_INVALID_FIELD.format(field=loc[-1] if loc else "request")


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BAD_REQUEST,
        content={"success": False, "message": validation_error_message(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=STATUS_INTERNAL_ERROR,
        content={"success": False, "message": MSG_INTERNAL_ERROR},
    )
