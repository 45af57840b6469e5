"""
Traveler-facing booking history and the feedback flag.
"""
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.core.errors import MSG_MISSING_FIELDS, BookingValidationError
from app.db.session import get_db
from app.services.feedback_service import mark_feedback_submitted
from app.services.trips_service import get_user_trips

router = APIRouter()


class FeedbackSubmittedBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(None, alias="userId")


@router.get("/trips/user/{user_id}")
def list_user_trips(user_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    """All bookings made by the user, with decoded slot start/end times."""
    return {"trips": get_user_trips(db, user_id)}


@router.post("/feedback/{activity_id}/submitted")
def feedback_submitted(
    activity_id: str,
    body: FeedbackSubmittedBody,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Record that the user reviewed the activity so no reminder is sent for their bookings."""
    if not body.user_id:
        raise BookingValidationError(MSG_MISSING_FIELDS)
    updated = mark_feedback_submitted(db, activity_id, body.user_id)
    return {"success": True, "bookingsUpdated": updated}
