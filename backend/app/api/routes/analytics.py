"""Host analytics: who booked what on the host's activities."""
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.analytics_service import get_host_bookings

router = APIRouter()


@router.get("/host/{host_id}")
def host_bookings(host_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return get_host_bookings(db, host_id)
