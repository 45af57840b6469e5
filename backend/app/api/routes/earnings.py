"""Host earnings summary."""
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.db.session import get_db
from app.services.earnings_service import get_host_earnings

router = APIRouter()


@router.get("/host/{host_id}")
def host_earnings(host_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return {"success": True, **get_host_earnings(db, host_id, settings.host_share_percent)}
