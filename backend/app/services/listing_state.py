"""
Listing state: unlist an activity once every date in its range is sold out.

Only ever moves List -> UnList. Reopening is a host or admin action elsewhere.
"""
import logging
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models.activity import LISTING_LIST, LISTING_UNLIST, Activity
from app.services.capacity_ledger import CapacityLedger

logger = logging.getLogger(__name__)


def is_fully_booked_across_range(ledger: CapacityLedger, activity: Activity) -> bool:
    """True iff every date in [start_date, end_date] has a day row at or over maxGuestsPerDay."""
    if activity.end_date < activity.start_date:
        return False
    totals = ledger.day_totals(activity.id, activity.start_date, activity.end_date)
    day = activity.start_date
    while day <= activity.end_date:
        total = totals.get(day)
        if total is None or total < activity.max_guests_per_day:
            return False
        day += timedelta(days=1)
    return True


def reevaluate_listing_status(db: Session, ledger: CapacityLedger, activity: Activity) -> str:
    """
    Re-derive listing visibility after a commit. Returns the resulting listing status.
    Idempotent: the update is conditional on the row still being listed.
    """
    if activity.listing_status != LISTING_LIST:
        return activity.listing_status
    if not is_fully_booked_across_range(ledger, activity):
        return activity.listing_status
    result = db.execute(
        update(Activity)
        .where(Activity.id == activity.id, Activity.listing_status == LISTING_LIST)
        .values(listing_status=LISTING_UNLIST)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount:
        logger.info("Activity %s fully booked across its date range; listing status set to UnList", activity.id)
    db.refresh(activity)
    return activity.listing_status
