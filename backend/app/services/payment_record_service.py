"""
Payment tracking records, one per payment intent.
"""
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.payment_record import PaymentRecord

logger = logging.getLogger(__name__)


def record_payment(
    db: Session,
    *,
    payment_intent_id: str,
    booking_id: str | None,
    activity_id: str,
    user_id: str,
    host_id: str | None,
    amount: Decimal,
    host_earnings: Decimal,
    platform_fee: Decimal,
    currency: str,
    status: str,
) -> bool:
    """
    Create the payment record for an intent unless one exists. Returns True if a row was created.
    A concurrent insert for the same intent loses on the unique constraint and is skipped.
    """
    existing = db.query(PaymentRecord).filter(PaymentRecord.payment_intent_id == payment_intent_id).first()
    if existing:
        logger.info("Payment record for intent %s already exists; skipping", payment_intent_id)
        return False
    db.add(
        PaymentRecord(
            payment_intent_id=payment_intent_id,
            booking_id=booking_id,
            activity_id=activity_id,
            user_id=user_id,
            host_id=host_id,
            amount=amount,
            host_earnings=host_earnings,
            platform_fee=platform_fee,
            currency=currency,
            status=status,
        )
    )
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Payment record for intent %s created concurrently; skipping", payment_intent_id)
        return False
    return True


def get_payment_record(db: Session, payment_intent_id: str) -> PaymentRecord | None:
    return db.query(PaymentRecord).filter(PaymentRecord.payment_intent_id == payment_intent_id).first()
