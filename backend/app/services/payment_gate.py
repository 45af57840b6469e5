"""
Payment gate: thin adapter over Stripe PaymentIntents.

The booking engine only creates intents and reads their status; it never confirms, captures
or cancels them. Stripe failures surface as PaymentGateError.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import stripe

from app.config import settings
from app.core.constants import ACCEPTED_PAYMENT_STATUSES, MINOR_UNITS_PER_MAJOR
from app.core.errors import MSG_PAYMENT_CREATE_FAILED, MSG_PAYMENT_VERIFY_FAILED, PaymentGateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentIntentHandle:
    intent_id: str
    client_secret: str | None


def to_minor_units(amount: Decimal) -> int:
    """Major currency amount -> smallest unit (rupees -> paisa)."""
    return int((Decimal(amount) * MINOR_UNITS_PER_MAJOR).to_integral_value())


def is_payment_final(status: str | None) -> bool:
    return status in ACCEPTED_PAYMENT_STATUSES


class PaymentGate:
    """Stripe PaymentIntent create + status lookup."""

    def __init__(self, api_key: str | None = None, currency: str | None = None) -> None:
        self._api_key = (api_key if api_key is not None else settings.stripe_secret_key).strip()
        self.currency = (currency or settings.stripe_currency or "pkr").lower()

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def create_intent(self, amount_minor_units: int, metadata: dict[str, Any]) -> PaymentIntentHandle:
        if not self.is_configured():
            raise PaymentGateError("Payments not configured. Add STRIPE_SECRET_KEY to .env.")
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=self.currency,
                metadata={k: str(v) for k, v in metadata.items()},
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent create failed: %s", e)
            raise PaymentGateError(MSG_PAYMENT_CREATE_FAILED) from e
        logger.info("Payment intent created: %s (%s %s)", intent.id, amount_minor_units, self.currency)
        return PaymentIntentHandle(intent_id=intent.id, client_secret=intent.client_secret)

    def get_status(self, intent_id: str) -> str:
        if not self.is_configured():
            raise PaymentGateError(MSG_PAYMENT_VERIFY_FAILED)
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self._api_key)
        except stripe.InvalidRequestError as e:
            # Unknown intent id: treat as an intent that was never paid
            logger.warning("Payment intent %s not found: %s", intent_id, e)
            return "invalid"
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent retrieve failed for %s: %s", intent_id, e)
            raise PaymentGateError(MSG_PAYMENT_VERIFY_FAILED) from e
        return intent.status
