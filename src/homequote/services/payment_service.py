"""
Checkout payments: Stripe payment intents and Kanda finance requests
"""
from typing import Any, Optional

from homequote.core.config import settings
from homequote.external.stripe.client import StripeClient
from homequote.utils.exceptions import BadRequestError
from homequote.utils.signing import sign_request


def _is_missing_payload(payload: Any) -> bool:
    # Empty objects and arrays are valid payloads
    if isinstance(payload, (dict, list)):
        return False
    return payload is None or payload is False or payload == "" or payload == 0


async def create_payment_intent(
    amount: Optional[float],
    currency: Optional[str],
    secret_key: Optional[str],
    client: Optional[StripeClient] = None,
) -> str:
    """
    Create a PaymentIntent on the partner's Stripe account.

    Returns:
        The intent's client secret

    Raises:
        BadRequestError: If the amount is missing or not positive, or no secret key is given
        ExternalServiceError: If Stripe rejects the request
    """
    if not amount or amount <= 0:
        raise BadRequestError("Invalid amount")
    if not secret_key:
        raise BadRequestError("Stripe secret key is required")
    if amount != int(amount):
        raise BadRequestError("Amount must be a whole number of the currency's smallest unit")

    client = client or StripeClient(secret_key)
    intent = await client.create_payment_intent(int(amount), currency or settings.stripe.default_currency)
    return intent.get("client_secret")


def generate_kanda_request(payload: Any, enterprise_id: Optional[str]) -> str:
    """
    Raises:
        BadRequestError: If the payload or enterprise id is missing
    """
    if _is_missing_payload(payload) or not enterprise_id:
        raise BadRequestError("Payload and enterprise ID are required")
    return sign_request(payload, enterprise_id)
