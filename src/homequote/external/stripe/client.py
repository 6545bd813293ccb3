"""
Stripe PaymentIntents client
"""
import stripe
from typing import Any, Dict

from homequote.core.config import settings
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class StripeClient:
    """Creates payment intents on a partner's own Stripe account"""

    def __init__(self, secret_key: str):
        self.client = stripe.StripeClient(
            secret_key,
            base_addresses={"api": settings.stripe.api_base},
            max_network_retries=settings.stripe.max_network_retries,
            http_client=stripe.HTTPXClient(),
        )

    async def create_payment_intent(self, amount: int, currency: str) -> Dict[str, Any]:
        """
        Create a PaymentIntent with automatic payment methods enabled.

        Args:
            amount: Amount in the currency's smallest unit
            currency: Three-letter ISO currency code

        Returns:
            The intent's `id` and `client_secret`

        Raises:
            ExternalServiceError: If Stripe rejects the request or cannot be reached
        """
        try:
            intent = await self.client.v1.payment_intents.create_async(params={
                "amount": amount,
                "currency": currency,
                "automatic_payment_methods": {"enabled": True},
                "metadata": {"source": settings.stripe.metadata_source},
            })
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(f"[red]❌ Stripe error:[/red] [yellow]{e.http_status}[/yellow] - {message}")
            raise ExternalServiceError(message, status_code=e.http_status) from e

        logger.info(f"[green]✅ Created payment intent[/green] [cyan]{intent.id}[/cyan]")
        return {"id": intent.id, "client_secret": intent.client_secret}
