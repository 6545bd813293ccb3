"""
Checkout payment API endpoints (Stripe and Kanda finance)
"""
from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from homequote.schemas.payments import KandaRequest, PaymentIntentRequest, PaymentIntentResponse
from homequote.services import payment_service
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post("/stripe/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(body: PaymentIntentRequest):
    """Create a PaymentIntent on the partner's own Stripe account"""
    try:
        client_secret = await payment_service.create_payment_intent(
            body.amount, body.currency, body.secret_key
        )
        return {"client_secret": client_secret}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error creating payment intent:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to create payment intent")


@router.post("/kanda/generate-request", response_class=PlainTextResponse)
async def generate_kanda_request(body: KandaRequest):
    """Signed finance request "<hmac hex>.<base64 body>" as plain text"""
    try:
        return PlainTextResponse(payment_service.generate_kanda_request(body.payload, body.enterprise_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error generating Kanda request:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to generate Kanda request")
