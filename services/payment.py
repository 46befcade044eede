"""
Payment Service

Server side of the hosted-widget payment: the server creates the gateway
order (payment intent) for a total, and later checks the signature the widget
hands back. The client never talks to the gateway API directly.
"""

import logging

from pydantic import ValidationError

from exceptions.base import StorefrontException
from exceptions.payment import PaymentIntentException, PaymentVerificationException
from models.payment import PaymentConfirmationDTO, PaymentIntentDTO, PaymentVerifyDTO
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(self, api: ApiClient):
        self.api = api

    async def create_intent(self, amount: float, currency: str, order_id: int) -> PaymentIntentDTO:
        """
        Args:
            amount: Grand total in the reference currency (major units)
            currency: Reference currency code
            order_id: Internal order the intent belongs to

        Raises:
            ApiException: If the server rejects the request
            PaymentIntentException: If no gateway order id came back
        """
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": f"order_{order_id}",
            "notes": {"order_id": order_id},
        }
        response = await self.api.post("/payments/create-intent", payload)
        try:
            intent = PaymentIntentDTO.model_validate(response or {})
        except ValidationError as e:
            raise PaymentIntentException(order_id) from e
        if not intent.id:
            raise PaymentIntentException(order_id)
        logger.info(f"[Payment] Intent {intent.id} created for order {order_id}")
        return intent

    async def verify(self, confirmation: PaymentConfirmationDTO, order_id: int) -> None:
        """
        Raises:
            PaymentVerificationException: If the server could not be reached or refused the signature
        """
        payload = PaymentVerifyDTO(order_id=order_id, **confirmation.model_dump())
        try:
            response = await self.api.post("/payments/verify", payload.model_dump(mode="json"))
        except StorefrontException as e:
            logger.error(f"[Payment] Verification of order {order_id} failed: {e}")
            raise PaymentVerificationException(order_id, confirmation.razorpay_order_id) from e

        if not (isinstance(response, dict) and response.get("success")):
            logger.error(f"[Payment] Server refused payment {confirmation.razorpay_payment_id} for order {order_id}")
            raise PaymentVerificationException(order_id, confirmation.razorpay_order_id)
        logger.info(f"[Payment] Order {order_id} verified (payment {confirmation.razorpay_payment_id})")
