"""
Shipping Rate Service

Courier rate lookup for a delivery postal code. The rate service is an
external dependency that is often unavailable in development, so a failed or
empty lookup is answered with fixed fallback rates instead of an error.
"""

import logging

from pydantic import ValidationError

import config
from exceptions.base import StorefrontException
from exceptions.shipping import ShippingRateException
from models.shipping import ShippingRateDTO
from services.api_client import ApiClient

logger = logging.getLogger(__name__)

FALLBACK_RATES: tuple[ShippingRateDTO, ...] = (
    ShippingRateDTO(courier_name="Standard Shipping", rate=150, currency="INR", estimated_days=5, service_type="standard"),
    ShippingRateDTO(courier_name="Express Shipping", rate=300, currency="INR", estimated_days=2, service_type="express"),
)


class ShippingRateService:

    def __init__(self, api: ApiClient):
        self.api = api

    async def calculate_rates(self, delivery_pin: str, weight: float | None = None, cod: int = 0) -> list[ShippingRateDTO]:
        """
        Fetch courier rates from the configured pickup point to delivery_pin.

        Raises:
            ShippingRateException: If the lookup failed or returned no rates
        """
        params = {
            "pickup_pin": config.SHIPPING_PICKUP_PIN,
            "delivery_pin": delivery_pin,
            "weight": str(weight or config.SHIPPING_DEFAULT_WEIGHT),
            "cod": str(cod),
        }
        try:
            response = await self.api.get("/shipping/calculate-rates", params=params)
        except StorefrontException as e:
            raise ShippingRateException(delivery_pin, e.message) from e

        raw_rates = (response or {}).get("rates") if isinstance(response, dict) else None
        if not raw_rates:
            raise ShippingRateException(delivery_pin, "no rates returned")
        try:
            return [ShippingRateDTO.model_validate(rate) for rate in raw_rates]
        except ValidationError as e:
            raise ShippingRateException(delivery_pin, f"malformed rate: {e.error_count()} errors") from e

    async def get_rates_or_fallback(self, delivery_pin: str) -> list[ShippingRateDTO]:
        """Rates for delivery_pin, or FALLBACK_RATES when none can be had."""
        try:
            rates = await self.calculate_rates(delivery_pin)
            logger.info(f"[Shipping] {len(rates)} rates for {delivery_pin}")
            return rates
        except ShippingRateException as e:
            logger.warning(f"[Shipping] Using fallback rates for {delivery_pin}: {e.message}")
            return [rate.model_copy() for rate in FALLBACK_RATES]
