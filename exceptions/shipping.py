"""
Shipping-related exceptions.
"""

from .base import StorefrontException


class ShippingException(StorefrontException):
    """Base exception for shipping-related errors."""
    http_status = 502


class ShippingRateException(ShippingException):
    """Raised when the rate service failed or returned no usable rates."""

    def __init__(self, delivery_pin: str, reason: str):
        super().__init__(
            f"Could not calculate shipping rates for {delivery_pin}: {reason}",
            details={'delivery_pin': delivery_pin, 'reason': reason}
        )
        self.delivery_pin = delivery_pin
        self.reason = reason
