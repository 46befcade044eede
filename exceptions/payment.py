"""
Payment-related exceptions.
"""

from .base import StorefrontException


class PaymentException(StorefrontException):
    """Base exception for payment-related errors."""
    http_status = 502


class OrderCreationException(PaymentException):
    """Raised when the server did not return an order id for a new order."""

    def __init__(self, reason: str = "Failed to create order"):
        super().__init__(reason, details={'reason': reason})


class PaymentIntentException(PaymentException):
    """Raised when the gateway order/intent could not be created."""

    def __init__(self, order_id: int):
        super().__init__(
            "Failed to create payment intent",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class PaymentConfigurationException(PaymentException):
    """Raised when the gateway key is not configured."""
    http_status = 503

    def __init__(self):
        super().__init__("Payment configuration error")


class PaymentVerificationException(PaymentException):
    """Raised when the server refuses the gateway confirmation. Not retried client-side."""

    def __init__(self, order_id: int, gateway_order_id: str | None = None):
        super().__init__(
            "Payment verification failed. Please contact support.",
            details={'order_id': order_id, 'gateway_order_id': gateway_order_id}
        )
        self.order_id = order_id
        self.gateway_order_id = gateway_order_id
