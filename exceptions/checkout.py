"""
Checkout-related exceptions.
"""

from .base import StorefrontException


class CheckoutException(StorefrontException):
    """Base exception for checkout errors."""
    http_status = 409


class CheckoutValidationException(CheckoutException):
    """Raised when the shipping form fails validation. Never reaches the network."""
    http_status = 422

    def __init__(self, reason: str):
        super().__init__(reason, details={'reason': reason})
        self.reason = reason


class EmptyCheckoutException(CheckoutException):
    """Raised when checkout is attempted with nothing to buy."""
    http_status = 422

    def __init__(self):
        super().__init__("Your cart is empty")


class PaymentInProgressException(CheckoutException):
    """Raised when a second payment attempt is started while one is in flight."""

    def __init__(self):
        super().__init__("A payment is already in progress")


class InvalidCheckoutStateException(CheckoutException):
    """Raised when an operation is not allowed in the current checkout state."""

    def __init__(self, state: str, operation: str):
        super().__init__(
            f"Cannot {operation} while checkout is {state}",
            details={'state': state, 'operation': operation}
        )
        self.state = state
