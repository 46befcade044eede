"""
Cart-related exceptions.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class CartItemNotFoundException(CartException):
    """Raised when no cart line matches the requested product (and variant)."""
    http_status = 404

    def __init__(self, product_id: int, size: str | None = None, color: str | None = None):
        variant = f" ({size}/{color})" if size is not None or color is not None else ""
        super().__init__(
            f"Product {product_id}{variant} is not in the cart",
            details={'product_id': product_id, 'size': size, 'color': color}
        )
        self.product_id = product_id
