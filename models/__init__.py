"""
Models Package

Pydantic DTOs for every payload exchanged with the storefront API, the push
channel and the payment widget, plus the client-side state handed to views.
"""

from models.product import CategoryRefDTO, ProductDTO, CategoryDTO, CatalogueDTO, FilterOptionsDTO, ProductFilterDTO
from models.cart_item import CartItemDTO
from models.shipping import ShippingRateDTO, ShippingFormDTO
from models.order import OrderItemDTO, OrderCreateDTO, OrderCreatedDTO
from models.payment import (
    PaymentIntentDTO,
    PaymentConfirmationDTO,
    PaymentVerifyDTO,
    PaymentPrefillDTO,
    PaymentWidgetOptionsDTO,
    WidgetResultDTO,
)
from models.checkout import CheckoutResultDTO
from models.notification import (
    NotificationDTO,
    NotificationSnapshotDTO,
    PushMessageDTO,
    FeedStateDTO,
    NotificationPreferenceDTO,
)
from models.user import UserDTO, AuthResponseDTO
from models.wishlist import WishlistItemDTO
from models.currency import CurrencyDTO

__all__ = [
    'CategoryRefDTO',
    'ProductDTO',
    'CategoryDTO',
    'CatalogueDTO',
    'FilterOptionsDTO',
    'ProductFilterDTO',
    'CartItemDTO',
    'ShippingRateDTO',
    'ShippingFormDTO',
    'OrderItemDTO',
    'OrderCreateDTO',
    'OrderCreatedDTO',
    'PaymentIntentDTO',
    'PaymentConfirmationDTO',
    'PaymentVerifyDTO',
    'PaymentPrefillDTO',
    'PaymentWidgetOptionsDTO',
    'WidgetResultDTO',
    'CheckoutResultDTO',
    'NotificationDTO',
    'NotificationSnapshotDTO',
    'PushMessageDTO',
    'FeedStateDTO',
    'NotificationPreferenceDTO',
    'UserDTO',
    'AuthResponseDTO',
    'WishlistItemDTO',
    'CurrencyDTO',
]
