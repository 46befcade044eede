"""
Custom exceptions for the storefront client.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the client.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── ApiException
│   ├── UnauthorizedException
│   └── ApiConnectionException
├── CartException
│   └── CartItemNotFoundException
├── CheckoutException
│   ├── CheckoutValidationException
│   ├── EmptyCheckoutException
│   ├── PaymentInProgressException
│   └── InvalidCheckoutStateException
├── PaymentException
│   ├── OrderCreationException
│   ├── PaymentIntentException
│   ├── PaymentConfigurationException
│   └── PaymentVerificationException
└── ShippingException
    └── ShippingRateException

Usage:
------
Services raise specific exceptions:
    raise PaymentIntentException(order_id=123)

The checkout view turns them into its single inline message:
    try:
        await orchestrator.submit_payment()
    except StorefrontException as e:
        error = handle_service_error(e)
"""

from .base import StorefrontException
from .api import ApiException, UnauthorizedException, ApiConnectionException
from .cart import CartException, CartItemNotFoundException
from .checkout import (
    CheckoutException,
    CheckoutValidationException,
    EmptyCheckoutException,
    PaymentInProgressException,
    InvalidCheckoutStateException
)
from .payment import (
    PaymentException,
    OrderCreationException,
    PaymentIntentException,
    PaymentConfigurationException,
    PaymentVerificationException
)
from .shipping import ShippingException, ShippingRateException

__all__ = [
    # Base
    'StorefrontException',

    # API
    'ApiException',
    'UnauthorizedException',
    'ApiConnectionException',

    # Cart
    'CartException',
    'CartItemNotFoundException',

    # Checkout
    'CheckoutException',
    'CheckoutValidationException',
    'EmptyCheckoutException',
    'PaymentInProgressException',
    'InvalidCheckoutStateException',

    # Payment
    'PaymentException',
    'OrderCreationException',
    'PaymentIntentException',
    'PaymentConfigurationException',
    'PaymentVerificationException',

    # Shipping
    'ShippingException',
    'ShippingRateException',
]
