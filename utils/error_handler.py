"""
Error Handler Utility

Converts service exceptions into the single user-visible message a view shows
(checkout error banner, toast). Logging happens here so callers only have to
catch and display.

Usage:
    from utils.error_handler import handle_service_error

    try:
        await orchestrator.submit_payment()
    except StorefrontException as e:
        banner = handle_service_error(e)
"""

import logging

from exceptions import (
    StorefrontException,
    ApiException,
    UnauthorizedException,
    ApiConnectionException,
    CartItemNotFoundException,
    CheckoutValidationException,
    EmptyCheckoutException,
    PaymentInProgressException,
    InvalidCheckoutStateException,
    OrderCreationException,
    PaymentIntentException,
    PaymentConfigurationException,
    PaymentVerificationException,
    ShippingRateException,
)

UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


def handle_service_error(exception: StorefrontException) -> str:
    """
    Convert a service exception to its user-facing message.

    Messages come from the mapping below; a mapped value of None means the
    exception's own message is already user-facing (validation messages, the
    server's unwrapped `error` field).
    """
    logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    error_mapping = {
        # API exceptions
        UnauthorizedException: "Session expired. Please login again.",
        ApiConnectionException: "Could not reach the server. Please check your connection and try again.",
        ApiException: None,

        # Cart exceptions
        CartItemNotFoundException: "This item is no longer in your cart",

        # Checkout exceptions
        CheckoutValidationException: None,
        EmptyCheckoutException: "Your cart is empty",
        PaymentInProgressException: "A payment is already in progress",
        InvalidCheckoutStateException: "Checkout cannot continue right now. Please refresh and try again.",

        # Payment exceptions
        OrderCreationException: None,
        PaymentIntentException: "Failed to create payment intent",
        PaymentConfigurationException: "Payment configuration error",
        PaymentVerificationException: "Payment verification failed. Please contact support.",

        # Shipping exceptions
        ShippingRateException: "Could not calculate shipping rates for {delivery_pin}",
    }

    if type(exception) not in error_mapping:
        logging.error(f"Unmapped exception type: {type(exception).__name__}")
        return exception.message or UNEXPECTED_ERROR_MESSAGE

    template = error_mapping[type(exception)]
    if template is None:
        return exception.message or UNEXPECTED_ERROR_MESSAGE

    try:
        return template.format(**exception.details)
    except KeyError as e:
        logging.error(f"Missing format parameter in error message: {e}")
        return template


def handle_unexpected_error(exception: Exception) -> str:
    """
    Handle anything that is not a StorefrontException.

    Also logs the full traceback.
    """
    logging.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=True)
    return UNEXPECTED_ERROR_MESSAGE
