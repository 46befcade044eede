"""
Unit Tests: handle_service_error()

Tests for utils/error_handler.py.
"""

from exceptions import (
    ApiConnectionException,
    ApiException,
    CheckoutValidationException,
    PaymentConfigurationException,
    PaymentVerificationException,
    ShippingRateException,
    StorefrontException,
)
from utils.error_handler import UNEXPECTED_ERROR_MESSAGE, handle_service_error, handle_unexpected_error


class TestHandleServiceError:

    def test_server_message_is_passed_through(self):
        assert handle_service_error(ApiException("Insufficient stock", 400, "/orders")) == "Insufficient stock"

    def test_validation_message_is_passed_through(self):
        exc = CheckoutValidationException("Please enter a valid email address")

        assert handle_service_error(exc) == "Please enter a valid email address"

    def test_connection_errors_get_friendly_message(self):
        message = handle_service_error(ApiConnectionException("/orders", "ClientConnectorError"))

        assert "ClientConnectorError" not in message
        assert "connection" in message

    def test_mapped_messages(self):
        assert handle_service_error(PaymentConfigurationException()) == "Payment configuration error"
        assert handle_service_error(PaymentVerificationException(12, "order_abc")) == \
            "Payment verification failed. Please contact support."

    def test_template_is_formatted_with_details(self):
        message = handle_service_error(ShippingRateException("400001", "timeout"))

        assert message == "Could not calculate shipping rates for 400001"

    def test_unmapped_exception_uses_own_message(self):
        assert handle_service_error(StorefrontException("Custom")) == "Custom"

    def test_unexpected_error(self):
        assert handle_unexpected_error(KeyError("x")) == UNEXPECTED_ERROR_MESSAGE
