"""
Checkout Form Validation

Runs entirely client-side before any payment request is made. Checks run in a
fixed order and the first failing check decides the single message shown:
required fields, e-mail, phone, shipping method.
"""

import logging
import re

from models.shipping import ShippingFormDTO, ShippingRateDTO

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[+]?[(]?[0-9]{3}[)]?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}$")

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
INVALID_PHONE_MESSAGE = "Please enter a valid phone number"
MISSING_RATE_MESSAGE = "Please select a shipping method"


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.match(email) is not None


def is_valid_phone(phone: str) -> bool:
    """
    Whitespace is ignored, so "+91 98765 43210" is accepted.

    Example:
        >>> is_valid_phone("555-123-4567")
        True
        >>> is_valid_phone("12345")
        False
    """
    return PHONE_PATTERN.match(re.sub(r"\s", "", phone)) is not None


def validate_checkout_form(form: ShippingFormDTO, selected_rate: ShippingRateDTO | None) -> tuple[bool, str | None]:
    """
    Returns:
        tuple: (is_valid, error_message)
            - (True, None) if valid
            - (False, "message for the user") if invalid
    """
    missing = form.missing_fields()
    if missing:
        logger.debug(f"Checkout form missing fields: {missing}")
        return False, MISSING_FIELDS_MESSAGE

    if not is_valid_email(form.email):
        return False, INVALID_EMAIL_MESSAGE

    if not is_valid_phone(form.phone):
        return False, INVALID_PHONE_MESSAGE

    if selected_rate is None:
        return False, MISSING_RATE_MESSAGE

    return True, None
