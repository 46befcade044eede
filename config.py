import os
import sys
import logging

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason: Exception | str, expected: str):
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


def _positive_number(name: str, default: str, cast=int):
    try:
        value = cast(os.environ.get(name, default))
        if value <= 0:
            raise ValueError(f"{name} must be positive (got: {value})")
        return value
    except ValueError as e:
        _exit_with_config_error(name, e, f"Positive {cast.__name__} (default: {default})")


# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(os.environ.get("RUNTIME_ENVIRONMENT", "DEV"))
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    _exit_with_config_error("RUNTIME_ENVIRONMENT", e, ", ".join(valid_values))

# Remote API
API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:8080/api").rstrip("/")
HTTP_TIMEOUT_SECONDS = _positive_number("HTTP_TIMEOUT_SECONDS", "10", float)

# Push channel
WS_URL = os.environ.get("WS_URL", "ws://localhost:8080/ws")
WS_RECONNECT_DELAY_SECONDS = _positive_number("WS_RECONNECT_DELAY_SECONDS", "5", float)

# Durable client-side storage (Redis namespace stands in for browser localStorage)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = _positive_number("REDIS_PORT", "6379")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None
REDIS_DB = int(os.environ.get("REDIS_DB", "0"))
STORAGE_NAMESPACE = os.environ.get("STORAGE_NAMESPACE", "pashmiya")
CART_STORAGE_KEY = os.environ.get("CART_STORAGE_KEY", "pashmina-cart")
CURRENCY_STORAGE_KEY = os.environ.get("CURRENCY_STORAGE_KEY", "pashmiya-currency")
TOKEN_STORAGE_KEY = "token"
USER_STORAGE_KEY = "user"

# Currency
# All prices travel in the reference currency; display currencies only multiply.
REFERENCE_CURRENCY = os.environ.get("REFERENCE_CURRENCY", "INR").upper()
CLIENT_LOCALE = os.environ.get("CLIENT_LOCALE") or os.environ.get("LANG", "en_US").split(".")[0]

# Shipping
SHIPPING_PICKUP_PIN = os.environ.get("SHIPPING_PICKUP_PIN", "110001")
SHIPPING_DEFAULT_WEIGHT = _positive_number("SHIPPING_DEFAULT_WEIGHT", "0.5", float)
SHIPPING_MIN_POSTAL_CODE_LENGTH = _positive_number("SHIPPING_MIN_POSTAL_CODE_LENGTH", "4")

# Payment gateway (Razorpay hosted checkout)
RAZORPAY_KEY_ID = os.environ.get("RAZORPAY_KEY_ID")
STORE_NAME = os.environ.get("STORE_NAME", "Pashmiya")
THEME_COLOR = os.environ.get("THEME_COLOR", "#1c1917")
PAYMENT_WIDGET_TIMEOUT_SECONDS = _positive_number("PAYMENT_WIDGET_TIMEOUT_SECONDS", "900", float)
CHECKOUT_SUCCESS_PATH = os.environ.get("CHECKOUT_SUCCESS_PATH", "/checkout/success")

# Callback web app
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "127.0.0.1")
WEBAPP_PORT = _positive_number("WEBAPP_PORT", "8000")

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV else "INFO")
LOG_RETENTION_DAYS = _positive_number(
    "LOG_RETENTION_DAYS", "5" if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV else "30"
)
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"

if RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD and not RAZORPAY_KEY_ID:
    logging.warning("RAZORPAY_KEY_ID is not set - checkout payments will be refused")
