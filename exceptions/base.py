"""
Base exception class for the storefront client.
"""


class StorefrontException(Exception):
    """
    Root of every error the storefront client raises on purpose.

    The message is what a customer may see (the checkout error line, a JSON
    error body); details carry ids and states for the logs only.

    Attributes:
        message: Customer-safe error message
        details: Extra context (product ids, gateway order ids, HTTP status)
        http_status: Status the callback web app answers with when this
            error escapes a route
    """

    http_status: int = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def is_client_error(self) -> bool:
        """True for errors caused by the caller's input or state, not by the shop API."""
        return 400 <= self.http_status < 500

    def to_response(self) -> dict:
        """JSON body in the shape the shop API itself uses for errors."""
        return {"error": self.message, "type": self.__class__.__name__}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        context = ', '.join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.__class__.__name__}({self.message!r}{', ' + context if context else ''})"
