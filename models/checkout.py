from pydantic import BaseModel

from enums.checkout_state import CheckoutState


class CheckoutResultDTO(BaseModel):
    """What the checkout view needs after a payment attempt."""
    success: bool
    state: CheckoutState
    order_id: int | None = None
    message: str | None = None
    redirect_url: str | None = None
    can_retry: bool = True
