from pydantic import BaseModel, Field


class PaymentIntentDTO(BaseModel):
    """Gateway order created server-side for the checkout total."""
    id: str | None = None
    amount: int | None = None  # Minor units as echoed by the gateway
    currency: str | None = None
    receipt: str | None = None


class PaymentConfirmationDTO(BaseModel):
    """Signed fields the hosted widget hands back after a successful charge."""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentVerifyDTO(PaymentConfirmationDTO):
    order_id: int


class PaymentPrefillDTO(BaseModel):
    name: str
    email: str
    contact: str


class PaymentWidgetOptionsDTO(BaseModel):
    """Options the hosted checkout widget is opened with."""
    key: str
    amount: int  # Minor units (paise)
    currency: str
    name: str
    description: str
    order_id: str  # Gateway order id
    prefill: PaymentPrefillDTO
    theme: dict = Field(default_factory=dict)


class WidgetResultDTO(BaseModel):
    """Outcome of one widget session: a confirmation, or a dismissal."""
    confirmation: PaymentConfirmationDTO | None = None
    dismissed: bool = False
