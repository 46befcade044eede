from pydantic import BaseModel, Field, model_validator

from enums.order_status import OrderStatus


class OrderItemDTO(BaseModel):
    product_id: int
    quantity: int
    price: float
    color: str
    size: str


class OrderCreateDTO(BaseModel):
    user_id: int | None = None
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    total_amount: float
    shipping_cost: float
    currency: str
    shipping_name: str
    shipping_email: str
    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_country: str
    shipping_zip: str
    shipping_phone: str
    payment_method: str = "razorpay"
    items: list[OrderItemDTO] = Field(default_factory=list)


class OrderCreatedDTO(BaseModel):
    """The server answers with either `id` or `order_id`."""
    id: int | None = None
    order_id: int | None = None
    status: str | None = None
    message: str | None = None

    @model_validator(mode="after")
    def _copy_id(self):
        if self.order_id is None and self.id is not None:
            self.order_id = self.id
        return self
