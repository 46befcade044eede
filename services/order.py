import logging

from pydantic import ValidationError

from enums.order_status import OrderStatus
from exceptions.payment import OrderCreationException
from models.cart_item import CartItemDTO
from models.order import OrderCreateDTO, OrderCreatedDTO, OrderItemDTO
from models.shipping import ShippingFormDTO, ShippingRateDTO
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


class OrderService:

    def __init__(self, api: ApiClient):
        self.api = api

    @staticmethod
    def build_order(
        items: list[CartItemDTO],
        form: ShippingFormDTO,
        rate: ShippingRateDTO,
        total: float,
        currency: str,
        user_id: int | None = None
    ) -> OrderCreateDTO:
        """Order payload for the checkout item set; prices are reference-currency unit prices."""
        return OrderCreateDTO(
            user_id=user_id,
            status=OrderStatus.PENDING_PAYMENT,
            total_amount=total,
            shipping_cost=rate.rate,
            currency=currency,
            shipping_name=form.name,
            shipping_email=form.email,
            shipping_address=form.address,
            shipping_city=form.city,
            shipping_state=form.state,
            shipping_country=form.country,
            shipping_zip=form.zip,
            shipping_phone=form.phone,
            items=[
                OrderItemDTO(
                    product_id=item.product.id,
                    quantity=item.quantity,
                    price=item.product.price,
                    color=item.selected_color,
                    size=item.selected_size,
                )
                for item in items
            ],
        )

    async def create(self, order: OrderCreateDTO) -> int:
        """
        Create a pending_payment order.

        Returns:
            The internal order id

        Raises:
            ApiException: If the server rejects the order
            OrderCreationException: If the response carries no order id
        """
        response = await self.api.post("/orders", order.model_dump(mode="json"))
        try:
            created = OrderCreatedDTO.model_validate(response or {})
        except ValidationError as e:
            raise OrderCreationException() from e
        if created.order_id is None:
            raise OrderCreationException()
        logger.info(f"[Order] Created order {created.order_id} ({len(order.items)} lines, total {order.total_amount} {order.currency})")
        return created.order_id
