"""
Checkout Orchestrator

Drives one checkout view from the item set to a verified payment:

    LOADING -> ADDRESS_ENTRY -> PAYMENT_PENDING -> VERIFYING -> SUCCESS
                    ^                  |               |
                    +--- dismissed ----+               |
                                       v               v
                                     FAILED (retry)  FAILED (final)

Steps of submit_payment():
1. Create a pending_payment order on the server
2. Create the gateway payment intent for the same total
3. Open the hosted widget and wait for it to report back
4. Verify the widget's signed confirmation on the server
5. Remove the bought lines from the cart and hand back the success redirect

Failures in 1-3 leave the checkout retryable. A failed verification is final:
money may have moved, so the user is sent to support instead of paying again.
"""

import logging

import config
from enums.checkout_state import CheckoutState
from exceptions.base import StorefrontException
from exceptions.cart import CartItemNotFoundException
from exceptions.checkout import (
    CheckoutValidationException,
    EmptyCheckoutException,
    InvalidCheckoutStateException,
    PaymentInProgressException,
)
from exceptions.payment import PaymentConfigurationException, PaymentVerificationException
from models.cart_item import CartItemDTO
from models.checkout import CheckoutResultDTO
from models.payment import PaymentPrefillDTO, PaymentWidgetOptionsDTO
from models.shipping import ShippingFormDTO, ShippingRateDTO
from services.cart import CartStore
from services.currency import CurrencyConverter
from services.order import OrderService
from services.payment import PaymentService
from services.payment_widget import PaymentWidget
from services.session import SessionContext
from services.shipping import ShippingRateService
from utils.error_handler import handle_service_error
from utils.validation import validate_checkout_form

logger = logging.getLogger(__name__)


class CheckoutOrchestrator:

    def __init__(
        self,
        cart: CartStore,
        shipping: ShippingRateService,
        orders: OrderService,
        payments: PaymentService,
        widget: PaymentWidget,
        session: SessionContext,
        razorpay_key: str | None = None,
        currency_code: str | None = None
    ):
        self.cart = cart
        self.shipping = shipping
        self.orders = orders
        self.payments = payments
        self.widget = widget
        self.session = session
        self.razorpay_key = config.RAZORPAY_KEY_ID if razorpay_key is None else razorpay_key
        self.currency_code = currency_code or config.REFERENCE_CURRENCY

        self.state = CheckoutState.LOADING
        self.form = ShippingFormDTO()
        self.rates: list[ShippingRateDTO] = []
        self.selected_rate: ShippingRateDTO | None = None
        self.buy_now_product_id: int | None = None
        self.submitting = False
        self.can_retry = True
        self.error: str | None = None
        self.order_id: int | None = None

        self._buy_now_line: CartItemDTO | None = None
        self._rate_request_seq = 0
        self._detached = False

    # --- Item set ---------------------------------------------------------

    def start(self, buy_now_product_id: int | None = None) -> list[CartItemDTO]:
        """
        Resolve the item set and open the address form.

        In buy-now mode the item set is exactly the first cart line of that
        product; the rest of the cart is left alone.
        """
        self.state = CheckoutState.LOADING
        self.buy_now_product_id = buy_now_product_id
        self._buy_now_line = None
        if buy_now_product_id is not None:
            try:
                self._buy_now_line = self._find_buy_now_line(buy_now_product_id)
            except CartItemNotFoundException as e:
                logger.warning(f"[Checkout] {e}, nothing to check out")
        self.state = CheckoutState.ADDRESS_ENTRY
        logger.info(f"[Checkout] Started with {len(self.items)} lines (buy_now={buy_now_product_id})")
        return self.items

    def _find_buy_now_line(self, product_id: int) -> CartItemDTO:
        line = self.cart.find(product_id)
        if line is None:
            raise CartItemNotFoundException(product_id)
        return line.model_copy(deep=True)

    @property
    def is_buy_now(self) -> bool:
        return self.buy_now_product_id is not None

    @property
    def items(self) -> list[CartItemDTO]:
        if self.is_buy_now:
            return [self._buy_now_line] if self._buy_now_line else []
        return self.cart.items

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def shipping_cost(self) -> float:
        return self.selected_rate.rate if self.selected_rate else 0.0

    @property
    def total(self) -> float:
        return self.subtotal + self.shipping_cost

    # --- Shipping ---------------------------------------------------------

    async def update_shipping_form(self, **fields: str) -> None:
        """
        Apply form edits. Changing country or postal code recalculates the
        rates once both are filled in and the postal code is long enough.
        """
        previous = (self.form.country, self.form.zip)
        self.form = self.form.model_copy(update=fields)
        self.error = None
        if (self.form.country, self.form.zip) != previous and self._rates_computable():
            await self.recalculate_rates()

    def _rates_computable(self) -> bool:
        return bool(self.form.country) and len(self.form.zip) >= config.SHIPPING_MIN_POSTAL_CODE_LENGTH

    async def recalculate_rates(self) -> list[ShippingRateDTO]:
        """Only the newest of overlapping lookups gets to set the rates."""
        self._rate_request_seq += 1
        request_seq = self._rate_request_seq
        rates = await self.shipping.get_rates_or_fallback(self.form.zip)
        if self._detached or request_seq != self._rate_request_seq:
            logger.debug(f"[Checkout] Discarding rate result #{request_seq}")
            return self.rates
        self.rates = rates
        self.selected_rate = rates[0] if rates else None
        return self.rates

    def select_rate(self, index: int) -> ShippingRateDTO:
        self.selected_rate = self.rates[index]
        return self.selected_rate

    # --- Payment ----------------------------------------------------------

    def validate(self) -> None:
        """
        Raises:
            EmptyCheckoutException: If there is nothing to buy
            CheckoutValidationException: With the first failing form check
        """
        if not self.items:
            raise EmptyCheckoutException()
        is_valid, message = validate_checkout_form(self.form, self.selected_rate)
        if not is_valid:
            raise CheckoutValidationException(message)

    def _ensure_can_submit(self):
        if self.submitting:
            raise PaymentInProgressException()
        if self.state == CheckoutState.ADDRESS_ENTRY:
            return
        if self.state == CheckoutState.FAILED and self.can_retry:
            return
        raise InvalidCheckoutStateException(self.state.value, "submit payment")

    async def submit_payment(self) -> CheckoutResultDTO:
        """
        Run one payment attempt to completion.

        Returns:
            CheckoutResultDTO with the message to show and, on success, the redirect

        Raises:
            PaymentInProgressException: If an attempt is already in flight
            InvalidCheckoutStateException: If the checkout is not accepting payments
        """
        self._ensure_can_submit()

        try:
            self.validate()
        except (CheckoutValidationException, EmptyCheckoutException) as e:
            self.error = handle_service_error(e)
            return self._result(success=False)

        items = self.items
        total = self.total
        self.submitting = True
        self.error = None
        self.state = CheckoutState.PAYMENT_PENDING

        try:
            order_id = await self.orders.create(
                OrderService.build_order(items, self.form, self.selected_rate, total, self.currency_code, self.session.user_id)
            )
            self.order_id = order_id
            if not self.razorpay_key:
                raise PaymentConfigurationException()
            intent = await self.payments.create_intent(total, self.currency_code, order_id)
            result = await self.widget.open(self._widget_options(order_id, intent.id, total))
        except StorefrontException as e:
            return self._fail(e, can_retry=True)

        if self._detached:
            return self._detached_result()

        if result.dismissed or result.confirmation is None:
            logger.info(f"[Checkout] Widget dismissed for order {order_id}")
            self.state = CheckoutState.ADDRESS_ENTRY
            self.submitting = False
            return self._result(success=False)

        self.state = CheckoutState.VERIFYING
        try:
            await self.payments.verify(result.confirmation, order_id)
        except PaymentVerificationException as e:
            return self._fail(e, can_retry=False)

        self._finalize_cart()
        if self._detached:
            return self._detached_result()

        self.state = CheckoutState.SUCCESS
        self.submitting = False
        logger.info(f"[Checkout] Order {order_id} paid")
        return self._result(success=True, redirect_url=f"{config.CHECKOUT_SUCCESS_PATH}?orderId={order_id}")

    def _widget_options(self, order_id: int, gateway_order_id: str, total: float) -> PaymentWidgetOptionsDTO:
        return PaymentWidgetOptionsDTO(
            key=self.razorpay_key,
            amount=CurrencyConverter.to_minor_units(total),
            currency=self.currency_code,
            name=config.STORE_NAME,
            description=f"Order #{order_id}",
            order_id=gateway_order_id,
            prefill=PaymentPrefillDTO(name=self.form.name, email=self.form.email, contact=self.form.phone),
            theme={"color": config.THEME_COLOR},
        )

    def _finalize_cart(self):
        """Buy-now removes only the bought variant line, otherwise the cart is emptied."""
        if self.is_buy_now and self._buy_now_line:
            line = self._buy_now_line
            self.cart.remove_from_cart(line.product.id, line.selected_size, line.selected_color)
        else:
            self.cart.clear_cart()

    def _fail(self, exception: StorefrontException, can_retry: bool) -> CheckoutResultDTO:
        if self._detached:
            logger.info(f"[Checkout] Ignoring late failure of detached checkout: {exception}")
            return self._detached_result()
        self.error = handle_service_error(exception)
        self.state = CheckoutState.FAILED
        self.can_retry = can_retry
        self.submitting = False
        logger.error(f"[Checkout] Payment attempt failed (order={self.order_id}, retry={can_retry}): {exception}")
        return self._result(success=False)

    def _result(self, success: bool, redirect_url: str | None = None) -> CheckoutResultDTO:
        return CheckoutResultDTO(
            success=success,
            state=self.state,
            order_id=self.order_id,
            message=self.error,
            redirect_url=redirect_url,
            can_retry=self.can_retry,
        )

    def _detached_result(self) -> CheckoutResultDTO:
        return CheckoutResultDTO(success=False, state=self.state, order_id=self.order_id, can_retry=False)

    def detach(self) -> None:
        """The view went away: results arriving from now on change nothing here."""
        self._detached = True
