"""
Unit Tests: CheckoutOrchestrator

Tests for services/checkout.py covering:
- Item set resolution (full cart / buy-now)
- Shipping rate calculation, fallback and newest-wins
- Form validation before any payment request
- Payment flow: success, dismissal, order/intent failures, verification failure
- Single payment attempt in flight, detaching the view
"""

import asyncio

import pytest

from enums.checkout_state import CheckoutState
from exceptions.api import ApiException
from exceptions.checkout import InvalidCheckoutStateException, PaymentInProgressException
from models.payment import PaymentConfirmationDTO, WidgetResultDTO
from services.cart import CartStore
from services.checkout import CheckoutOrchestrator
from services.order import OrderService
from services.payment import PaymentService
from services.shipping import ShippingRateService

COURIER_RATES = [
    {"courier_name": "BlueDart", "rate": 95.0, "currency": "INR", "estimated_days": 3, "service_type": "air", "courier_company_id": 6},
    {"courier_name": "Delhivery", "rate": 70.0, "currency": "INR", "estimated_days": 6, "service_type": "surface", "courier_company_id": 9},
]

CONFIRMATION = PaymentConfirmationDTO(
    razorpay_order_id="order_rzp_1",
    razorpay_payment_id="pay_29QQoUBi66xm2f",
    razorpay_signature="9ef4dffbfd84f1318f6739a3ce19f9d85851857ae648f114332d8401e0949a3d",
)


class FakeApi:
    """Answers the checkout endpoints and records every call."""

    def __init__(self):
        self.calls: list[tuple[str, str, object]] = []
        self.rates = COURIER_RATES
        self.rates_error: Exception | None = None
        self.order_error: Exception | None = None
        self.order_response = {"id": 55, "status": "pending_payment"}
        self.intent_response = {"id": "order_rzp_1", "amount": 0, "currency": "INR"}
        self.verify_response = {"success": True}

    def paths(self, method: str) -> list[str]:
        return [path for call_method, path, _ in self.calls if call_method == method]

    def body(self, path: str):
        return next(body for _, call_path, body in self.calls if call_path == path)

    async def get(self, path, params=None):
        self.calls.append(("GET", path, params))
        if path == "/shipping/calculate-rates":
            if self.rates_error:
                raise self.rates_error
            return {"rates": self.rates}
        raise AssertionError(f"unexpected GET {path}")

    async def post(self, path, json_body=None):
        self.calls.append(("POST", path, json_body))
        if path == "/orders":
            if self.order_error:
                raise self.order_error
            return self.order_response
        if path == "/payments/create-intent":
            return self.intent_response
        if path == "/payments/verify":
            return self.verify_response
        raise AssertionError(f"unexpected POST {path}")


class FakeWidget:
    def __init__(self, result: WidgetResultDTO | None = None):
        self.result = result or WidgetResultDTO(confirmation=CONFIRMATION)
        self.opened = []
        self.gate: asyncio.Future | None = None

    async def open(self, options):
        self.opened.append(options)
        if self.gate is not None:
            return await self.gate
        return self.result


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def widget():
    return FakeWidget()


@pytest.fixture
def cart(storage, make_product):
    cart = CartStore(storage)
    shawl = make_product(1, price=1000.0, stock=5)
    cart.add_to_cart(shawl, "M", "Red")
    cart.add_to_cart(shawl, "M", "Red")
    cart.add_to_cart(make_product(7, price=2400.0, stock=2), "S", "Blue")
    return cart


@pytest.fixture
def make_checkout(cart, fake_api, widget, logged_in_session):
    def _make(razorpay_key: str = "rzp_test_key"):
        return CheckoutOrchestrator(
            cart,
            ShippingRateService(fake_api),
            OrderService(fake_api),
            PaymentService(fake_api),
            widget,
            logged_in_session,
            razorpay_key=razorpay_key,
            currency_code="INR",
        )

    return _make


async def fill_form(checkout, **overrides):
    fields = dict(
        name="Asha Rao",
        email="asha@example.com",
        phone="9876543210",
        address="12 MG Road",
        city="Mumbai",
        state="MH",
        country="IN",
        zip="400001",
    )
    fields.update(overrides)
    await checkout.update_shipping_form(**fields)


class TestItemSet:

    @pytest.mark.asyncio
    async def test_full_cart_by_default(self, make_checkout):
        checkout = make_checkout()

        items = checkout.start()

        assert [item.product.id for item in items] == [1, 7]
        assert checkout.subtotal == pytest.approx(2 * 1000.0 + 2400.0)
        assert checkout.state == CheckoutState.ADDRESS_ENTRY

    @pytest.mark.asyncio
    async def test_buy_now_uses_only_that_line(self, make_checkout):
        checkout = make_checkout()

        items = checkout.start(buy_now_product_id=7)

        assert [(item.product.id, item.quantity) for item in items] == [(7, 1)]
        assert checkout.subtotal == pytest.approx(2400.0)

    @pytest.mark.asyncio
    async def test_buy_now_for_product_not_in_cart_is_empty(self, make_checkout):
        checkout = make_checkout()

        assert checkout.start(buy_now_product_id=99) == []


class TestShippingRates:

    @pytest.mark.asyncio
    async def test_first_rate_is_preselected(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start()

        await fill_form(checkout)

        assert [rate.courier_name for rate in checkout.rates] == ["BlueDart", "Delhivery"]
        assert checkout.selected_rate.courier_name == "BlueDart"
        params = fake_api.body("/shipping/calculate-rates")
        assert params["delivery_pin"] == "400001"
        assert params["pickup_pin"] == "110001"

    @pytest.mark.asyncio
    async def test_failed_lookup_falls_back(self, make_checkout, fake_api):
        fake_api.rates_error = ApiException("Shiprocket unavailable", 503, "/shipping/calculate-rates")
        checkout = make_checkout()
        checkout.start()

        await fill_form(checkout, zip="400001")

        assert [(rate.courier_name, rate.rate, rate.estimated_days) for rate in checkout.rates] == [
            ("Standard Shipping", 150, 5),
            ("Express Shipping", 300, 2),
        ]
        assert checkout.selected_rate.service_type == "standard"
        assert checkout.total == pytest.approx(2 * 1000.0 + 2400.0 + 150)

    @pytest.mark.asyncio
    async def test_empty_result_falls_back(self, make_checkout, fake_api):
        fake_api.rates = []
        checkout = make_checkout()
        checkout.start()

        await fill_form(checkout)

        assert checkout.selected_rate.courier_name == "Standard Shipping"

    @pytest.mark.asyncio
    async def test_short_postal_code_does_not_trigger_lookup(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start()

        await fill_form(checkout, zip="400")

        assert fake_api.paths("GET") == []
        assert checkout.selected_rate is None

    @pytest.mark.asyncio
    async def test_other_fields_do_not_trigger_lookup(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        await checkout.update_shipping_form(name="Asha R.")

        assert len(fake_api.paths("GET")) == 1

    @pytest.mark.asyncio
    async def test_newest_lookup_wins(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start()
        release_first = asyncio.Event()
        original_get = fake_api.get

        async def slow_first_get(path, params=None):
            if params["delivery_pin"] == "400001":
                await release_first.wait()
                return {"rates": [COURIER_RATES[1]]}
            return await original_get(path, params)

        fake_api.get = slow_first_get
        first = asyncio.create_task(fill_form(checkout, zip="400001"))
        await asyncio.sleep(0)
        await fill_form(checkout, zip="560001")
        release_first.set()
        await first

        assert checkout.selected_rate.courier_name == "BlueDart"

    @pytest.mark.asyncio
    async def test_rate_can_be_changed(self, make_checkout):
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        checkout.select_rate(1)

        assert checkout.shipping_cost == 70.0


class TestValidation:

    @pytest.mark.asyncio
    async def test_invalid_form_makes_no_request(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout, email="not-an-email")

        result = await checkout.submit_payment()

        assert result.success is False
        assert result.message == "Please enter a valid email address"
        assert fake_api.paths("POST") == []
        assert checkout.state == CheckoutState.ADDRESS_ENTRY
        assert checkout.submitting is False

    @pytest.mark.asyncio
    async def test_missing_rate(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout, zip="400")

        result = await checkout.submit_payment()

        assert result.message == "Please select a shipping method"

    @pytest.mark.asyncio
    async def test_empty_item_set(self, make_checkout, fake_api):
        checkout = make_checkout()
        checkout.start(buy_now_product_id=99)
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.message == "Your cart is empty"
        assert fake_api.paths("POST") == []


class TestPaymentFlow:

    @pytest.mark.asyncio
    async def test_successful_payment_clears_cart(self, make_checkout, fake_api, cart, widget):
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.success is True
        assert result.state == CheckoutState.SUCCESS
        assert result.redirect_url == "/checkout/success?orderId=55"
        assert fake_api.paths("POST") == ["/orders", "/payments/create-intent", "/payments/verify"]
        assert cart.items == []

        order = fake_api.body("/orders")
        assert order["status"] == "pending_payment"
        assert order["total_amount"] == pytest.approx(4400.0 + 95.0)
        assert order["shipping_cost"] == 95.0
        assert order["user_id"] == 7
        assert [item["product_id"] for item in order["items"]] == [1, 7]

        options = widget.opened[0]
        assert options.amount == 449500
        assert options.order_id == "order_rzp_1"
        assert options.description == "Order #55"
        assert options.prefill.contact == "9876543210"

        verify = fake_api.body("/payments/verify")
        assert verify["order_id"] == 55
        assert verify["razorpay_payment_id"] == CONFIRMATION.razorpay_payment_id

    @pytest.mark.asyncio
    async def test_buy_now_success_keeps_rest_of_cart(self, make_checkout, fake_api, cart):
        checkout = make_checkout()
        checkout.start(buy_now_product_id=7)
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.success is True
        assert [(line.product.id, line.quantity) for line in cart.items] == [(1, 2)]
        assert [item["product_id"] for item in fake_api.body("/orders")["items"]] == [7]
        assert fake_api.body("/orders")["total_amount"] == pytest.approx(2400.0 + 95.0)

    @pytest.mark.asyncio
    async def test_dismissal_returns_to_address_entry(self, make_checkout, fake_api, cart, widget):
        widget.result = WidgetResultDTO(dismissed=True)
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.success is False
        assert result.message is None
        assert checkout.state == CheckoutState.ADDRESS_ENTRY
        assert checkout.submitting is False
        assert "/payments/verify" not in fake_api.paths("POST")
        assert cart.total_items == 3

    @pytest.mark.asyncio
    async def test_order_failure_is_retryable(self, make_checkout, fake_api, cart):
        fake_api.order_error = ApiException("Insufficient stock for Pashmina #7", 400, "/orders")
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        failed = await checkout.submit_payment()

        assert failed.state == CheckoutState.FAILED
        assert failed.message == "Insufficient stock for Pashmina #7"
        assert failed.can_retry is True
        assert checkout.submitting is False
        assert cart.total_items == 3

        fake_api.order_error = None
        retried = await checkout.submit_payment()

        assert retried.success is True

    @pytest.mark.asyncio
    async def test_missing_intent_id(self, make_checkout, fake_api):
        fake_api.intent_response = {}
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.message == "Failed to create payment intent"
        assert result.can_retry is True

    @pytest.mark.asyncio
    async def test_missing_gateway_key(self, make_checkout, fake_api):
        checkout = make_checkout(razorpay_key="")
        checkout.start()
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.message == "Payment configuration error"
        assert "/payments/create-intent" not in fake_api.paths("POST")

    @pytest.mark.asyncio
    async def test_verification_failure_is_final(self, make_checkout, fake_api, cart):
        fake_api.verify_response = {"success": False}
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        result = await checkout.submit_payment()

        assert result.state == CheckoutState.FAILED
        assert result.message == "Payment verification failed. Please contact support."
        assert result.can_retry is False
        assert cart.total_items == 3
        with pytest.raises(InvalidCheckoutStateException):
            await checkout.submit_payment()


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_second_attempt_while_in_flight_is_refused(self, make_checkout, widget):
        widget.gate = asyncio.get_running_loop().create_future()
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        first = asyncio.create_task(checkout.submit_payment())
        while not widget.opened:
            await asyncio.sleep(0)

        with pytest.raises(PaymentInProgressException):
            await checkout.submit_payment()

        widget.gate.set_result(WidgetResultDTO(dismissed=True))
        await first
        assert checkout.submitting is False

    @pytest.mark.asyncio
    async def test_detached_checkout_ignores_late_widget_result(self, make_checkout, fake_api, widget, cart):
        widget.gate = asyncio.get_running_loop().create_future()
        checkout = make_checkout()
        checkout.start()
        await fill_form(checkout)

        attempt = asyncio.create_task(checkout.submit_payment())
        while not widget.opened:
            await asyncio.sleep(0)
        checkout.detach()
        widget.gate.set_result(WidgetResultDTO(confirmation=CONFIRMATION))
        result = await attempt

        assert result.success is False
        assert checkout.state == CheckoutState.PAYMENT_PENDING
        assert "/payments/verify" not in fake_api.paths("POST")
        assert cart.total_items == 3
