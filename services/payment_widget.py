"""
Hosted payment widget bridge.

The gateway's checkout widget runs outside this process (a browser page or
webview). open() publishes the widget options under the gateway order id and
waits until the widget reports back through the callback router
(web/payment_callback.py): a signed confirmation, a dismissal, or nothing at
all before the timeout, which counts as a dismissal.
"""

import asyncio
import logging
from typing import Protocol

import config
from models.payment import PaymentConfirmationDTO, PaymentWidgetOptionsDTO, WidgetResultDTO

logger = logging.getLogger(__name__)


class PaymentWidget(Protocol):

    async def open(self, options: PaymentWidgetOptionsDTO) -> WidgetResultDTO: ...


class HostedPaymentWidget:

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or config.PAYMENT_WIDGET_TIMEOUT_SECONDS
        self._pending: dict[str, tuple[PaymentWidgetOptionsDTO, asyncio.Future]] = {}

    def pending_options(self, gateway_order_id: str) -> PaymentWidgetOptionsDTO | None:
        entry = self._pending.get(gateway_order_id)
        return entry[0] if entry else None

    async def open(self, options: PaymentWidgetOptionsDTO) -> WidgetResultDTO:
        future = asyncio.get_running_loop().create_future()
        self._pending[options.order_id] = (options, future)
        logger.info(f"[Widget] Waiting for payment of gateway order {options.order_id}")
        try:
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[Widget] Gateway order {options.order_id} timed out after {self.timeout}s, treating as dismissed")
            return WidgetResultDTO(dismissed=True)
        finally:
            self._pending.pop(options.order_id, None)

    def resolve(self, confirmation: PaymentConfirmationDTO) -> bool:
        """Hand a signed confirmation to the waiting checkout. False if nobody waits for it."""
        return self._complete(confirmation.razorpay_order_id, WidgetResultDTO(confirmation=confirmation))

    def dismiss(self, gateway_order_id: str) -> bool:
        return self._complete(gateway_order_id, WidgetResultDTO(dismissed=True))

    def _complete(self, gateway_order_id: str, result: WidgetResultDTO) -> bool:
        entry = self._pending.get(gateway_order_id)
        if entry is None or entry[1].done():
            logger.warning(f"[Widget] No open widget session for gateway order {gateway_order_id}")
            return False
        entry[1].set_result(result)
        return True
