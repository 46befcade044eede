"""
Payment widget callback router.

The hosted checkout widget runs in the customer's browser. It fetches the
options of the open widget session, and reports back here when the customer
pays or closes it. Each report completes the HostedPaymentWidget session the
checkout orchestrator is waiting on.

Signature checking is not done here: the confirmation is forwarded as-is to
POST /payments/verify, where the server holds the gateway secret.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from models.payment import PaymentConfirmationDTO, PaymentWidgetOptionsDTO
from services.payment_widget import HostedPaymentWidget

logger = logging.getLogger(__name__)

payment_callback_router = APIRouter(prefix="/payments", tags=["payments"])


def _widget(request: Request) -> HostedPaymentWidget:
    return request.app.state.payment_widget


@payment_callback_router.get("/{razorpay_order_id}/options", response_model=PaymentWidgetOptionsDTO)
async def get_widget_options(razorpay_order_id: str, request: Request):
    options = _widget(request).pending_options(razorpay_order_id)
    if options is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No open payment for this order")
    return options


@payment_callback_router.post("/callback")
async def payment_callback(confirmation: PaymentConfirmationDTO, request: Request):
    logger.info(f"[Callback] Payment {confirmation.razorpay_payment_id} for gateway order {confirmation.razorpay_order_id}")
    if not _widget(request).resolve(confirmation):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No open payment for this order")
    return {"status": "ok"}


@payment_callback_router.post("/{razorpay_order_id}/dismiss")
async def payment_dismissed(razorpay_order_id: str, request: Request):
    logger.info(f"[Callback] Widget for gateway order {razorpay_order_id} dismissed")
    if not _widget(request).dismiss(razorpay_order_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No open payment for this order")
    return {"status": "ok"}
