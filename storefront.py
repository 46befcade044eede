import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

import config
from exceptions.base import StorefrontException
from services.api_client import ApiClient
from services.auth import AuthService
from services.cart import CartStore
from services.catalog import CatalogService
from services.checkout import CheckoutOrchestrator
from services.currency import CurrencyService
from services.notification import NotificationFeed
from services.order import OrderService
from services.payment import PaymentService
from services.payment_widget import HostedPaymentWidget
from services.preferences import NotificationPreferenceService
from services.session import SessionContext
from services.shipping import ShippingRateService
from services.storage import LocalStorage
from services.wishlist import WishlistStore
from web.payment_callback import payment_callback_router


class Storefront:
    """Every long-lived client component, wired to one session and one storage namespace."""

    def __init__(self, redis: Redis, http_timeout: float | None = None):
        self.storage = LocalStorage(redis)
        self.session = SessionContext(self.storage)
        self.api = ApiClient(self.session, timeout=http_timeout)
        self.auth = AuthService(self.api, self.session)
        self.catalog = CatalogService(self.api)
        self.cart = CartStore(self.storage)
        self.currency = CurrencyService(self.storage)
        self.wishlist = WishlistStore(self.api, self.session)
        self.feed = NotificationFeed(self.api, self.session)
        self.preferences = NotificationPreferenceService(self.api)
        self.shipping = ShippingRateService(self.api)
        self.orders = OrderService(self.api)
        self.payments = PaymentService(self.api)
        self.payment_widget = HostedPaymentWidget()

    def new_checkout(self) -> CheckoutOrchestrator:
        """One orchestrator per checkout view."""
        return CheckoutOrchestrator(
            self.cart, self.shipping, self.orders, self.payments, self.payment_widget, self.session
        )

    async def start(self):
        await self.auth.load()
        await self.cart.load()
        await self.currency.load()
        await self.wishlist.refresh()
        await self.feed.start()
        logging.info(f"[Startup] Storefront client ready (user={self.session.user_id})")

    async def stop(self):
        await self.feed.close()
        await self.cart.flush()
        await self.api.close()


redis = Redis(host=config.REDIS_HOST, port=config.REDIS_PORT, password=config.REDIS_PASSWORD,
              db=config.REDIS_DB, decode_responses=True)
storefront = Storefront(redis)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await storefront.start()
    yield
    logging.warning('Shutting down..')
    await storefront.stop()
    await redis.aclose()
    logging.warning('Bye!')


app = FastAPI(lifespan=lifespan)
app.state.payment_widget = storefront.payment_widget
app.include_router(payment_callback_router)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "authenticated": storefront.session.is_authenticated,
        "push": storefront.feed.channel.state.value,
    }


@app.exception_handler(StorefrontException)
async def storefront_exception_handler(request: Request, exc: StorefrontException):
    log = logging.warning if exc.is_client_error else logging.error
    log(f"{exc.__class__.__name__} on {request.url.path}: {exc!r}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    logging.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"message": f"An error occurred: {str(exc)}"},
    )


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
