"""
Cart Store

In-memory ordered collection of cart lines, mirrored to local storage.

Every mutation is applied synchronously, in call order, and then schedules a
fire-and-forget write of the full cart snapshot. Only the newest snapshot is
ever written: a write that finds a newer version already scheduled skips
itself. Reads always go to memory, never to storage.

Stock is the value known when the product was added. The cart does not ask the
server again before checkout; the server is the authority on availability.
"""

import asyncio
import logging

from pydantic import TypeAdapter, ValidationError

import config
from models.cart_item import CartItemDTO
from models.product import ProductDTO
from services.storage import LocalStorage

logger = logging.getLogger(__name__)

_cart_adapter = TypeAdapter(list[CartItemDTO])


def _stock_ceiling(product: ProductDTO) -> float:
    return float("inf") if product.stock is None else product.stock


class CartStore:

    def __init__(self, storage: LocalStorage, storage_key: str | None = None):
        self.storage = storage
        self.storage_key = storage_key or config.CART_STORAGE_KEY
        self._items: list[CartItemDTO] = []
        self._version = 0
        self._pending_writes: set[asyncio.Task] = set()

    @property
    def items(self) -> list[CartItemDTO]:
        return list(self._items)

    @property
    def version(self) -> int:
        return self._version

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def total_price(self) -> float:
        return sum(item.line_total for item in self._items)

    def find(self, product_id: int, size: str | None = None, color: str | None = None) -> CartItemDTO | None:
        """First line matching the product id (narrowed by variant when given)."""
        return next((item for item in self._items if item.matches(product_id, size, color)), None)

    async def load(self) -> None:
        """
        Rehydrate the last saved snapshot. Called once at session start.

        An unreadable snapshot is discarded and the cart starts empty.
        """
        try:
            raw = await self.storage.get_json(self.storage_key)
            items = _cart_adapter.validate_python(raw) if raw else []
        except (ValueError, ValidationError) as e:
            logger.warning(f"[Cart] Failed to parse saved cart, starting empty: {e}")
            items = []
        self._items = items
        self._version += 1
        logger.info(f"[Cart] Loaded {len(self._items)} lines ({self.total_items} items)")

    def add_to_cart(self, product: ProductDTO, size: str, color: str) -> CartItemDTO | None:
        """
        Add one unit of a variant.

        At the stock ceiling the call is a silent no-op (soft limit, no error).

        Returns:
            The affected line, or None when nothing could be added
        """
        existing = self.find(product.id, size, color)
        if existing:
            if existing.quantity + 1 > _stock_ceiling(product):
                logger.debug(f"[Cart] Product {product.id} ({size}/{color}) at stock cap {product.stock}")
                return existing
            existing.quantity += 1
            existing.product = product
            self._changed()
            return existing

        if _stock_ceiling(product) < 1:
            logger.debug(f"[Cart] Product {product.id} is out of stock, not added")
            return None

        item = CartItemDTO(product=product, quantity=1, selected_size=size, selected_color=color)
        self._items.append(item)
        self._changed()
        return item

    def remove_from_cart(self, product_id: int, size: str | None = None, color: str | None = None) -> int:
        """
        Remove cart lines of a product.

        Without size/color every variant of the product is removed (id-only
        contract). With them, only the matching line is removed.

        Returns:
            Number of lines removed
        """
        before = len(self._items)
        self._items = [item for item in self._items if not item.matches(product_id, size, color)]
        removed = before - len(self._items)
        if removed:
            self._changed()
        return removed

    def update_quantity(self, product_id: int, quantity: int, size: str | None = None, color: str | None = None) -> None:
        """
        Set the quantity of matching lines directly (not incrementally).

        Zero or negative removes the lines; otherwise the value is clamped to
        each line's stock ceiling.
        """
        if quantity <= 0:
            self.remove_from_cart(product_id, size, color)
            return

        changed = False
        for item in self._items:
            if item.matches(product_id, size, color):
                new_quantity = int(min(quantity, _stock_ceiling(item.product)))
                if new_quantity >= 1 and new_quantity != item.quantity:
                    item.quantity = new_quantity
                    changed = True
        if changed:
            self._changed()

    def clear_cart(self) -> None:
        if not self._items:
            return
        self._items = []
        self._changed()

    def snapshot(self) -> list[dict]:
        return [item.model_dump(mode="json") for item in self._items]

    def _changed(self):
        self._version += 1
        self._schedule_persist()

    def _schedule_persist(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("[Cart] No running event loop, cart snapshot not persisted")
            return
        task = loop.create_task(self._persist(self._version, self.snapshot()))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, version: int, snapshot: list[dict]):
        if version != self._version:
            return  # A newer snapshot is already scheduled
        try:
            await self.storage.set_json(self.storage_key, snapshot)
        except Exception as e:
            logger.error(f"[Cart] Failed to persist cart snapshot v{version}: {e}")

    async def flush(self) -> None:
        """Wait for scheduled snapshot writes to finish."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))
