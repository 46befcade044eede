import logging

from pydantic import TypeAdapter, ValidationError

from exceptions.base import StorefrontException
from models.wishlist import WishlistItemDTO
from services.api_client import ApiClient
from services.session import SessionContext
from utils.optimistic import OptimisticResult, apply_optimistic

logger = logging.getLogger(__name__)

_wishlist_adapter = TypeAdapter(list[WishlistItemDTO])


class WishlistStore:
    """
    Server-backed wishlist keyed by product id.

    Adds wait for the server and refetch; removals are optimistic and roll
    back when the server refuses.
    """

    def __init__(self, api: ApiClient, session: SessionContext):
        self.api = api
        self.session = session
        self.items: list[WishlistItemDTO] = []
        self.loading = False
        self.version = 0

    def is_in_wishlist(self, product_id: int) -> bool:
        return any(item.product_id == product_id for item in self.items)

    def snapshot(self) -> list[WishlistItemDTO]:
        return list(self.items)

    def restore(self, snapshot: list[WishlistItemDTO]) -> None:
        self.items = list(snapshot)
        self.version += 1

    async def refresh(self) -> list[WishlistItemDTO]:
        if not self.session.is_authenticated:
            self.items = []
            self.version += 1
            return self.items

        self.loading = True
        try:
            data = await self.api.get("/wishlist")
            self.items = _wishlist_adapter.validate_python(data or [])
            self.version += 1
        except (StorefrontException, ValidationError) as e:
            logger.error(f"[Wishlist] Failed to fetch wishlist: {e}")
        finally:
            self.loading = False
        return self.items

    async def add(self, product_id: int) -> None:
        """
        Raises:
            ApiException: If the server rejects the add
        """
        await self.api.post("/wishlist", {"product_id": product_id})
        logger.info(f"[Wishlist] Added product {product_id}")
        await self.refresh()

    async def remove(self, product_id: int) -> OptimisticResult:

        def drop_locally():
            self.items = [item for item in self.items if item.product_id != product_id]
            self.version += 1

        return await apply_optimistic(
            self,
            drop_locally,
            lambda: self.api.delete(f"/wishlist/{product_id}"),
            label=f"wishlist remove {product_id}"
        )
