"""
Catalog Service

Read-only product browsing. List endpoints degrade to empty collections when
the API is unavailable or answers garbage, so a page can still render;
single-entity reads raise.
"""

import logging

from pydantic import TypeAdapter, ValidationError

from exceptions.api import ApiException
from models.product import CatalogueDTO, CategoryDTO, FilterOptionsDTO, ProductDTO, ProductFilterDTO
from services.api_client import ApiClient

logger = logging.getLogger(__name__)

_products_adapter = TypeAdapter(list[ProductDTO])
_categories_adapter = TypeAdapter(list[CategoryDTO])
_catalogues_adapter = TypeAdapter(list[CatalogueDTO])


def _unwrap_list(data, key: str) -> list:
    """Lists come either bare or wrapped as {key: [...], "total": N}."""
    if isinstance(data, dict):
        return data.get(key) or []
    return data or []


class CatalogService:

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_products(self, filters: ProductFilterDTO | None = None) -> list[ProductDTO]:
        query = filters.to_query() if filters else None
        try:
            data = await self.api.get("/products", params=query)
            return _products_adapter.validate_python(_unwrap_list(data, "products"))
        except (ApiException, ValidationError) as e:
            logger.error(f"[Catalog] Failed to fetch products: {e}")
            return []

    async def get_product(self, product_id: int) -> ProductDTO:
        return ProductDTO.model_validate(await self.api.get(f"/products/{product_id}"))

    async def search_products(self, query: str) -> list[ProductDTO]:
        if not query.strip():
            return []
        try:
            data = await self.api.get("/products/search", params={"q": query})
            return _products_adapter.validate_python(_unwrap_list(data, "products"))
        except (ApiException, ValidationError) as e:
            logger.error(f"[Catalog] Search for '{query}' failed: {e}")
            return []

    async def get_categories(self) -> list[CategoryDTO]:
        try:
            data = await self.api.get("/categories")
            return _categories_adapter.validate_python(_unwrap_list(data, "categories"))
        except (ApiException, ValidationError) as e:
            logger.error(f"[Catalog] Failed to fetch categories: {e}")
            return []

    async def get_filter_options(self) -> FilterOptionsDTO:
        try:
            data = await self.api.get("/filters")
            return FilterOptionsDTO.model_validate(data or {})
        except (ApiException, ValidationError) as e:
            logger.error(f"[Catalog] Failed to fetch filter options: {e}")
            return FilterOptionsDTO()

    async def get_catalogues(self, status: str | None = None, search: str | None = None) -> list[CatalogueDTO]:
        params = {key: value for key, value in {"status": status, "search": search}.items() if value}
        try:
            data = await self.api.get("/catalogues", params=params or None)
            return _catalogues_adapter.validate_python(_unwrap_list(data, "catalogues"))
        except (ApiException, ValidationError) as e:
            logger.error(f"[Catalog] Failed to fetch catalogues: {e}")
            return []

    async def get_catalogue(self, catalogue_id: int) -> CatalogueDTO:
        return CatalogueDTO.model_validate(await self.api.get(f"/catalogues/{catalogue_id}"))
