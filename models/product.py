from datetime import datetime

from pydantic import BaseModel, Field


class CategoryRefDTO(BaseModel):
    """Category label embedded in a product payload."""
    id: int | None = None
    name: str


class ProductDTO(BaseModel):
    id: int
    name: str
    price: float  # Reference currency, never converted in place
    description: str = ""
    image: str = ""
    images: list[str] = Field(default_factory=list)
    category_id: int | None = None
    category: CategoryRefDTO | None = None
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    stock: int | None = None  # Last known stock, None = unlimited
    is_featured: bool = False
    is_active: bool = True

    @property
    def category_label(self) -> str | None:
        return self.category.name if self.category else None


class CategoryDTO(BaseModel):
    id: int
    name: str
    slug: str | None = None
    description: str | None = None
    image: str | None = None
    is_active: bool = True


class CatalogueDTO(BaseModel):
    id: int
    name: str
    description: str = ""
    image: str = ""
    status: bool = True
    sort_order: int = 0
    products: list[ProductDTO] = Field(default_factory=list)
    created_at: datetime | None = None


class FilterOptionsDTO(BaseModel):
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    min_price: float = 0.0
    max_price: float = 0.0


class ProductFilterDTO(BaseModel):
    """Query filters for GET /products. Unset fields are not sent."""
    category: str | None = None
    featured: bool | None = None
    page: int | None = Field(default=None, gt=0)
    limit: int | None = Field(default=None, gt=0)
    sort: str | None = None
    order: str | None = None

    def to_query(self) -> dict[str, str]:
        query = {}
        if self.category:
            query["category"] = self.category
        if self.featured:
            query["featured"] = "true"
        if self.page:
            query["page"] = str(self.page)
        if self.limit:
            query["limit"] = str(self.limit)
        if self.sort:
            query["sort"] = self.sort
        if self.order:
            query["order"] = self.order
        return query
