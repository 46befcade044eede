from datetime import datetime

from pydantic import BaseModel

from models.product import ProductDTO


class WishlistItemDTO(BaseModel):
    id: int
    user_id: int | None = None
    product_id: int
    product: ProductDTO | None = None
    created_at: datetime | None = None
