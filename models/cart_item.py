# A cart line is one variant of a product: the same product in two sizes or two
# colors is two lines. Stock is the value known when the product was added and
# is NOT re-validated against the server before checkout.
from pydantic import BaseModel, Field

from models.product import ProductDTO


class CartItemDTO(BaseModel):
    product: ProductDTO
    quantity: int = Field(ge=1)
    selected_size: str
    selected_color: str

    @property
    def variant_key(self) -> tuple[int, str, str]:
        return self.product.id, self.selected_size, self.selected_color

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity

    def matches(self, product_id: int, size: str | None = None, color: str | None = None) -> bool:
        """
        Match by product id, narrowed by size/color when given.

        An id-only match covers every variant of the product.
        """
        if self.product.id != product_id:
            return False
        if size is not None and self.selected_size != size:
            return False
        if color is not None and self.selected_color != color:
            return False
        return True
