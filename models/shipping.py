from typing import ClassVar

from pydantic import BaseModel


class ShippingRateDTO(BaseModel):
    """One courier option returned by the rate service. Never persisted."""
    courier_name: str
    rate: float  # Reference currency
    currency: str = "INR"
    estimated_days: int
    service_type: str
    courier_company_id: int | None = None


class ShippingFormDTO(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    zip: str = ""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("name", "email", "phone", "address", "city", "state", "country", "zip")

    def missing_fields(self) -> list[str]:
        return [field for field in self.REQUIRED_FIELDS if not getattr(self, field).strip()]
