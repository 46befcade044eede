from pydantic import BaseModel


class UserDTO(BaseModel):
    id: int
    email: str
    name: str
    phone: str | None = None
    role: str = "customer"


class AuthResponseDTO(BaseModel):
    user: UserDTO
    token: str
