import logging

from exceptions.base import StorefrontException
from models.user import AuthResponseDTO, UserDTO
from services.api_client import ApiClient
from services.session import SessionContext

logger = logging.getLogger(__name__)


class AuthService:
    """Login, registration and profile calls; the session holds the result."""

    def __init__(self, api: ApiClient, session: SessionContext):
        self.api = api
        self.session = session

    async def login(self, email: str, password: str) -> UserDTO:
        """
        Raises:
            ApiException: With the server's message on bad credentials
        """
        data = await self.api.post("/auth/login", {"email": email, "password": password})
        response = AuthResponseDTO.model_validate(data)
        await self.session.establish(response.token, response.user)
        return response.user

    async def register(self, name: str, email: str, password: str, phone: str | None = None) -> UserDTO:
        payload = {"name": name, "email": email, "password": password}
        if phone:
            payload["phone"] = phone
        data = await self.api.post("/auth/register", payload)
        response = AuthResponseDTO.model_validate(data)
        await self.session.establish(response.token, response.user)
        return response.user

    async def logout(self) -> None:
        """Tell the server, then end the session locally whatever it answered."""
        try:
            await self.api.post("/auth/logout")
        except StorefrontException as e:
            logger.warning(f"[Auth] Server logout failed, ending session locally: {e}")
        finally:
            await self.session.expire()

    async def load(self) -> UserDTO | None:
        """
        Restore the stored session and re-read the profile. A stored token the
        server no longer accepts ends the session.
        """
        await self.session.restore()
        if not self.session.is_authenticated:
            return None
        try:
            return await self.refresh_user()
        except StorefrontException as e:
            logger.error(f"[Auth] Failed to load user: {e}")
            await self.session.expire()
            return None

    async def refresh_user(self) -> UserDTO:
        user = UserDTO.model_validate(await self.api.get("/user/me"))
        await self.session.update_user(user)
        return user

    async def update_user(self, name: str | None = None, phone: str | None = None) -> UserDTO:
        changes = {key: value for key, value in {"name": name, "phone": phone}.items() if value is not None}
        user = UserDTO.model_validate(await self.api.put("/user/me", changes))
        await self.session.update_user(user)
        return user
