import logging

from models.notification import NotificationPreferenceDTO
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


class NotificationPreferenceService:
    """Per-user notification switches. Always read and written as one record."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def get(self) -> NotificationPreferenceDTO:
        data = await self.api.get("/notifications/preferences")
        return NotificationPreferenceDTO.model_validate(data or {})

    async def save(self, preferences: NotificationPreferenceDTO) -> NotificationPreferenceDTO:
        payload = preferences.model_dump(exclude={"id", "user_id"})
        data = await self.api.put("/notifications/preferences", payload)
        saved = NotificationPreferenceDTO.model_validate(data) if data else preferences
        logger.info(f"[Preferences] Saved notification preferences for user {saved.user_id}")
        return saved
