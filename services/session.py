"""
Session context shared by every auth-aware component.

Holds the bearer token and the cached user profile, mirrors both into local
storage, and tells subscribers when the session starts or ends. A 401 from
any API call ends the session through expire(), so components never have to
handle authentication failures per call.
"""

import logging
from typing import Callable

from pydantic import ValidationError

import config
from enums.session_event import SessionEvent
from models.user import UserDTO
from services.storage import LocalStorage

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionEvent], None]


class SessionContext:

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.token: str | None = None
        self.user: UserDTO | None = None
        self._listeners: list[SessionListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def user_id(self) -> int | None:
        return self.user.id if self.user else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: SessionEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"[Session] Listener {listener!r} failed on {event.value}: {e}")

    async def restore(self) -> None:
        """Rehydrate token and user from storage once at startup."""
        self.token = await self.storage.get_item(config.TOKEN_STORAGE_KEY)
        try:
            raw_user = await self.storage.get_json(config.USER_STORAGE_KEY)
            self.user = UserDTO.model_validate(raw_user) if raw_user else None
        except (ValueError, ValidationError) as e:
            logger.warning(f"[Session] Discarding unreadable cached user: {e}")
            self.user = None
        if self.token:
            logger.info(f"[Session] Restored session for user {self.user_id}")

    async def establish(self, token: str, user: UserDTO) -> None:
        self.token = token
        self.user = user
        await self.storage.set_item(config.TOKEN_STORAGE_KEY, token)
        await self.storage.set_json(config.USER_STORAGE_KEY, user.model_dump(mode="json"))
        logger.info(f"[Session] Logged in as user {user.id}")
        self._notify(SessionEvent.LOGIN)

    async def update_user(self, user: UserDTO) -> None:
        self.user = user
        await self.storage.set_json(config.USER_STORAGE_KEY, user.model_dump(mode="json"))

    async def expire(self) -> None:
        """
        End the session: clear token and user everywhere and broadcast LOGOUT.

        Idempotent. A burst of concurrent 401s broadcasts once.
        """
        was_authenticated = self.token is not None or self.user is not None
        self.token = None
        self.user = None
        await self.storage.remove_item(config.TOKEN_STORAGE_KEY)
        await self.storage.remove_item(config.USER_STORAGE_KEY)
        if was_authenticated:
            logger.info("[Session] Session ended")
            self._notify(SessionEvent.LOGOUT)

    def __repr__(self) -> str:
        return f"SessionContext(user_id={self.user_id}, authenticated={self.is_authenticated})"
