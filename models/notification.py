from datetime import datetime, timezone

from pydantic import BaseModel, Field

from enums.connection_state import ConnectionState
from enums.notification_type import NotificationType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDTO(BaseModel):
    id: int
    user_id: int | None = None
    type: str = NotificationType.OTHER.value
    channel: str = "in_app"
    title: str = ""
    message: str = ""
    status: str = "sent"
    created_at: datetime = Field(default_factory=_utcnow)
    sent_at: datetime | None = None
    read_at: datetime | None = None

    @property
    def is_unread(self) -> bool:
        return self.read_at is None

    @property
    def notification_type(self) -> NotificationType:
        return NotificationType.from_tag(self.type)


class NotificationSnapshotDTO(BaseModel):
    notifications: list[NotificationDTO] = Field(default_factory=list)
    unread_count: int = 0


class PushMessageDTO(BaseModel):
    """One logical message out of a push frame."""
    type: str
    id: int | None = None
    title: str | None = None
    message: str | None = None
    notif_type: str | None = None
    channel: str | None = None
    created_at: datetime | None = None

    def to_notification(self) -> NotificationDTO:
        return NotificationDTO(
            id=self.id,
            type=self.notif_type or "notification",
            channel=self.channel or "in_app",
            title=self.title or "",
            message=self.message or "",
            status="sent",
            created_at=self.created_at or _utcnow(),
        )


class FeedStateDTO(BaseModel):
    """What subscribers (bell icon, notifications page) receive after each change."""
    notifications: list[NotificationDTO]
    unread_count: int
    loading: bool
    connection_state: ConnectionState

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED


class NotificationPreferenceDTO(BaseModel):
    """Single row per user, always saved as a whole."""
    id: int | None = None
    user_id: int | None = None
    order_created: bool = True
    order_shipped: bool = True
    order_delivered: bool = True
    order_status: bool = True
    low_stock: bool = False
    product_updates: bool = False
    newsletter: bool = False
    marketing: bool = False
    email_enabled: bool = True
    sms_enabled: bool = False
    push_enabled: bool = False
