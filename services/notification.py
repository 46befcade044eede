"""
Notification Feed

In-app inbox merged from two sources:
- Snapshots: GET /notifications/user, replacing local state wholesale
- Live pushes: "notification" messages from the PushChannel, prepended

unread_count is kept equal to the number of notifications without read_at
after every operation. Mutations (mark read, mark all read, delete) change
local state first and roll back if the server refuses.

Subscribers get a FeedStateDTO after every change.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from pydantic import ValidationError

from enums.connection_state import ConnectionState
from enums.optimistic_outcome import OptimisticOutcome
from enums.session_event import SessionEvent
from exceptions.base import StorefrontException
from models.notification import FeedStateDTO, NotificationDTO, NotificationSnapshotDTO, PushMessageDTO
from services.api_client import ApiClient
from services.push_channel import PushChannel
from services.session import SessionContext
from utils.optimistic import OptimisticResult, apply_optimistic

logger = logging.getLogger(__name__)

FeedListener = Callable[[FeedStateDTO], None]


class SystemNotifier(Protocol):
    """Native notification surface (desktop toast, OS notification centre)."""
    permission: str  # "granted", "denied" or "default"

    def show(self, title: str, body: str) -> None: ...


class NotificationFeed:

    def __init__(
        self,
        api: ApiClient,
        session: SessionContext,
        channel: PushChannel | None = None,
        notifier: SystemNotifier | None = None
    ):
        self.api = api
        self.session = session
        self.notifier = notifier
        self.channel = channel or PushChannel(session, self.handle_frame)
        self.channel.on_frame = self.handle_frame
        self.channel.on_state_change = self._on_connection_state

        self.notifications: list[NotificationDTO] = []
        self.unread_count = 0
        self.loading = False
        self.version = 0

        self._listeners: list[FeedListener] = []
        self._live_during_load: list[NotificationDTO] | None = None
        self._loads_in_flight = 0
        self._unsubscribe_session: Callable[[], None] | None = None
        self._background: set[asyncio.Task] = set()

    # --- Lifecycle --------------------------------------------------------

    async def start(self) -> None:
        """Follow the session: load and connect now if logged in, and on every later login."""
        if self._unsubscribe_session is None:
            self._unsubscribe_session = self.session.subscribe(self._on_session_event)
        if self.session.is_authenticated:
            await self.refresh()
            self.channel.start()

    async def close(self) -> None:
        if self._unsubscribe_session:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        await self.channel.stop()
        for task in list(self._background):
            task.cancel()

    def _on_session_event(self, event: SessionEvent):
        if event == SessionEvent.LOGIN:
            self._spawn(self._resume())
        elif event == SessionEvent.LOGOUT:
            self._replace([], 0)
            self._spawn(self.channel.stop())

    async def _resume(self):
        await self.refresh()
        self.channel.start()

    def _spawn(self, coro):
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # --- Subscribers ------------------------------------------------------

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def state(self) -> FeedStateDTO:
        return FeedStateDTO(
            notifications=list(self.notifications),
            unread_count=self.unread_count,
            loading=self.loading,
            connection_state=self.channel.state,
        )

    def _publish(self):
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"[Feed] Listener {listener!r} failed: {e}")

    def _on_connection_state(self, _state: ConnectionState):
        self._publish()

    # --- Snapshot ---------------------------------------------------------

    async def refresh(self) -> None:
        """
        Replace local state with the server snapshot.

        Pushes that arrive while any load is in flight are kept on top of the
        snapshot if the snapshot does not contain them yet. Overlapping loads
        share one buffer, cleared by the last load to finish.
        """
        if not self.session.is_authenticated:
            self._replace([], 0)
            return

        if self._loads_in_flight == 0:
            self._live_during_load = []
        self._loads_in_flight += 1
        self.loading = True
        self._publish()
        try:
            data = await self.api.get("/notifications/user")
            snapshot = NotificationSnapshotDTO.model_validate(data or {})
        except (StorefrontException, ValidationError) as e:
            logger.error(f"[Feed] Failed to load notifications: {e}")
            snapshot = None
        finally:
            arrivals = list(reversed(self._live_during_load or []))
            self._finish_load()

        if snapshot is None:
            self._publish()
            return

        server_unread = sum(1 for notification in snapshot.notifications if notification.is_unread)
        if snapshot.unread_count != server_unread:
            logger.warning(
                f"[Feed] Server unread_count {snapshot.unread_count} does not match its list ({server_unread})"
            )
        known_ids = {notification.id for notification in snapshot.notifications}
        live = [n for n in arrivals if n.id not in known_ids]
        merged = live + snapshot.notifications
        unread = sum(1 for notification in merged if notification.is_unread)
        self._replace(merged, unread)
        logger.info(f"[Feed] Loaded {len(merged)} notifications ({unread} unread)")

    def _finish_load(self):
        self._loads_in_flight -= 1
        if self._loads_in_flight == 0:
            self._live_during_load = None
            self.loading = False

    # --- Live stream ------------------------------------------------------

    def handle_frame(self, frame: str) -> None:
        """
        A frame may carry several newline-separated JSON messages. Each is
        parsed on its own, so one malformed message never drops the others.
        """
        for line in frame.split("\n"):
            if not line.strip():
                continue
            try:
                message = PushMessageDTO.model_validate(json.loads(line))
            except (ValueError, ValidationError) as e:
                logger.warning(f"[Feed] Dropping unparsable push message: {e}")
                continue
            if message.type == "notification":
                self._receive(message)
            else:
                logger.debug(f"[Feed] Ignoring push message of type {message.type}")

    def _receive(self, message: PushMessageDTO):
        if message.id is None:
            logger.warning("[Feed] Dropping notification push without id")
            return
        if any(notification.id == message.id for notification in self.notifications):
            logger.debug(f"[Feed] Notification {message.id} already in feed")
            return

        notification = message.to_notification()
        self.notifications = [notification] + self.notifications
        self.unread_count += 1
        self.version += 1
        if self._live_during_load is not None:
            self._live_during_load.append(notification)
        self._publish()
        self._show_native(notification)

    def _show_native(self, notification: NotificationDTO):
        if self.notifier is None or self.notifier.permission != "granted":
            return
        try:
            self.notifier.show(notification.title or "New Notification", notification.message)
        except Exception as e:
            logger.warning(f"[Feed] Native notification failed: {e}")

    # --- Optimistic mutations ---------------------------------------------

    def snapshot(self) -> tuple[list[NotificationDTO], int]:
        return list(self.notifications), self.unread_count

    def restore(self, snapshot: tuple[list[NotificationDTO], int]) -> None:
        notifications, unread_count = snapshot
        self._replace(list(notifications), unread_count)

    def _replace(self, notifications: list[NotificationDTO], unread_count: int):
        self.notifications = notifications
        self.unread_count = unread_count
        self.version += 1
        self._publish()

    def _find(self, notification_id: int) -> NotificationDTO | None:
        return next((n for n in self.notifications if n.id == notification_id), None)

    async def mark_as_read(self, notification_id: int) -> OptimisticResult:
        """Marking an already-read notification changes nothing and sends nothing."""
        notification = self._find(notification_id)
        if notification is None or not notification.is_unread:
            return OptimisticResult(outcome=OptimisticOutcome.CONFIRMED)

        def mark_locally():
            read_at = datetime.now(timezone.utc)
            self._replace(
                [n.model_copy(update={"read_at": read_at}) if n.id == notification_id else n for n in self.notifications],
                self.unread_count - 1
            )

        return await apply_optimistic(
            self,
            mark_locally,
            lambda: self.api.put(f"/notifications/{notification_id}/read"),
            label=f"mark notification {notification_id} read"
        )

    async def mark_all_as_read(self) -> OptimisticResult:
        if self.unread_count == 0 and not any(n.is_unread for n in self.notifications):
            return OptimisticResult(outcome=OptimisticOutcome.CONFIRMED)

        def mark_locally():
            read_at = datetime.now(timezone.utc)
            self._replace(
                [n.model_copy(update={"read_at": read_at}) if n.is_unread else n for n in self.notifications],
                0
            )

        return await apply_optimistic(
            self,
            mark_locally,
            lambda: self.api.put("/notifications/read-all"),
            label="mark all notifications read"
        )

    async def delete_notification(self, notification_id: int) -> OptimisticResult:
        notification = self._find(notification_id)
        if notification is None:
            return OptimisticResult(outcome=OptimisticOutcome.CONFIRMED)

        def delete_locally():
            self._replace(
                [n for n in self.notifications if n.id != notification_id],
                self.unread_count - (1 if notification.is_unread else 0)
            )

        return await apply_optimistic(
            self,
            delete_locally,
            lambda: self.api.delete(f"/notifications/{notification_id}"),
            label=f"delete notification {notification_id}"
        )
