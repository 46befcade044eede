"""
Push Channel

One WebSocket connection to the push service, owned by a single task that
runs the whole lifecycle:

    DISCONNECTED -> CONNECTING -> CONNECTED -> RECONNECTING -> CONNECTING ...

After any close the task waits WS_RECONNECT_DELAY_SECONDS and tries again,
forever, with the same delay. Before every attempt the session is checked:
without a credential the task stops in DISCONNECTED instead of connecting.
Because the reconnect wait lives inside the one task, there is never more than
one pending reconnect.

Frames are handed to on_frame() untouched; splitting and parsing them is the
feed's job.
"""

import asyncio
import logging
from typing import Any, Callable

import aiohttp

import config
from enums.connection_state import ConnectionState
from services.session import SessionContext

logger = logging.getLogger(__name__)


class PushChannel:

    def __init__(
        self,
        session: SessionContext,
        on_frame: Callable[[str], None],
        on_state_change: Callable[[ConnectionState], None] | None = None,
        url: str | None = None,
        reconnect_delay: float | None = None,
        http: aiohttp.ClientSession | None = None
    ):
        self.session = session
        self.on_frame = on_frame
        self.on_state_change = on_state_change
        self.url = url or config.WS_URL
        self.reconnect_delay = config.WS_RECONNECT_DELAY_SECONDS if reconnect_delay is None else reconnect_delay
        self.state = ConnectionState.DISCONNECTED
        self._http = http
        self._owns_http = http is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the connection task. A no-op while it is already running."""
        if self.is_running:
            return
        self._stopped = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        self._stopped = True
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._owns_http and self._http is not None and not self._http.closed:
            await self._http.close()
            self._http = None
        self._set_state(ConnectionState.DISCONNECTED)

    async def send(self, message: dict[str, Any]) -> bool:
        """Send a JSON message if connected. Returns False when it was not sent."""
        if self._ws is None or self._ws.closed:
            return False
        await self._ws.send_json(message)
        return True

    def _set_state(self, state: ConnectionState):
        if state == self.state:
            return
        logger.debug(f"[Push] {self.state.value} -> {state.value}")
        self.state = state
        if self.on_state_change:
            try:
                self.on_state_change(state)
            except Exception as e:
                logger.error(f"[Push] State listener failed: {e}")

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession()
            self._owns_http = True
        return self._http

    async def _run(self):
        while not self._stopped:
            if not self.session.is_authenticated:
                logger.info("[Push] No credential, not connecting")
                break

            self._set_state(ConnectionState.CONNECTING)
            try:
                await self._connect_once()
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                logger.warning(f"[Push] Connection to {self.url} failed: {type(e).__name__}: {e}")

            if self._stopped:
                break
            self._set_state(ConnectionState.RECONNECTING)
            logger.info(f"[Push] Reconnecting in {self.reconnect_delay}s")
            await asyncio.sleep(self.reconnect_delay)

        self._set_state(ConnectionState.DISCONNECTED)

    async def _connect_once(self):
        user_id = self.session.user_id
        params = {"user_id": str(user_id)} if user_id is not None else None
        async with self._get_http().ws_connect(self.url, params=params, heartbeat=30) as ws:
            self._ws = ws
            self._set_state(ConnectionState.CONNECTED)
            logger.info(f"[Push] Connected (user {user_id})")
            try:
                if user_id is not None:
                    await ws.send_json({"type": "auth", "user_id": user_id})
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self._deliver(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.warning(f"[Push] Socket error: {ws.exception()}")
                        break
            finally:
                self._ws = None
        logger.info("[Push] Disconnected")

    def _deliver(self, frame: str):
        try:
            self.on_frame(frame)
        except Exception as e:
            logger.error(f"[Push] Frame handler failed: {e}")
