# Session Channel — one reusable STOMP session with keep-alive and reconnect.
# Created: 2026-10-05
#
# State machine:
#   NO_SESSION --with_session--> CONNECTED --socket lost / mark_stale--> STALE
#   STALE --with_session--> (dispose old) --> CONNECTED
#   any failure during connect or callback --> NO_SESSION
#
# Connection acquisition is serialized by a lock so concurrent callers share
# one connect instead of racing to replace the handle. Callbacks run outside
# the lock and may use the session concurrently.

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import websockets

from clientlib.auth.token_store import TokenStore
from clientlib.config import Settings, get_settings
from clientlib.messaging import stomp
from clientlib.messaging.stomp import StompSession

logger = logging.getLogger(__name__)

SessionCallback = Callable[[StompSession], Awaitable[Any]]
Connector = Callable[[str], Awaitable[StompSession]]


class ChannelState(str, Enum):
    NO_SESSION = "no_session"
    CONNECTED = "connected"
    STALE = "stale"


class SessionChannel:
    """Owns at most one live authenticated STOMP session.

    ``with_session()`` is best-effort: it never raises for connection or
    callback failures. It returns True when the callback completed and
    False when the channel degraded to NO_SESSION instead; the next call
    reconnects.

    Usage:
        channel = SessionChannel(store=TokenStore())
        ok = await channel.with_session(lambda s: s.convert_and_send("/app/ping", {}))
        await channel.close()
    """

    def __init__(
        self,
        url: str | None = None,
        store: TokenStore | None = None,
        settings: Settings | None = None,
        connector: Connector | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.url = url or self.settings.websocket_url
        self._store = store
        self._connector = connector or self._open
        self._session: StompSession | None = None
        self._state = ChannelState.NO_SESSION
        self._heartbeat: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ChannelState.CONNECTED

    @property
    def session(self) -> StompSession | None:
        return self._session

    @property
    def closed(self) -> bool:
        return self._closed

    async def _open(self, url: str) -> StompSession:
        auth = await self._store.load() if self._store is not None else None
        return await stomp.connect(
            url,
            token=auth.access_token if auth else None,
            heartbeat_ms=self.settings.heartbeat_ms,
            connect_timeout=self.settings.connect_timeout,
            on_close=self.mark_stale,
        )

    # -- public API --------------------------------------------------------

    async def with_session(self, callback: SessionCallback, url: str | None = None) -> bool:
        """Run *callback* against the live session, connecting if needed."""
        if self._closed:
            logger.warning("Session channel is closed; ignoring request")
            return False

        session: StompSession | None = None
        try:
            session = await self._acquire(url or self.url)
            await callback(session)
            return True
        except (OSError, websockets.ConnectionClosed) as e:
            logger.info("Connection closed unexpectedly: %s", e)
        except Exception as e:
            logger.warning("Error occurred. Disconnecting session: %r", e, exc_info=True)
        await self._drop(session)
        return False

    async def push(self, destination: str, payload: Any) -> bool:
        """JSON-serialize *payload* and SEND it to *destination*."""
        return await self.with_session(lambda s: s.convert_and_send(destination, payload))

    def mark_stale(self, session: StompSession | None = None) -> None:
        """Flag the current session unhealthy so the next call reconnects.

        With *session* given, only acts if it is still the current one.
        """
        if self._session is None or self._state is not ChannelState.CONNECTED:
            return
        if session is not None and session is not self._session:
            return
        logger.debug("Session marked stale")
        self._state = ChannelState.STALE

    async def close(self) -> None:
        """Disconnect and stop all background work. Safe to call repeatedly."""
        async with self._lock:
            self._closed = True
            session, self._session = self._session, None
            was_connected = self._state is ChannelState.CONNECTED
            self._state = ChannelState.NO_SESSION
            self._cancel_heartbeat()
            if session is not None and was_connected:
                await self._disconnect_quietly(session)

    # -- internals ---------------------------------------------------------

    async def _acquire(self, url: str) -> StompSession:
        async with self._lock:
            if self._closed:
                raise RuntimeError("Session channel is closed")

            if self._session is not None and self._state is ChannelState.CONNECTED:
                logger.debug("Session already exists and connected. Continuing execution.")
                return self._session

            if self._session is not None:
                logger.debug("Session exists, but disconnected. Creating a new connection...")
                await self._dispose()
            else:
                logger.debug("Session doesn't exist, connecting to %s", url)

            session = await self._connector(url)
            self._session = session
            self._state = ChannelState.CONNECTED
            self._heartbeat = asyncio.create_task(self._keep_alive(session))
            logger.debug("Connection established.")
            return session

    async def _drop(self, session: StompSession | None) -> None:
        """Tear down after a failure, unless another caller already replaced *session*."""
        if session is None:
            return
        async with self._lock:
            if session is not self._session:
                return
            await self._dispose()

    async def _dispose(self) -> None:
        session, self._session = self._session, None
        self._state = ChannelState.NO_SESSION
        self._cancel_heartbeat()
        if session is not None:
            await self._disconnect_quietly(session)

    def _cancel_heartbeat(self) -> None:
        heartbeat, self._heartbeat = self._heartbeat, None
        if heartbeat is not None:
            heartbeat.cancel()

    @staticmethod
    async def _disconnect_quietly(session: StompSession) -> None:
        try:
            await session.disconnect()
        except Exception as e:
            logger.debug("Ignoring error while disconnecting: %s", e)

    async def _keep_alive(self, session: StompSession) -> None:
        interval = self.settings.heartbeat_interval
        while True:
            await asyncio.sleep(interval)
            try:
                await session.send_heartbeat()
            except Exception as e:
                logger.warning("Error sending heartbeat: %s", e)
