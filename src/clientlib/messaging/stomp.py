# STOMP 1.2 over WebSocket — frame codec and a minimal client session.
# Created: 2026-10-05
#
# Frames are exchanged as WebSocket text messages, one frame per message.
# A message consisting only of EOLs is a heart-beat.

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
import logging
import urllib.parse
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Any

import websockets
from pydantic import BaseModel, TypeAdapter

logger = logging.getLogger(__name__)

NULL = "\x00"
EOL = "\n"

# CONNECT / CONNECTED headers are never escaped (STOMP 1.2 §"Value Encoding")
_UNESCAPED_COMMANDS = {"CONNECT", "CONNECTED"}

_ESCAPES = {"\\": "\\\\", "\r": "\\r", "\n": "\\n", ":": "\\c"}
_UNESCAPES = {"\\\\": "\\", "\\r": "\r", "\\n": "\n", "\\c": ":"}

HEARTBEAT_DESTINATION = "/heartbeat"


class StompError(Exception):
    """Server sent an ERROR frame or violated the protocol."""

    def __init__(self, message: str, frame: Frame | None = None):
        super().__init__(message)
        self.frame = frame


def _escape(value: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def _unescape(value: str) -> str:
    out = []
    i = 0
    while i < len(value):
        if value[i] == "\\":
            seq = value[i : i + 2]
            if seq not in _UNESCAPES:
                raise StompError(f"Invalid header escape sequence: {seq!r}")
            out.append(_UNESCAPES[seq])
            i += 2
        else:
            out.append(value[i])
            i += 1
    return "".join(out)


@dataclass
class Frame:
    command: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def encode(self) -> str:
        escape = self.command not in _UNESCAPED_COMMANDS
        lines = [self.command]
        for key, value in self.headers.items():
            if escape:
                key, value = _escape(key), _escape(value)
            lines.append(f"{key}:{value}")
        return EOL.join(lines) + EOL + EOL + self.body + NULL

    @classmethod
    def decode(cls, text: str) -> Frame | None:
        """Parse one frame. Returns None for a heart-beat."""
        text = text.lstrip("\r\n")
        if not text:
            return None

        head, sep, rest = text.partition("\n\n")
        if not sep:
            head, sep, rest = text.partition("\r\n\r\n")
        if not sep:
            raise StompError("Frame has no header terminator")

        lines = head.replace("\r\n", "\n").split("\n")
        command = lines[0]
        unescape = command not in _UNESCAPED_COMMANDS
        headers: dict[str, str] = {}
        for line in lines[1:]:
            key, colon, value = line.partition(":")
            if not colon:
                raise StompError(f"Malformed header line: {line!r}")
            if unescape:
                key, value = _unescape(key), _unescape(value)
            # Repeated headers: the first occurrence wins
            headers.setdefault(key, value)

        if "content-length" in headers:
            try:
                length = int(headers["content-length"])
                if length < 0:
                    raise ValueError("negative length")
                body = rest.encode("utf-8")[:length].decode("utf-8")
            except (ValueError, UnicodeDecodeError) as e:
                raise StompError(f"Bad content-length {headers['content-length']!r}: {e}") from e
        else:
            body, _, _ = rest.partition(NULL)
        return cls(command=command, headers=headers, body=body)


def heartbeat_header(interval_ms: int) -> str:
    return f"{interval_ms},{interval_ms}"


def _as_text(message: str | bytes) -> str:
    if isinstance(message, str):
        return message
    try:
        return message.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StompError(f"Frame is not valid UTF-8: {e}") from e


def topic_destination(topic: str) -> str:
    return f"/topic{topic}"


def to_json(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(by_alias=True)
    return json.dumps(payload)


class Subscription:
    """Async iterator over the bodies of MESSAGE frames for one subscription."""

    _END = object()

    def __init__(self, session: StompSession, sub_id: str, destination: str):
        self.session = session
        self.id = sub_id
        self.destination = destination
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

    def _deliver(self, body: str) -> None:
        self._queue.put_nowait(body)

    def _finish(self) -> None:
        self._queue.put_nowait(self._END)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> str:
        item = await self._queue.get()
        if item is self._END:
            raise StopAsyncIteration
        return item

    async def unsubscribe(self) -> None:
        await self.session.unsubscribe(self)


class StompSession:
    """An open STOMP session on a WebSocket connection.

    Incoming frames are read by a background task that routes MESSAGE frames
    to subscriptions and RECEIPT frames to waiting callers. ``on_close`` runs
    once when the connection ends for any reason other than ``disconnect()``.
    """

    def __init__(self, websocket: Any, on_close: Callable[[StompSession], None] | None = None):
        self._ws = websocket
        self._on_close = on_close
        self._ids = itertools.count()
        self._subscriptions: dict[str, Subscription] = {}
        self._receipts: dict[str, asyncio.Future[Frame]] = {}
        self._connected: asyncio.Future[Frame] = asyncio.get_running_loop().create_future()
        self._reader: asyncio.Task | None = None
        self._closing = False
        self.closed = False

    # -- lifecycle ---------------------------------------------------------

    async def _handshake(self, host: str, heartbeat_ms: int, timeout: float) -> None:
        self._reader = asyncio.create_task(self._read_loop())
        await self._send_frame(
            Frame(
                "CONNECT",
                {
                    "accept-version": "1.2",
                    "host": host,
                    "heart-beat": heartbeat_header(heartbeat_ms),
                },
            )
        )
        frame = await asyncio.wait_for(asyncio.shield(self._connected), timeout)
        logger.debug("STOMP session established (server %s)", frame.headers.get("server", "?"))

    async def _read_loop(self) -> None:
        try:
            async for message in self._ws:
                frame = Frame.decode(_as_text(message))
                if frame is not None:
                    self._dispatch(frame)
        except websockets.ConnectionClosed as e:
            logger.debug("WebSocket closed: %s", e)
        except (OSError, websockets.WebSocketException) as e:
            logger.warning("WebSocket read failed: %s", e)
        except StompError as e:
            logger.warning("Dropping STOMP connection: %s", e)
            self._fail_pending(e)
        finally:
            self._connection_lost()

    def _dispatch(self, frame: Frame) -> None:
        match frame.command:
            case "CONNECTED":
                if not self._connected.done():
                    self._connected.set_result(frame)
            case "MESSAGE":
                sub = self._subscriptions.get(frame.headers.get("subscription", ""))
                if sub is not None:
                    sub._deliver(frame.body)
            case "RECEIPT":
                future = self._receipts.pop(frame.headers.get("receipt-id", ""), None)
                if future is not None and not future.done():
                    future.set_result(frame)
            case "ERROR":
                message = frame.headers.get("message", "STOMP error")
                logger.warning("STOMP ERROR frame: %s %s", message, frame.body.strip())
                self._fail_pending(StompError(message, frame))
            case _:
                logger.debug("Ignoring STOMP frame %s", frame.command)

    def _fail_pending(self, error: StompError) -> None:
        if not self._connected.done():
            self._connected.set_exception(error)
        for future in self._receipts.values():
            if not future.done():
                future.set_exception(error)
        self._receipts.clear()

    def _connection_lost(self) -> None:
        was_open = not self.closed
        self.closed = True
        if not self._connected.done():
            self._connected.set_exception(StompError("Connection closed before CONNECTED"))
        self._fail_pending(StompError("Connection closed"))
        for sub in self._subscriptions.values():
            sub._finish()
        self._subscriptions.clear()
        if was_open and not self._closing and self._on_close is not None:
            self._on_close(self)

    async def disconnect(self, receipt_timeout: float = 2.0) -> None:
        """Send DISCONNECT, wait briefly for its receipt and close the socket."""
        if self._closing:
            return
        self._closing = True
        try:
            if not self.closed:
                receipt_id = f"disconnect-{next(self._ids)}"
                future = asyncio.get_running_loop().create_future()
                self._receipts[receipt_id] = future
                with contextlib.suppress(asyncio.TimeoutError, StompError, websockets.ConnectionClosed):
                    await self._send_frame(Frame("DISCONNECT", {"receipt": receipt_id}))
                    await asyncio.wait_for(future, receipt_timeout)
        finally:
            await self._ws.close()
            if self._reader is not None:
                self._reader.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._reader
            self.closed = True

    # -- sending -----------------------------------------------------------

    async def _send_frame(self, frame: Frame) -> None:
        await self._ws.send(frame.encode())

    async def send(
        self, destination: str, body: str = "", content_type: str = "text/plain"
    ) -> None:
        headers = {"destination": destination}
        if body:
            headers["content-type"] = content_type
            headers["content-length"] = str(len(body.encode("utf-8")))
        await self._send_frame(Frame("SEND", headers, body))

    async def convert_and_send(self, destination: str, payload: Any) -> None:
        """Serialize *payload* to JSON and SEND it."""
        await self.send(destination, to_json(payload), content_type="application/json")

    async def send_heartbeat(self) -> None:
        await self.send(HEARTBEAT_DESTINATION, EOL)

    # -- subscribing -------------------------------------------------------

    async def subscribe(self, destination: str) -> Subscription:
        sub = Subscription(self, f"sub-{next(self._ids)}", destination)
        self._subscriptions[sub.id] = sub
        await self._send_frame(
            Frame("SUBSCRIBE", {"id": sub.id, "destination": destination, "ack": "auto"})
        )
        return sub

    async def subscribe_topic(self, topic: str) -> Subscription:
        return await self.subscribe(topic_destination(topic))

    async def subscribe_json(self, destination: str, model: Any) -> AsyncIterator[Any]:
        """Subscribe and yield each message body validated as *model*."""
        adapter = TypeAdapter(model)
        sub = await self.subscribe(destination)
        try:
            async for body in sub:
                yield adapter.validate_json(body)
        finally:
            if not self.closed:
                await sub.unsubscribe()

    async def unsubscribe(self, sub: Subscription) -> None:
        if self._subscriptions.pop(sub.id, None) is None:
            return
        sub._finish()
        if not self.closed:
            await self._send_frame(Frame("UNSUBSCRIBE", {"id": sub.id}))


async def connect(
    url: str,
    token: str | None = None,
    heartbeat_ms: int = 10_000,
    connect_timeout: float = 10.0,
    on_close: Callable[[StompSession], None] | None = None,
) -> StompSession:
    """Open a WebSocket to *url* and complete the STOMP handshake.

    The bearer *token*, when given, is sent on the WebSocket upgrade request.

    Raises:
        OSError / websockets.WebSocketException: The socket could not be opened.
        StompError: The server answered CONNECT with an ERROR frame.
        asyncio.TimeoutError: No CONNECTED frame within *connect_timeout*.
    """
    headers = {"Authorization": f"Bearer {token}"} if token else None
    ws = await websockets.connect(
        url,
        additional_headers=headers,
        ping_interval=heartbeat_ms / 1000,
        open_timeout=connect_timeout,
    )
    session = StompSession(ws, on_close=on_close)
    host = urllib.parse.urlsplit(url).hostname or "localhost"
    try:
        await session._handshake(host, heartbeat_ms, connect_timeout)
    except BaseException:
        with contextlib.suppress(Exception):
            await session.disconnect(receipt_timeout=0)
        raise
    return session
