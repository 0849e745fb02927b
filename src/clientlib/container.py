# Library wiring — builds and owns the token store, HTTP client and channel.
# Created: 2026-10-06

from __future__ import annotations

import logging

import httpx

from clientlib.auth.token_store import PreferenceStore, TokenStore
from clientlib.config import Settings, get_settings
from clientlib.credentials import OidcAuthenticationFlow
from clientlib.http.transport import build_client, cleanup_auth
from clientlib.messaging.channel import SessionChannel

logger = logging.getLogger(__name__)


class ClientContainer:
    """Lazily constructed singletons for one configured OIDC client.

    Usage:
        container = get_container(flow)
        resp = await container.http.get("/api/me")
        await container.channel.with_session(handler)
        await container.aclose()
    """

    def __init__(
        self,
        flow: OidcAuthenticationFlow,
        settings: Settings | None = None,
        preferences: PreferenceStore | None = None,
        base_url: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.flow = flow
        self.settings = settings or get_settings()
        self.base_url = base_url
        self.token_store = TokenStore(preferences)
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._channel: SessionChannel | None = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = build_client(
                self.flow,
                self.token_store,
                self.settings,
                base_url=self.base_url,
                transport=self._transport,
            )
        return self._http

    @property
    def channel(self) -> SessionChannel:
        if self._channel is None:
            self._channel = SessionChannel(store=self.token_store, settings=self.settings)
        return self._channel

    async def logout(self) -> None:
        """Close the messaging session and forget stored tokens."""
        if self._channel is not None:
            await self._channel.close()
            self._channel = None
        await cleanup_auth(self.token_store)

    async def aclose(self) -> None:
        if self._channel is not None:
            await self._channel.close()
            self._channel = None
        if self._http is not None:
            await self._http.aclose()
            self._http = None
        logger.debug("Client container closed")


_container: ClientContainer | None = None


def get_container(flow: OidcAuthenticationFlow | None = None) -> ClientContainer:
    """Return the process-wide container, creating it on first use with *flow*."""
    global _container
    if _container is None:
        if flow is None:
            raise RuntimeError("get_container() needs an authentication flow on first use")
        _container = ClientContainer(flow)
    return _container


async def shutdown() -> None:
    """Close the process-wide container, if any, and forget it."""
    global _container
    container, _container = _container, None
    if container is not None:
        await container.aclose()


def reset() -> None:
    """Forget the process-wide container without closing it (tests)."""
    global _container
    _container = None
