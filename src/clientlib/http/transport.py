# Authenticated Transport — httpx client with bearer tokens and refresh on 401.
# Created: 2026-10-03

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Generator

import httpx
from pydantic import ValidationError

from clientlib.auth.models import Auth
from clientlib.auth.token_store import TokenStore
from clientlib.config import Settings, get_settings
from clientlib.credentials import OidcAuthenticationFlow, client_secret_for

logger = logging.getLogger(__name__)

# Request extension marking the token refresh call so BearerAuth never
# tries to refresh the refresh request itself.
REFRESH_TOKEN_REQUEST = "clientlib.refresh_token_request"


async def refresh_token(
    client: httpx.AsyncClient,
    token_url: str,
    client_id: str,
    client_secret: str | None,
    refresh_token: str,
) -> httpx.Response:
    """POST a ``refresh_token`` grant to the token endpoint.

    The request is sent without client auth (``auth=None``) and carries the
    refresh marker extension.
    """
    data = {
        "grant_type": "refresh_token",
        "client_id": client_id,
        "refresh_token": refresh_token,
    }
    if client_secret is not None:
        data["client_secret"] = client_secret

    return await client.post(
        token_url,
        data=data,
        auth=None,
        extensions={REFRESH_TOKEN_REQUEST: True},
    )


class TokenRefresher:
    """Exchanges the stored refresh token for a new Auth record."""

    def __init__(self, flow: OidcAuthenticationFlow, store: TokenStore):
        self.flow = flow
        self.store = store

    async def refresh(self, client: httpx.AsyncClient) -> Auth | None:
        """Refresh and persist the token set.

        Returns the new record, or None when there is nothing to refresh or
        the token endpoint answered with an unreadable body.

        Raises:
            httpx.HTTPStatusError: The token endpoint rejected the refresh
                token. The error carries the endpoint's own response, so an
                ``invalid_grant`` body reaches the caller as an auth failure.
            httpx.HTTPError: The token endpoint could not be reached.
        """
        current = await self.store.load()
        if current is None:
            return None

        logger.debug("Initiating token refresh.")
        try:
            resp = await refresh_token(
                client,
                token_url=self.flow.token_endpoint.get(),
                client_id=self.flow.client_id.get(),
                client_secret=client_secret_for(self.flow),
                refresh_token=current.refresh_token,
            )
            resp.raise_for_status()
            auth = Auth.model_validate(resp.json())
        except httpx.HTTPError as e:
            logger.warning("Token refresh failed: %s", e)
            raise
        except (ValueError, ValidationError) as e:
            logger.warning("Token endpoint returned an unreadable body: %s", e)
            return None

        await self.store.save(auth)
        logger.info("Refreshed access token")
        return auth


class BearerAuth(httpx.Auth):
    """Attach the stored access token; refresh once and retry on 401.

    A rejected refresh replaces the original 401 with the token endpoint's
    error, which the error mapping reports as an auth failure.

    A missing token record is not an error: the request goes out without an
    ``Authorization`` header and the server decides.
    """

    def __init__(self, store: TokenStore, refresher: TokenRefresher, client_ref: ClientRef):
        self._store = store
        self._refresher = refresher
        self._client_ref = client_ref
        self._refresh_lock = asyncio.Lock()

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("BearerAuth only supports httpx.AsyncClient")

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if request.extensions.get(REFRESH_TOKEN_REQUEST):
            yield request
            return

        auth = await self._store.load()
        sent_token = auth.access_token if auth else None
        if sent_token:
            request.headers["Authorization"] = f"Bearer {sent_token}"

        response = yield request
        if response.status_code != 401:
            return

        new_token = await self._refreshed_token(sent_token)
        if new_token is None:
            return

        request.headers["Authorization"] = f"Bearer {new_token}"
        yield request

    async def _refreshed_token(self, sent_token: str | None) -> str | None:
        async with self._refresh_lock:
            # Another request may have refreshed while this one waited.
            current = await self._store.load()
            if current is not None and current.access_token != sent_token:
                return current.access_token

            client = self._client_ref.client
            if client is None:
                return None
            refreshed = await self._refresher.refresh(client)
            return refreshed.access_token if refreshed else None


class ClientRef:
    """Late-bound pointer from BearerAuth back to the client that owns it."""

    client: httpx.AsyncClient | None = None


class AuthenticatedClient(httpx.AsyncClient):
    """AsyncClient that raises ``httpx.HTTPStatusError`` on any non-2xx response.

    Status checking happens after the auth flow so a 401 can still be
    answered with a token refresh first.
    """

    async def send(self, request: httpx.Request, **kwargs) -> httpx.Response:
        response = await super().send(request, **kwargs)
        if not response.is_success:
            if kwargs.get("stream", False):
                # Never handed to the caller
                await response.aclose()
            else:
                await response.aread()
            response.raise_for_status()
        return response


def build_client(
    flow: OidcAuthenticationFlow,
    store: TokenStore,
    settings: Settings | None = None,
    base_url: str = "",
    transport: httpx.AsyncBaseTransport | None = None,
) -> AuthenticatedClient:
    """Create the library's HTTP client: bearer auth, JSON, timeouts."""
    settings = settings or get_settings()
    ref = ClientRef()
    auth = BearerAuth(store, TokenRefresher(flow, store), ref)
    client = AuthenticatedClient(
        base_url=base_url,
        auth=auth,
        headers={"Accept": "application/json"},
        timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
        transport=transport,
    )
    ref.client = client
    return client


async def cleanup_auth(store: TokenStore) -> None:
    """Forget the stored tokens (logout)."""
    await store.delete()
