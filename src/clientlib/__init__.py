"""OAuth2/OIDC client library: tokens, authenticated HTTP, STOMP messaging."""

from clientlib.auth.models import Auth, AuthErr, OidcUser
from clientlib.auth.token_store import PreferenceStore, TokenStore
from clientlib.config import Settings, get_settings
from clientlib.container import ClientContainer, get_container
from clientlib.credentials import Credential, DirectGrantFlow, OidcAuthenticationFlow, PkceFlow
from clientlib.errors import Failure, Ok, Result
from clientlib.http.mapping import result, result_paginated, result_paginated_v2, result_with_headers
from clientlib.http.transport import build_client
from clientlib.messaging.channel import ChannelState, SessionChannel
from clientlib.pagination import Page, PageableParams

__all__ = [
    "Auth",
    "AuthErr",
    "ChannelState",
    "ClientContainer",
    "Credential",
    "DirectGrantFlow",
    "Failure",
    "OidcAuthenticationFlow",
    "OidcUser",
    "Ok",
    "Page",
    "PageableParams",
    "PkceFlow",
    "PreferenceStore",
    "Result",
    "SessionChannel",
    "Settings",
    "TokenStore",
    "build_client",
    "get_container",
    "get_settings",
    "result",
    "result_paginated",
    "result_paginated_v2",
    "result_with_headers",
]
