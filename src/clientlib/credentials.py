# OIDC flow configuration — Credential pairs, flow variants, PKCE helpers.
# Created: 2026-10-02

from __future__ import annotations

import base64
import hashlib
import secrets
import urllib.parse
from dataclasses import dataclass

from clientlib.config import is_debug

CODE_VERIFIER_LENGTH = 64


@dataclass(frozen=True)
class Credential:
    """A value with a debug and a release variant."""

    debug: str
    release: str

    def get(self) -> str:
        """Resolve to the variant matching the current build flavour."""
        return self.debug if is_debug() else self.release


@dataclass(frozen=True)
class PkceFlow:
    """Authorization code flow with PKCE (public clients)."""

    auth_endpoint: Credential
    token_endpoint: Credential
    client_id: Credential
    redirect_url: Credential
    scope: Credential
    grant_type: Credential
    response_type: Credential

    def authorization_url(self, code_challenge: str, state: str = "") -> str:
        """Build the URL the user agent is sent to for login."""
        params = {
            "client_id": self.client_id.get(),
            "redirect_uri": self.redirect_url.get(),
            "response_type": self.response_type.get(),
            "scope": self.scope.get(),
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
        if state:
            params["state"] = state
        return f"{self.auth_endpoint.get()}?{urllib.parse.urlencode(params)}"


@dataclass(frozen=True)
class DirectGrantFlow:
    """Direct access grant: tokens are exchanged without a browser redirect."""

    token_endpoint: Credential
    client_id: Credential
    client_secret: Credential
    grant_type: Credential


OidcAuthenticationFlow = PkceFlow | DirectGrantFlow


def client_secret_for(flow: OidcAuthenticationFlow) -> str | None:
    """Secret sent on token refresh. Only direct-grant clients have one."""
    match flow:
        case DirectGrantFlow(client_secret=secret):
            return secret.get()
        case PkceFlow():
            return None
        case _:
            raise TypeError(f"Unknown authentication flow: {type(flow).__name__}")


# ---------------------------------------------------------------------------
# PKCE (RFC 7636)
# ---------------------------------------------------------------------------


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_code_verifier() -> str:
    return _b64url(secrets.token_bytes(CODE_VERIFIER_LENGTH))


def generate_code_challenge(code_verifier: str) -> str:
    """S256 challenge for *code_verifier*."""
    return _b64url(hashlib.sha256(code_verifier.encode("ascii")).digest())
