# Token endpoint models — Auth record, OIDC ID-token claims, auth error body.
# Created: 2026-10-02

from __future__ import annotations

import base64
import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from clientlib.http.responses import ErrResponse, HttpStatus

logger = logging.getLogger(__name__)


def parse_jwt(jwt: str) -> str:
    """Return the decoded payload (middle segment) of a JWT.

    Raises:
        ValueError: If the token is not three dot-separated parts or the
            payload has an impossible base64 length.
    """
    parts = jwt.split(".")
    if len(parts) != 3:
        raise ValueError("Invalid JWT format")

    payload = parts[1]
    remainder = len(payload) % 4
    if remainder == 1:
        raise ValueError("Invalid JWT length")
    if remainder:
        payload += "=" * (4 - remainder)

    return base64.urlsafe_b64decode(payload).decode("utf-8")


class OidcUser(BaseModel):
    """Claims carried by the OIDC ID token."""

    model_config = ConfigDict(extra="ignore")

    exp: int
    iat: int
    auth_time: int
    jti: str
    iss: str
    aud: str
    sub: str
    typ: str
    azp: str
    sid: str
    at_hash: str
    acr: str
    email_verified: bool
    gender: str | None = None
    name: str | None = None
    preferred_username: str
    given_name: str | None = None
    family_name: str | None = None
    email: str | None = None


class Auth(BaseModel):
    """Token set returned by the token endpoint and persisted locally."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    access_token: str
    expires_in: int
    refresh_expires_in: int
    refresh_token: str
    id_token: str | None = None
    token_type: str
    not_before_policy: int = Field(alias="not-before-policy")
    session_state: str
    scope: str

    def oidc_user(self) -> OidcUser | None:
        """Decode the ID token claims, or None if absent or unreadable."""
        if not self.id_token:
            return None
        try:
            return OidcUser.model_validate_json(parse_jwt(self.id_token))
        except (ValueError, ValidationError) as e:
            logger.warning("Error decoding ID token: %s", e)
            return None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class AuthErrType(str, Enum):
    INVALID_TOKEN = "invalid_token"
    INVALID_GRANT = "invalid_grant"


class AuthErr(BaseModel):
    """``{error, error_description}`` body sent by the authorization server."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    err_type: str = Field(alias="error")
    description: str = Field(alias="error_description")

    def is_refresh_token_invalid(self) -> bool:
        return any(self.err_type == t.value for t in AuthErrType)

    def to_error_response(self) -> ErrResponse:
        return ErrResponse.of(HttpStatus.UNAUTHORIZED, "Unauthorized")

    def __str__(self) -> str:
        return f"{self.err_type} : {self.description}"
