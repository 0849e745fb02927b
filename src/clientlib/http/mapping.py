# Error mapping — classify transport failures into the HttpErr taxonomy.
# Created: 2026-10-03
#
# Classification order:
#   1. HTTP status error  -> ClientErr / RedirectErr / ServerErr / GenericHttpErr,
#      with the error body decoded as the caller's shape, else as AuthErr,
#      else a synthesized 403 body.
#   2. Non-JSON body      -> AuthorizationErr (-1)
#   3. No response        -> ConnectionErr (-1)
#   4. Bad success body   -> HttpJsonParseErr (-1)
#   5. Other httpx error  -> ServerErr (-1)

from __future__ import annotations

import logging
import socket
from collections.abc import Awaitable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from clientlib.auth.models import AuthErr
from clientlib.config import is_debug
from clientlib.errors import (
    NO_STATUS,
    AuthorizationErr,
    ClientErr,
    ConnectionErr,
    Failure,
    GenericHttpErr,
    HttpErr,
    HttpJsonParseErr,
    Ok,
    RedirectErr,
    Result,
    ServerErr,
)
from clientlib.http.responses import ErrResponse, HttpStatus, ResponseData
from clientlib.http.transport import REFRESH_TOKEN_REQUEST
from clientlib.pagination import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")
B = TypeVar("B")

HttpHeaders = dict[str, list[str]]


class UnsupportedContentError(Exception):
    """The response body is not JSON, so no model can be decoded from it."""

    def __init__(self, content_type: str, status_code: int):
        super().__init__(f"No JSON body in response (status {status_code}, content-type {content_type!r})")
        self.content_type = content_type
        self.status_code = status_code


@dataclass(frozen=True)
class RemoteResult:
    body: Any
    headers: HttpHeaders


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode_body(response: httpx.Response, model: Any) -> Any:
    """Decode a JSON response body into *model* (any pydantic-compatible type).

    Raises:
        UnsupportedContentError: The response declares a non-JSON content type.
        ValidationError: The body is not valid JSON or does not fit *model*.
    """
    content_type = response.headers.get("content-type", "")
    if content_type and "json" not in content_type.lower():
        raise UnsupportedContentError(content_type, response.status_code)
    return _adapter(model).validate_json(response.content)


def headers_of(response: httpx.Response) -> HttpHeaders:
    return {key: response.headers.get_list(key) for key in response.headers.keys()}


def _is_auth_failure(exc: httpx.HTTPStatusError, body: Any) -> bool:
    # A rejected token refresh means the session is gone, whatever the body says
    if exc.request.extensions.get(REFRESH_TOKEN_REQUEST):
        return True
    return getattr(body, "code", None) == HttpStatus.UNAUTHORIZED.code


def to_http_error(exc: httpx.HTTPStatusError, body: B | None) -> HttpErr[B]:
    """Wrap a status error by response class."""
    response = exc.response
    status = response.status_code
    if 400 <= status < 500:
        return ClientErr(
            throwable=exc,
            status_code=status,
            headers=headers_of(response),
            body=body,
            is_auth_err=_is_auth_failure(exc, body),
        )
    if 300 <= status < 400:
        return RedirectErr(throwable=exc, status_code=status, body=body)
    if status >= 500:
        return ServerErr(throwable=exc, status_code=status, body=body)
    return GenericHttpErr(throwable=exc, status_code=status, body=body)


def is_refresh_token_expired_error(exc: httpx.HTTPStatusError) -> bool:
    try:
        return decode_body(exc.response, AuthErr).is_refresh_token_invalid()
    except (UnsupportedContentError, ValidationError):
        return False


def _fallback_body(exc: httpx.HTTPStatusError, decode_error: ValidationError) -> ErrResponse:
    """Best-effort body when the caller's error shape did not fit."""
    try:
        return decode_body(exc.response, AuthErr).to_error_response()
    except (UnsupportedContentError, ValidationError):
        return ErrResponse.of(HttpStatus.FORBIDDEN, str(decode_error))


def _status_error(exc: httpx.HTTPStatusError, error_body: Any) -> HttpErr:
    try:
        body = decode_body(exc.response, error_body)
    except UnsupportedContentError as e:
        logger.error("Cannot decode error body: %s", e)
        return AuthorizationErr(throwable=e, status_code=NO_STATUS)
    except ValidationError as e:
        # A refresh-token failure is expected to have the AuthErr shape
        if is_debug() and not is_refresh_token_expired_error(exc):
            logger.error("Error body did not match %s: %s", error_body, e)
        body = _fallback_body(exc, e)
    return to_http_error(exc, body)


def _is_connection_failure(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout)):
        return True
    if isinstance(exc.__cause__, socket.gaierror):
        return True
    return "Unable to resolve host" in str(exc)


def classify(exc: Exception, error_body: Any = ErrResponse) -> HttpErr:
    """Map an exception raised by a request/decode step to an HttpErr.

    Anything that is not a transport or decoding failure is re-raised.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return _status_error(exc, error_body)
    if isinstance(exc, UnsupportedContentError):
        logger.error("%s", exc)
        return AuthorizationErr(throwable=exc, status_code=NO_STATUS)
    if isinstance(exc, ValidationError):
        logger.error("Response body did not parse: %s", exc)
        return HttpJsonParseErr(throwable=exc, status_code=NO_STATUS)
    if isinstance(exc, httpx.HTTPError):
        logger.error("Request failed: %r", exc)
        if _is_connection_failure(exc):
            return ConnectionErr(throwable=exc, status_code=NO_STATUS)
        return ServerErr(throwable=exc, status_code=NO_STATUS)
    raise exc


async def result(call: Awaitable[T], error_body: Any = ErrResponse) -> Result[T, HttpErr]:
    """Await *call* and return ``Ok(value)`` or ``Failure(HttpErr)``.

    *error_body* is the shape the server's error JSON is decoded into.
    In debug builds a malformed success body is re-raised instead of mapped.
    """
    try:
        return Ok(await call)
    except ValidationError as e:
        if is_debug():
            raise
        return Failure(classify(e, error_body))
    except (httpx.HTTPError, UnsupportedContentError) as e:
        return Failure(classify(e, error_body))


async def result_with_headers(
    call: Awaitable[httpx.Response], model: Any, error_body: Any = ErrResponse
) -> Result[RemoteResult, HttpErr]:
    """Like :func:`result`, decoding the body as *model* and keeping the headers."""

    async def _decode() -> RemoteResult:
        response = await call
        return RemoteResult(body=decode_body(response, model), headers=headers_of(response))

    return await result(_decode(), error_body)


async def result_paginated(
    call: Awaitable[httpx.Response], item_type: Any, error_body: Any = ErrResponse
) -> Result[Page, HttpErr]:
    """Decode a paginated response into ``Page[item_type]``."""

    async def _decode() -> Page:
        return decode_body(await call, Page[item_type])

    return await result(_decode(), error_body)


async def result_paginated_v2(
    call: Awaitable[httpx.Response], item_type: Any, error_body: Any = ErrResponse
) -> Result[ResponseData, HttpErr]:
    """Decode a page wrapped in the ``{type, status, code, time, data}`` envelope."""

    async def _decode() -> ResponseData:
        return decode_body(await call, ResponseData[Page[item_type]])

    return await result(_decode(), error_body)
