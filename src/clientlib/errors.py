# Error taxonomy and result values returned by network-facing operations.
# Created: 2026-10-03
#
# Every error carries the exception it originated from. HTTP errors carry the
# response status (-1 when no response was received) and, where the server
# sent one, the decoded error body.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")
B = TypeVar("B")

NO_STATUS = -1


@dataclass(kw_only=True)
class Err:
    throwable: BaseException


# -- validation --------------------------------------------------------------


@dataclass(kw_only=True)
class ValidationErr(Err):
    instruction: str


@dataclass(kw_only=True)
class GenericValidationErr(ValidationErr):
    pass


@dataclass(kw_only=True)
class TextValidationErr(ValidationErr):
    pass


@dataclass(kw_only=True)
class PhoneValidationErr(ValidationErr):
    pass


@dataclass(kw_only=True)
class EmailValidationErr(ValidationErr):
    pass


# -- generic -------------------------------------------------------------------


@dataclass(kw_only=True)
class GenericError(Err):
    """Placeholder error."""

    throwable: BaseException = field(
        default_factory=lambda: RuntimeError("Generic Error, usually used as a placeholder for error.")
    )


@dataclass(kw_only=True)
class NotExistsError(Err):
    throwable: BaseException = field(default_factory=lambda: RuntimeError("Data doesn't exist"))


@dataclass(kw_only=True)
class UserErr(Err):
    pass


# -- parsing -------------------------------------------------------------------


@dataclass(kw_only=True)
class ParseErr(Err):
    pass


@dataclass(kw_only=True)
class JsonParseErr(ParseErr):
    pass


@dataclass(kw_only=True)
class DateParseErr(ParseErr):
    pass


# -- HTTP ----------------------------------------------------------------------


@dataclass(kw_only=True)
class HttpErr(Err, Generic[B]):
    status_code: int
    body: B | None = None


@dataclass(kw_only=True)
class ClientErr(HttpErr[B]):
    """4xx response. ``is_auth_err`` is set when the body reports a 401."""

    headers: dict[str, list[str]] = field(default_factory=dict)
    is_auth_err: bool = False


@dataclass(kw_only=True)
class RedirectErr(HttpErr[B]):
    pass


@dataclass(kw_only=True)
class ServerErr(HttpErr[B]):
    pass


@dataclass(kw_only=True)
class GenericHttpErr(HttpErr[B]):
    pass


@dataclass(kw_only=True)
class ConnectionErr(HttpErr[B]):
    """No response at all: host unreachable, DNS failure, refused connection."""


@dataclass(kw_only=True)
class AuthorizationErr(HttpErr[B]):
    pass


@dataclass(kw_only=True)
class HttpJsonParseErr(HttpErr[B]):
    pass


# -- UI-facing messages --------------------------------------------------------


class ErrTypes(Enum):
    NOT_AUTHENTICATED = ("not_authenticated", "You are not logged in.")
    NOT_EXISTS = ("not_exists", "Data doesn't exist.")
    CONNECTION = ("connection", "Unable to reach the server. Check your connection.")
    VALIDATION = ("validation", "Invalid input.")
    PARSE = ("parse", "Unexpected data received from the server.")
    UNKNOWN = ("unknown", "Something went wrong.")

    @property
    def type(self) -> str:
        return self.value[0]

    @property
    def msg(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class ErrMessage:
    type: str
    msg: str

    @classmethod
    def of(cls, err_type: ErrTypes) -> ErrMessage:
        return cls(err_type.type, err_type.msg)


def to_message(err: Err) -> ErrMessage:
    """Map an error to the message shown to the user."""
    match err:
        case AuthorizationErr() | ClientErr(is_auth_err=True):
            return ErrMessage.of(ErrTypes.NOT_AUTHENTICATED)
        case ConnectionErr():
            return ErrMessage.of(ErrTypes.CONNECTION)
        case HttpErr(body=body) if getattr(body, "error", None) is not None:
            return ErrMessage(ErrTypes.UNKNOWN.type, body.error.description)
        case HttpJsonParseErr() | ParseErr():
            return ErrMessage.of(ErrTypes.PARSE)
        case NotExistsError():
            return ErrMessage.of(ErrTypes.NOT_EXISTS)
        case ValidationErr(instruction=instruction):
            return ErrMessage(ErrTypes.VALIDATION.type, instruction)
        case _:
            return ErrMessage(ErrTypes.UNKNOWN.type, str(err.throwable) or ErrTypes.UNKNOWN.msg)


# -- results -------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False


Result = Ok[T] | Failure[E]
