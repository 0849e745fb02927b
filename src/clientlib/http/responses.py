# Server response envelopes — success data and structured error bodies.
# Created: 2026-10-03

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ResponseType(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class HttpStatus(str, Enum):
    """Status names as the backend serializes them, with their numeric codes."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    @property
    def code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    HttpStatus.BAD_REQUEST: 400,
    HttpStatus.UNAUTHORIZED: 401,
    HttpStatus.FORBIDDEN: 403,
    HttpStatus.NOT_FOUND: 404,
    HttpStatus.CONFLICT: 409,
    HttpStatus.INTERNAL_SERVER_ERROR: 500,
}


class ErrData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    status: str
    message: str
    description: str
    actions: list[str] = Field(default_factory=list)


class ErrResponse(BaseModel):
    """``{type, status, code, time, error: {...}}`` error body."""

    model_config = ConfigDict(extra="ignore")

    type: ResponseType = ResponseType.ERROR
    status: str
    code: int
    time: datetime
    error: ErrData

    @classmethod
    def of(cls, status: HttpStatus, message: str, description: str | None = None) -> ErrResponse:
        return cls(
            type=ResponseType.ERROR,
            status=status.value,
            code=status.code,
            time=datetime.now(UTC),
            error=ErrData(
                type="Error",
                status=status.value,
                message=message,
                description=message if description is None else description,
            ),
        )


class ResponseData(BaseModel, Generic[T]):
    """Success envelope wrapping a payload in ``data``."""

    model_config = ConfigDict(extra="ignore")

    type: ResponseType = ResponseType.SUCCESS
    status: str
    code: int
    time: datetime
    data: T
