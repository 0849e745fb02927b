# Small shared helpers — query strings, number formatting, result combining.
# Created: 2026-10-04

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from clientlib.errors import Failure, Ok, Result

A = TypeVar("A")
B = TypeVar("B")
E = TypeVar("E")
T = TypeVar("T")


def to_param_string(params: Mapping[str, Any]) -> str:
    """Join *params* as ``k=v&k=v``. Values are not URL-encoded; None becomes empty."""
    parts = []
    for key, value in params.items():
        if value is None:
            text = ""
        elif isinstance(value, datetime):
            text = value.isoformat()
        else:
            text = str(value)
        parts.append(f"{key}={text}")
    return "&".join(parts)


def _round_half_up(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def two_decimal_places(value: float) -> str:
    return str(_round_half_up(value))


def format_number(value: float) -> str:
    """Whole numbers without a fraction, everything else to two decimals."""
    if value % 1.0 == 0.0:
        return str(int(value))
    return str(_round_half_up(value))


def first_word(text: str) -> str:
    index = text.find(" ")
    if index > -1:
        return text[:index].strip()
    return text


def percent(value: float, of: float) -> float:
    """*of* percent of *value*."""
    return (value * of) / 100


def combine_results(first: Result[A, E], second: Result[B, E]) -> Result[tuple[A, B], E]:
    """Pair two results, or return the first failure."""
    match first, second:
        case Ok(value=a), Ok(value=b):
            return Ok((a, b))
        case Failure() as failure, _:
            return failure
        case _, failure:
            return failure


def merge_remote(
    current: Result[T, E] | None,
    other: Result[T, E] | None,
    merge: Callable[[T, T], T],
) -> Result[T, E] | None:
    """Combine two optional results.

    A missing side yields the other; two successes are merged; otherwise the
    first failure wins.
    """
    if current is None:
        return other
    if other is None:
        return current
    match current, other:
        case Ok(value=a), Ok(value=b):
            return Ok(merge(a, b))
        case Failure(), _:
            return current
        case _:
            return other
