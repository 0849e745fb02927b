# Date/time helpers — period boundaries, named periods, readable formatting.
# Created: 2026-10-04
#
# All functions take timezone-aware datetimes. Boundaries are computed on the
# wall clock of *tz* (the system zone when omitted); "end of X" is the start
# of the next X minus one millisecond.

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from enum import Enum

from clientlib.errors import DateParseErr, Failure, Ok, Result

ONE_MS = timedelta(milliseconds=1)
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def local_tz() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def _local(dt: datetime, tz: tzinfo | None) -> datetime:
    return dt.astimezone(tz or local_tz())


def _at_start_of_day(d: date, tz: tzinfo) -> datetime:
    return datetime.combine(d, time(), tzinfo=tz)


def _first_of_month(d: date, months: int = 0) -> date:
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------


def start_of_day(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(_local(dt, tz).date(), tz)


def end_of_day(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(_local(dt, tz).date() + timedelta(days=1), tz) - ONE_MS


def start_of_month(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(_first_of_month(_local(dt, tz).date()), tz)


def end_of_month(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(_first_of_month(_local(dt, tz).date(), 1), tz) - ONE_MS


def start_of_last_month(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(_first_of_month(_local(dt, tz).date(), -1), tz)


def end_of_last_month(dt: datetime, tz: tzinfo | None = None) -> datetime:
    return start_of_month(dt, tz) - ONE_MS


def start_of_year(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(date(_local(dt, tz).year, 1, 1), tz)


def end_of_year(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(date(_local(dt, tz).year + 1, 1, 1), tz) - ONE_MS


def start_of_last_year(dt: datetime, tz: tzinfo | None = None) -> datetime:
    tz = tz or local_tz()
    return _at_start_of_day(date(_local(dt, tz).year - 1, 1, 1), tz)


def end_of_last_year(dt: datetime, tz: tzinfo | None = None) -> datetime:
    return start_of_year(dt, tz) - ONE_MS


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------


class NamedPeriod(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    LAST_YEAR = "last_year"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Period:
    from_: datetime
    until: datetime
    name: NamedPeriod = NamedPeriod.CUSTOM

    @classmethod
    def default(cls, now: datetime | None = None) -> Period:
        """Everything from the epoch up to a day from now."""
        now = now or datetime.now(UTC)
        return cls(from_=EPOCH, until=now + timedelta(days=1))

    def string(self, tz: tzinfo | None = None) -> str:
        start = to_readable_date(self.from_, tz, ignore_year=True)
        if days_between(self.from_, self.until, tz) == 0:
            return start
        return f"{start} - {to_readable_date(self.until, tz, ignore_year=True)}"


def days_between(start: datetime, end: datetime, tz: tzinfo | None = None) -> int:
    """Whole calendar days from *start* to *end* on the wall clock of *tz*."""
    a = _local(start, tz).replace(tzinfo=None)
    b = _local(end, tz).replace(tzinfo=None)
    return int((b - a) / timedelta(days=1))


def period_bounds(name: NamedPeriod, now: datetime, tz: tzinfo | None = None) -> Period:
    """Concrete bounds of a named period relative to *now*."""
    tz = tz or local_tz()
    match name:
        case NamedPeriod.TODAY:
            start, end = start_of_day(now, tz), end_of_day(now, tz)
        case NamedPeriod.YESTERDAY:
            yesterday = _local(now, tz) - timedelta(days=1)
            start, end = start_of_day(yesterday, tz), end_of_day(yesterday, tz)
        case NamedPeriod.THIS_MONTH:
            start, end = start_of_month(now, tz), end_of_month(now, tz)
        case NamedPeriod.LAST_MONTH:
            start, end = start_of_last_month(now, tz), end_of_last_month(now, tz)
        case NamedPeriod.THIS_YEAR:
            start, end = start_of_year(now, tz), end_of_year(now, tz)
        case NamedPeriod.LAST_YEAR:
            start, end = start_of_last_year(now, tz), end_of_last_year(now, tz)
        case NamedPeriod.CUSTOM:
            raise ValueError("A custom period has no predefined bounds")
    return Period(from_=start, until=end, name=name)


def resolve_period(
    from_: datetime,
    until: datetime,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Period:
    """Name the period spanned by ``(from_, until)``.

    Returns the predefined period whose bounds match exactly, otherwise a
    CUSTOM period with the given bounds unchanged.
    """
    now = now or datetime.now(UTC)
    for name in NamedPeriod:
        if name is NamedPeriod.CUSTOM:
            continue
        bounds = period_bounds(name, now, tz)
        if bounds.from_ == from_ and bounds.until == until:
            return bounds
    return Period(from_=from_, until=until)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def to_readable_date(dt: datetime, tz: tzinfo | None = None, ignore_year: bool = False) -> str:
    """``Mar 7, 2026`` (or ``Mar 7`` with *ignore_year*)."""
    local = _local(dt, tz)
    month = _MONTHS[local.month - 1]
    if ignore_year:
        return f"{month} {local.day}"
    return f"{month} {local.day}, {local.year}"


def to_readable_time(dt: datetime, tz: tzinfo | None = None, with_seconds: bool = False) -> str:
    local = _local(dt, tz)
    # Fields are not zero-padded: 9:05:07 reads "9:5:7"
    text = f"{local.hour}:{local.minute}"
    if with_seconds:
        text += f":{local.second}"
    return text


def to_readable_duration(
    dt: datetime, instant: datetime | None = None, short: bool = False
) -> str:
    """Distance between *dt* and *instant* (default now) in its two largest units."""
    instant = instant or datetime.now(UTC)
    seconds_total = int(abs((instant - dt).total_seconds()))
    days = seconds_total // 86400
    hours = seconds_total // 3600 % 24
    minutes = seconds_total // 60 % 60
    seconds = seconds_total % 60
    years = days // 365

    y, d, h, m, s = ("y", "d", "h", "m", "s") if short else ("years", "days", "hours", "minutes", "seconds")
    if years > 0:
        return f"{years}{y} {days % 365}{d}"
    if days > 0:
        return f"{days}{d} {hours}{h}"
    if hours > 0:
        return f"{hours}{h} {minutes}{m}"
    return f"{minutes}{m} {seconds}{s}"


def to_human_readable(
    dt: datetime, tz: tzinfo | None = None, now: datetime | None = None
) -> str:
    """A date and time for anything a day or more away, else a short duration."""
    now = now or datetime.now(UTC)
    if abs(now - dt) >= timedelta(days=1):
        return f"{to_readable_date(dt, tz)} {to_readable_time(dt, tz)}"
    return to_readable_duration(dt, instant=now, short=True)


def duration_to_human_readable(duration: timedelta) -> str:
    """``1d 2h 3m 4s``, omitting zero units (``0s`` for an empty duration)."""
    remaining = int(duration.total_seconds())
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or (days == 0 and hours == 0 and minutes == 0):
        parts.append(f"{seconds}s")
    return " ".join(parts)


def seconds_to_time(seconds: int) -> str:
    hours, remaining = divmod(seconds, 3600)
    minutes, secs = divmod(remaining, 60)
    return f"{hours} h {minutes} m {secs} s"


def parse_datetime(text: str) -> Result[datetime, DateParseErr]:
    """Parse an ISO 8601 timestamp; naive input is taken as UTC."""
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        return Failure(DateParseErr(throwable=e))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return Ok(parsed)
