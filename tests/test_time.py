# Tests for utils/time.py — boundaries, named periods, readable formatting.
# Created: 2026-10-07

from datetime import UTC, datetime, timedelta, timezone

import pytest

from clientlib.errors import DateParseErr, Failure, Ok
from clientlib.utils import time as t
from clientlib.utils.time import NamedPeriod, Period

NOW = datetime(2026, 3, 15, 12, 30, tzinfo=UTC)
PLUS_TWO = timezone(timedelta(hours=2))


def _ms_before(dt: datetime) -> datetime:
    return dt - timedelta(milliseconds=1)


class TestBoundaries:
    def test_day(self):
        assert t.start_of_day(NOW, UTC) == datetime(2026, 3, 15, tzinfo=UTC)
        assert t.end_of_day(NOW, UTC) == _ms_before(datetime(2026, 3, 16, tzinfo=UTC))

    def test_month(self):
        assert t.start_of_month(NOW, UTC) == datetime(2026, 3, 1, tzinfo=UTC)
        assert t.end_of_month(NOW, UTC) == _ms_before(datetime(2026, 4, 1, tzinfo=UTC))

    def test_last_month_across_year(self):
        jan = datetime(2026, 1, 10, tzinfo=UTC)
        assert t.start_of_last_month(jan, UTC) == datetime(2025, 12, 1, tzinfo=UTC)
        assert t.end_of_last_month(jan, UTC) == _ms_before(datetime(2026, 1, 1, tzinfo=UTC))

    def test_december_end_of_month(self):
        dec = datetime(2026, 12, 5, tzinfo=UTC)
        assert t.end_of_month(dec, UTC) == _ms_before(datetime(2027, 1, 1, tzinfo=UTC))

    def test_year(self):
        assert t.start_of_year(NOW, UTC) == datetime(2026, 1, 1, tzinfo=UTC)
        assert t.end_of_year(NOW, UTC) == _ms_before(datetime(2027, 1, 1, tzinfo=UTC))
        assert t.start_of_last_year(NOW, UTC) == datetime(2025, 1, 1, tzinfo=UTC)
        assert t.end_of_last_year(NOW, UTC) == _ms_before(datetime(2026, 1, 1, tzinfo=UTC))

    def test_wall_clock_of_zone(self):
        # 23:30 UTC is already the next day at UTC+2
        late = datetime(2026, 3, 15, 23, 30, tzinfo=UTC)
        assert t.start_of_day(late, PLUS_TWO) == datetime(2026, 3, 16, tzinfo=PLUS_TWO)


class TestResolvePeriod:
    @pytest.mark.parametrize("name", [p for p in NamedPeriod if p is not NamedPeriod.CUSTOM])
    def test_round_trip(self, name):
        bounds = t.period_bounds(name, NOW, UTC)
        resolved = t.resolve_period(bounds.from_, bounds.until, now=NOW, tz=UTC)
        assert resolved.name is name
        assert (resolved.from_, resolved.until) == (bounds.from_, bounds.until)

    def test_named_bounds(self):
        assert t.period_bounds(NamedPeriod.YESTERDAY, NOW, UTC) == Period(
            from_=datetime(2026, 3, 14, tzinfo=UTC),
            until=_ms_before(datetime(2026, 3, 15, tzinfo=UTC)),
            name=NamedPeriod.YESTERDAY,
        )
        last_month = t.period_bounds(NamedPeriod.LAST_MONTH, NOW, UTC)
        assert last_month.from_ == datetime(2026, 2, 1, tzinfo=UTC)
        assert last_month.until == _ms_before(datetime(2026, 3, 1, tzinfo=UTC))

    def test_custom_keeps_bounds(self):
        start = datetime(2026, 3, 2, 8, tzinfo=UTC)
        end = datetime(2026, 3, 9, 18, tzinfo=UTC)
        resolved = t.resolve_period(start, end, now=NOW, tz=UTC)
        assert resolved == Period(from_=start, until=end, name=NamedPeriod.CUSTOM)

    def test_off_by_one_ms_is_custom(self):
        bounds = t.period_bounds(NamedPeriod.TODAY, NOW, UTC)
        resolved = t.resolve_period(bounds.from_, bounds.until + timedelta(milliseconds=1), NOW, UTC)
        assert resolved.name is NamedPeriod.CUSTOM

    def test_same_instant_in_other_zone(self):
        bounds = t.period_bounds(NamedPeriod.THIS_MONTH, NOW, UTC)
        resolved = t.resolve_period(
            bounds.from_.astimezone(PLUS_TWO), bounds.until.astimezone(PLUS_TWO), NOW, UTC
        )
        assert resolved.name is NamedPeriod.THIS_MONTH

    def test_custom_has_no_bounds(self):
        with pytest.raises(ValueError):
            t.period_bounds(NamedPeriod.CUSTOM, NOW, UTC)

    def test_default_period(self):
        period = Period.default(NOW)
        assert period.from_ == t.EPOCH
        assert period.until == NOW + timedelta(days=1)
        assert period.name is NamedPeriod.CUSTOM


class TestFormatting:
    def test_readable_date(self):
        assert t.to_readable_date(NOW, UTC) == "Mar 15, 2026"
        assert t.to_readable_date(NOW, UTC, ignore_year=True) == "Mar 15"

    def test_readable_time(self):
        at = datetime(2026, 3, 15, 9, 5, 7, tzinfo=UTC)
        assert t.to_readable_time(at, UTC) == "9:5"
        assert t.to_readable_time(at, UTC, with_seconds=True) == "9:5:7"
        assert t.to_readable_time(datetime(2026, 3, 15, 14, 45, tzinfo=UTC), UTC) == "14:45"

    def test_period_string(self):
        today = t.period_bounds(NamedPeriod.TODAY, NOW, UTC)
        assert today.string(UTC) == "Mar 15"
        month = t.period_bounds(NamedPeriod.THIS_MONTH, NOW, UTC)
        assert month.string(UTC) == "Mar 1 - Mar 31"

    @pytest.mark.parametrize(
        "delta,short,expected",
        [
            (timedelta(seconds=42), False, "0minutes 42seconds"),
            (timedelta(minutes=5, seconds=3), True, "5m 3s"),
            (timedelta(hours=3, minutes=20), True, "3h 20m"),
            (timedelta(days=2, hours=4), True, "2d 4h"),
            (timedelta(days=400), True, "1y 35d"),
        ],
    )
    def test_readable_duration(self, delta, short, expected):
        assert t.to_readable_duration(NOW - delta, instant=NOW, short=short) == expected

    def test_human_readable(self):
        assert t.to_human_readable(NOW - timedelta(minutes=3), UTC, now=NOW) == "3m 0s"
        assert t.to_human_readable(NOW - timedelta(days=2), UTC, now=NOW) == "Mar 13, 2026 12:30"

    @pytest.mark.parametrize(
        "duration,expected",
        [
            (timedelta(0), "0s"),
            (timedelta(seconds=59), "59s"),
            (timedelta(hours=1), "1h"),
            (timedelta(days=1, hours=2, minutes=3, seconds=4), "1d 2h 3m 4s"),
        ],
    )
    def test_duration_to_human_readable(self, duration, expected):
        assert t.duration_to_human_readable(duration) == expected

    def test_seconds_to_time(self):
        assert t.seconds_to_time(3725) == "1 h 2 m 5 s"


class TestParseDatetime:
    def test_aware(self):
        res = t.parse_datetime("2026-03-15T12:30:00+02:00")
        assert isinstance(res, Ok)
        assert res.value == datetime(2026, 3, 15, 10, 30, tzinfo=UTC)

    def test_naive_is_utc(self):
        assert t.parse_datetime("2026-03-15T12:30:00").value.tzinfo is UTC

    def test_invalid(self):
        res = t.parse_datetime("15/03/2026")
        assert isinstance(res, Failure)
        assert isinstance(res.error, DateParseErr)
