"""Calendar range resolution.

Every resolver takes the current instant explicitly. A naive ``now`` is
read as host-local wall time; an aware one keeps its own tzinfo. Range
boundaries are local midnights, each localised on its own so that days
across a DST change keep their real length.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import InvalidRange, RangeError
from .parser import parse_timestamp
from .utils import pretty_duration

WeekStart = Union[int, str]

_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_WEEKDAY_NAMES: Dict[str, int] = {}
for _i, _name in enumerate(_DAYS):
    _WEEKDAY_NAMES[_name] = _i
    _WEEKDAY_NAMES[_name[:3]] = _i

_EXPLICIT_RE = re.compile(r"^(\S+) - (\S+)$")


def weekday_index(value: WeekStart) -> int:
    """Return 0 (Monday) .. 6 (Sunday) for an index or a weekday name."""
    if isinstance(value, int) and not isinstance(value, bool):
        if calendar.MONDAY <= value <= calendar.SUNDAY:
            return value
        raise RangeError(f"week start out of range: {value!r}")
    if isinstance(value, str):
        idx = _WEEKDAY_NAMES.get(value.strip().lower())
        if idx is not None:
            return idx
    raise RangeError(f"unknown week start day: {value!r}")


def _local(dt: datetime) -> datetime:
    return dt.astimezone() if dt.tzinfo is None else dt


def _midnight(day: date, tz: Optional[tzinfo]) -> datetime:
    if tz is None:
        return datetime.combine(day, time()).astimezone()
    return datetime.combine(day, time(), tzinfo=tz)


def _span(first: date, last: date, tz: Optional[tzinfo]) -> "Range":
    return Range(_midnight(first, tz), _midnight(last, tz))


def _shift_month(first: date, months: int) -> date:
    idx = first.year * 12 + (first.month - 1) + months
    return date(idx // 12, idx % 12 + 1, 1)


@dataclass(frozen=True)
class Range:
    """Half-open span ``[start, end)`` of aware datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRange(self.start, self.end)

    # --- constructors -------------------------------------------------

    @classmethod
    def custom(cls, start: datetime, end: datetime) -> "Range":
        """Range between two instants; naive values are host-local."""
        return cls(_local(start), _local(end))

    @classmethod
    def today(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("today", _now(now), week_start)

    @classmethod
    def yesterday(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("yesterday", _now(now), week_start)

    @classmethod
    def this_week(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("week", _now(now), week_start)

    @classmethod
    def last_week(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("lastweek", _now(now), week_start)

    @classmethod
    def this_month(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("month", _now(now), week_start)

    @classmethod
    def last_month(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("lastmonth", _now(now), week_start)

    @classmethod
    def this_year(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("year", _now(now), week_start)

    @classmethod
    def last_year(cls, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        return resolve("lastyear", _now(now), week_start)

    @classmethod
    def parse(cls, text: str, now: Optional[datetime] = None, week_start: WeekStart = calendar.MONDAY) -> "Range":
        """Parse ``<ts> - <ts>``, ``<ts>`` (up to now) or a period like ``:week``."""
        s = text.strip()
        if not s:
            raise RangeError("empty range")

        m = _EXPLICIT_RE.match(s)
        if m is not None:
            try:
                start, end = parse_timestamp(m.group(1)), parse_timestamp(m.group(2))
            except ValueError as exc:
                raise RangeError(f"cannot parse range {text!r}") from exc
            return cls(start, end)

        if s[:1].isdigit():
            try:
                start = parse_timestamp(s)
            except ValueError as exc:
                raise RangeError(f"cannot parse range {text!r}") from exc
            return cls(start, _local(_now(now)))

        return resolve(s[1:] if s.startswith(":") else s, _now(now), week_start)

    # --- queries -------------------------------------------------------

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def overlaps(self, start: datetime, end: Optional[datetime]) -> bool:
        """True if ``[start, end)`` overlaps; ``end=None`` is unbounded."""
        return start < self.end and (end is None or end > self.start)

    def intersection(self, other: "Range") -> Optional["Range"]:
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start < end:
            return Range(start, end)
        return None

    def split_at(self, instant: datetime) -> Tuple["Range", "Range"]:
        if not (self.start < instant < self.end):
            raise RangeError(f"split point {instant.isoformat()} is not inside {self}")
        return Range(self.start, instant), Range(instant, self.end)

    def split(self) -> Tuple["Range", "Range"]:
        return self.split_at(self.start + self.duration / 2)

    def days(self) -> List[date]:
        """Calendar dates touched by the range, in the range's own timezone."""
        if self.start == self.end:
            return []
        first = self.start.date()
        last = (self.end - timedelta(microseconds=1)).date()
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()} [{pretty_duration(self.duration)}]"


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def _today(now: datetime, week_start: int) -> Range:
    d = now.date()
    return _span(d, d + timedelta(days=1), now.tzinfo)


def _yesterday(now: datetime, week_start: int) -> Range:
    d = now.date()
    return _span(d - timedelta(days=1), d, now.tzinfo)


def _week(offset: int) -> Callable[[datetime, int], Range]:
    def resolver(now: datetime, week_start: int) -> Range:
        d = now.date()
        first = d - timedelta(days=(d.weekday() - week_start) % 7) + timedelta(weeks=offset)
        return _span(first, first + timedelta(days=7), now.tzinfo)

    return resolver


def _month(offset: int) -> Callable[[datetime, int], Range]:
    def resolver(now: datetime, week_start: int) -> Range:
        first = _shift_month(now.date().replace(day=1), offset)
        return _span(first, _shift_month(first, 1), now.tzinfo)

    return resolver


def _year(offset: int) -> Callable[[datetime, int], Range]:
    def resolver(now: datetime, week_start: int) -> Range:
        y = now.year + offset
        return _span(date(y, 1, 1), date(y + 1, 1, 1), now.tzinfo)

    return resolver


_PERIODS: Dict[str, Callable[[datetime, int], Range]] = {
    "today": _today,
    "yesterday": _yesterday,
    "week": _week(0),
    "thisweek": _week(0),
    "lastweek": _week(-1),
    "month": _month(0),
    "thismonth": _month(0),
    "lastmonth": _month(-1),
    "year": _year(0),
    "thisyear": _year(0),
    "lastyear": _year(-1),
}


def resolve(name: str, now: datetime, week_start: WeekStart = calendar.MONDAY) -> Range:
    """Resolve a period name relative to ``now``."""
    key = name.strip().lower().replace("_", "").replace("-", "")
    resolver = _PERIODS.get(key)
    if resolver is None:
        raise RangeError(f"unknown period: {name!r}")
    return resolver(now, weekday_index(week_start))
