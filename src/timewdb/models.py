from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import FrozenSet, Optional, Union


@dataclass(frozen=True)
class Tag:
    value: str


@dataclass(frozen=True)
class AnnotationFragment:
    text: str


Token = Union[Tag, AnnotationFragment]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Interval:
    """One recorded work period, as stored on disk."""

    start: datetime
    end: Optional[datetime]
    tags: FrozenSet[str] = frozenset()
    annotation: Optional[str] = None
    source: Optional[str] = field(default=None, compare=False, repr=False)
    line: int = field(default=0, compare=False, repr=False)
    # 1 is the most recent record of the database; 0 until the reader numbers it
    id: int = field(default=0, compare=False)

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def day(self) -> date:
        """Local calendar day on which the interval started."""
        return self.start.astimezone().date()

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        end = self.end if self.end is not None else (now or _utcnow())
        return max(timedelta(0), end - self.start)


@dataclass(frozen=True)
class Entry:
    """An interval as seen through a query.

    ``start``/``end`` are clipped to the queried range while ``interval``
    keeps the stored record. ``end`` is None only for an ongoing interval
    read without a range.
    """

    interval: Interval
    start: datetime
    end: Optional[datetime]

    @property
    def is_open(self) -> bool:
        return self.interval.is_open

    @property
    def id(self) -> int:
        return self.interval.id

    @property
    def tags(self) -> FrozenSet[str]:
        return self.interval.tags

    @property
    def annotation(self) -> Optional[str]:
        return self.interval.annotation

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        end = self.end if self.end is not None else (now or _utcnow())
        return max(timedelta(0), end - self.start)
