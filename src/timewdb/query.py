from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .models import Entry, Interval
from .ranges import Range


def clip(interval: Interval, rng: Optional[Range]) -> Optional[Entry]:
    """Clip ``interval`` to ``rng``; None if they do not overlap.

    An ongoing interval is treated as unbounded and ends at ``rng.end``.
    """
    if rng is None:
        return Entry(interval=interval, start=interval.start, end=interval.end)
    if not rng.overlaps(interval.start, interval.end):
        return None
    start = max(interval.start, rng.start)
    end = rng.end if interval.end is None else min(interval.end, rng.end)
    return Entry(interval=interval, start=start, end=end)


class _RenderedLines:
    """Restartable view over the rendered lines of a Work."""

    def __init__(self, entries: Sequence[Entry]):
        self._entries = entries

    def __iter__(self) -> Iterator[str]:
        from .formatter import render_entry

        for e in self._entries:
            yield render_entry(e)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class Work:
    """Intervals selected by a query, ascending by clipped start."""

    items: tuple
    range: Optional[Range] = None

    def entries(self) -> _RenderedLines:
        return _RenderedLines(self.items)

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        total = timedelta(0)
        for e in self.items:
            total += e.duration(now)
        return total

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return f"{len(self.items)} entries loaded"


def query(intervals: Iterable[Interval], rng: Optional[Range] = None) -> Work:
    entries: List[Entry] = []
    for iv in intervals:
        e = clip(iv, rng)
        if e is not None:
            entries.append(e)
    # sort is stable: equal starts keep input order
    entries.sort(key=lambda e: e.start)
    return Work(items=tuple(entries), range=rng)


def tag_totals(work: Iterable[Entry], now: Optional[datetime] = None) -> Dict[str, timedelta]:
    """Total clipped duration per tag.

    Every tag of an entry is credited the entry's full duration.
    """
    totals: Dict[str, timedelta] = {}
    for e in work:
        d = e.duration(now)
        for tag in e.tags:
            totals[tag] = totals.get(tag, timedelta(0)) + d
    return dict(sorted(totals.items()))
