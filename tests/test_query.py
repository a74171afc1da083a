from datetime import datetime, timedelta, timezone

from timewdb.models import Interval
from timewdb.query import clip, query, tag_totals
from timewdb.ranges import Range


def at(hour, minute=0, day=5):
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


def iv(start, end, tags=(), annotation=None):
    return Interval(start=start, end=end, tags=frozenset(tags), annotation=annotation)


def test_partial_overlap_is_clipped():
    stored = iv(at(9), at(10), {"work"})
    work = query([stored], Range(at(9, 30), at(11)))
    assert len(work) == 1
    entry = list(work)[0]
    assert (entry.start, entry.end) == (at(9, 30), at(10))
    assert entry.interval is stored
    assert entry.duration() == timedelta(minutes=30)


def test_touching_intervals_do_not_overlap():
    rng = Range(at(10), at(11))
    assert clip(iv(at(9), at(10)), rng) is None
    assert clip(iv(at(11), at(12)), rng) is None
    assert clip(iv(at(11), None), rng) is None
    assert clip(iv(at(9), at(12)), rng).duration() == timedelta(hours=1)


def test_open_interval_is_clipped_but_stays_open():
    work = query([iv(at(9), None, {"work"})], Range(at(8), at(12)))
    entry = list(work)[0]
    assert entry.is_open
    assert entry.end == at(12)
    assert entry.duration() == timedelta(hours=3)
    assert entry.interval.end is None


def test_no_range_keeps_everything_unclipped():
    intervals = [iv(at(9), at(10)), iv(at(11), None)]
    work = query(intervals, None)
    assert [(e.start, e.end) for e in work] == [(at(9), at(10)), (at(11), None)]
    assert work.duration(now=at(12)) == timedelta(hours=2)


def test_output_sorted_by_clipped_start_and_stable():
    early = iv(at(8), at(10), {"early"})
    first = iv(at(9), at(9, 30), {"first"})
    second = iv(at(9), at(9, 45), {"second"})
    late = iv(at(11), at(12), {"late"})
    work = query([late, early, first, second], Range(at(9), at(13)))
    assert [sorted(e.tags)[0] for e in work] == ["early", "first", "second", "late"]


def test_multi_tag_interval_credits_each_tag_fully():
    work = query(
        [iv(at(9), at(9, 30), {"work", "urgent"}), iv(at(10), at(10, 15), {"work"}), iv(at(11), at(12))],
        Range(at(0), at(23)),
    )
    totals = tag_totals(work)
    assert totals == {"urgent": timedelta(minutes=30), "work": timedelta(minutes=45)}
    assert list(totals) == ["urgent", "work"]


def test_tag_totals_use_clipped_durations():
    work = query([iv(at(9), None, {"work"})], Range(at(9), at(10)))
    assert tag_totals(work) == {"work": timedelta(hours=1)}


def test_work_entries_are_restartable():
    work = query([iv(at(9), at(10), {"b", "a"}), iv(at(11), None)], None)
    lines = work.entries()
    first = list(lines)
    assert first == list(lines)
    assert first == [
        "inc 20240105T090000Z - 20240105T100000Z # a b",
        "inc 20240105T110000Z",
    ]
    assert len(lines) == 2
    assert str(work) == "2 entries loaded"


def test_empty_query():
    work = query([], Range(at(9), at(10)))
    assert len(work) == 0
    assert list(work.entries()) == []
    assert work.duration() == timedelta(0)
