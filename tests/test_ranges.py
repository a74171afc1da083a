import calendar
from datetime import date, datetime, timedelta, timezone

import pytest

from timewdb.errors import InvalidRange, RangeError
from timewdb.ranges import Range, resolve, weekday_index


def at(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_today_and_yesterday():
    now = at(2024, 3, 10, 15, 30)
    assert Range.today(now) == Range(at(2024, 3, 10), at(2024, 3, 11))
    assert Range.yesterday(now) == Range(at(2024, 3, 9), at(2024, 3, 10))
    assert Range.today(at(2024, 3, 10)) == Range(at(2024, 3, 10), at(2024, 3, 11))


def test_yesterday_crosses_year():
    assert Range.yesterday(at(2025, 1, 1, 8)) == Range(at(2024, 12, 31), at(2025, 1, 1))


def test_week_starts_on_monday_by_default():
    now = at(2024, 3, 13, 9)  # Wednesday
    assert Range.this_week(now) == Range(at(2024, 3, 11), at(2024, 3, 18))
    assert Range.last_week(now) == Range(at(2024, 3, 4), at(2024, 3, 11))
    assert Range.this_week(at(2024, 3, 11)) == Range(at(2024, 3, 11), at(2024, 3, 18))
    assert Range.this_week(now).duration == timedelta(days=7)


def test_week_start_is_configurable():
    now = at(2024, 3, 13, 9)
    assert Range.this_week(now, week_start=calendar.SUNDAY) == Range(at(2024, 3, 10), at(2024, 3, 17))
    assert Range.this_week(now, week_start="sunday") == Range(at(2024, 3, 10), at(2024, 3, 17))
    assert Range.last_week(now, week_start="Sat") == Range(at(2024, 3, 2), at(2024, 3, 9))


def test_month_boundaries():
    assert Range.this_month(at(2024, 2, 15)) == Range(at(2024, 2, 1), at(2024, 3, 1))
    assert Range.this_month(at(2024, 2, 15)).duration == timedelta(days=29)
    assert Range.this_month(at(2023, 2, 15)).duration == timedelta(days=28)
    assert Range.this_month(at(2024, 12, 15)) == Range(at(2024, 12, 1), at(2025, 1, 1))
    assert Range.last_month(at(2025, 1, 15)) == Range(at(2024, 12, 1), at(2025, 1, 1))
    assert Range.last_month(at(2024, 3, 31)) == Range(at(2024, 2, 1), at(2024, 3, 1))


def test_year_boundaries():
    assert Range.this_year(at(2024, 6, 1)) == Range(at(2024, 1, 1), at(2025, 1, 1))
    assert Range.this_year(at(2024, 6, 1)).duration == timedelta(days=366)
    assert Range.last_year(at(2024, 6, 1)) == Range(at(2023, 1, 1), at(2024, 1, 1))


def test_naive_now_is_local_time():
    rng = Range.today(datetime(2024, 3, 10, 15))
    assert rng.start.tzinfo is not None
    assert rng.start == datetime(2024, 3, 10).astimezone()
    assert rng.end == datetime(2024, 3, 11).astimezone()


def test_resolved_ranges_are_ordered():
    for name in ["today", "yesterday", "week", "lastweek", "month", "lastmonth", "year", "lastyear"]:
        for now in [at(2024, 2, 29, 23, 59), at(2024, 12, 31), at(2025, 1, 1, 0, 0, 1), datetime(2024, 7, 7, 12)]:
            rng = resolve(name, now)
            assert rng.start <= rng.end
            assert rng.duration > timedelta(0)


def test_period_aliases():
    now = at(2024, 3, 13)
    assert resolve("this_week", now) == resolve("week", now)
    assert resolve("last_month", now) == resolve("lastmonth", now)
    with pytest.raises(RangeError):
        resolve("fortnight", now)


def test_week_start_validation():
    assert weekday_index("monday") == calendar.MONDAY
    assert weekday_index("SUN") == calendar.SUNDAY
    assert weekday_index(3) == 3
    with pytest.raises(RangeError):
        weekday_index("funday")
    with pytest.raises(RangeError):
        weekday_index(7)
    with pytest.raises(RangeError):
        Range.this_week(at(2024, 3, 13), week_start="funday")


def test_custom_range():
    assert Range.custom(at(2024, 1, 1), at(2024, 1, 2)).duration == timedelta(days=1)
    assert Range.custom(at(2024, 1, 1), at(2024, 1, 1)).duration == timedelta(0)
    with pytest.raises(InvalidRange) as exc:
        Range.custom(at(2024, 1, 2), at(2024, 1, 1))
    assert exc.value.start == at(2024, 1, 2)
    assert isinstance(exc.value, RangeError)


def test_parse_range_text():
    assert Range.parse("20220101T120000Z - 20220101T130000Z") == Range(at(2022, 1, 1, 12), at(2022, 1, 1, 13))
    with pytest.raises(InvalidRange):
        Range.parse("20220101T130000Z - 20220101T120000Z")

    now = at(2022, 1, 2)
    assert Range.parse("20220101T120000Z", now=now) == Range(at(2022, 1, 1, 12), now)
    with pytest.raises(InvalidRange):
        Range.parse("20220103T120000Z", now=now)

    assert Range.parse(":month", now=at(2024, 2, 15)) == Range(at(2024, 2, 1), at(2024, 3, 1))
    assert Range.parse("lastweek", now=at(2024, 3, 13)) == Range(at(2024, 3, 4), at(2024, 3, 11))

    with pytest.raises(RangeError):
        Range.parse("１日１月２０２２年")
    with pytest.raises(RangeError):
        Range.parse("")


def test_intersection():
    a = Range(at(2022, 1, 1, 12), at(2022, 1, 1, 12, 45))
    b = Range(at(2022, 1, 1, 12, 30), at(2022, 1, 1, 13))
    assert a.intersection(b) == Range(at(2022, 1, 1, 12, 30), at(2022, 1, 1, 12, 45))
    assert b.intersection(a) == a.intersection(b)

    touching = Range(at(2022, 1, 1, 12, 45), at(2022, 1, 1, 13))
    assert a.intersection(touching) is None
    assert a.intersection(Range(at(2022, 1, 2), at(2022, 1, 3))) is None


def test_split():
    rng = Range(at(2022, 1, 1, 12), at(2022, 1, 1, 13))
    half = at(2022, 1, 1, 12, 30)
    assert rng.split() == (Range(rng.start, half), Range(half, rng.end))
    assert rng.split_at(half) == rng.split()
    for bad in (rng.start, rng.end, at(2022, 1, 1, 11), at(2022, 1, 1, 15)):
        with pytest.raises(RangeError):
            rng.split_at(bad)
    with pytest.raises(RangeError):
        Range(rng.start, rng.start).split()


def test_contains_and_days():
    rng = Range(at(2024, 3, 10), at(2024, 3, 12))
    assert rng.contains(rng.start)
    assert not rng.contains(rng.end)
    assert rng.days() == [date(2024, 3, 10), date(2024, 3, 11)]
    assert Range(at(2024, 3, 10, 23), at(2024, 3, 11, 1)).days() == [date(2024, 3, 10), date(2024, 3, 11)]
    assert Range(rng.start, rng.start).days() == []


def test_str_shows_duration():
    assert str(Range(at(2022, 1, 1, 12), at(2022, 1, 1, 12, 45))).endswith("[00:45:00]")
