"""Read-only access to the Timewarrior interval database.

    from timewdb import Range, formatter

    work = formatter.raw(Range.today())
    for line in work.entries():
        print(line)
"""

from . import formatter
from .errors import (
    DatabaseError,
    DatabaseNotFound,
    InvalidRange,
    MisplacedOpenInterval,
    ParseError,
    RangeError,
    TimewDBError,
)
from .models import Entry, Interval
from .query import Work, query, tag_totals
from .ranges import Range

__version__ = "0.1.0"

__all__ = [
    "DatabaseError",
    "DatabaseNotFound",
    "Entry",
    "Interval",
    "InvalidRange",
    "MisplacedOpenInterval",
    "ParseError",
    "Range",
    "RangeError",
    "TimewDBError",
    "Work",
    "formatter",
    "query",
    "tag_totals",
]
