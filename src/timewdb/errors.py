"""Typed error hierarchy for timewdb."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Union


class TimewDBError(Exception):
    """Base exception for all timewdb errors."""


class DatabaseError(TimewDBError):
    """Raised when the interval database cannot be loaded."""


class DatabaseNotFound(DatabaseError):
    """Raised when the database root is missing or not a directory."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Timewarrior database not found: {self.path}")


class ParseError(DatabaseError):
    """Raised when a record cannot be decoded.

    ``file`` is None when parsing text that did not come from disk.
    ``line`` is 1-based.
    """

    def __init__(self, file: Optional[str], line: int, reason: str, token: Optional[str] = None):
        self.file = file
        self.line = line
        self.reason = reason
        self.token = token
        where = f"{file or '<text>'}:{line}"
        msg = f"{where}: {reason}"
        if token is not None:
            msg += f" ({token!r})"
        super().__init__(msg)


class MisplacedOpenInterval(ParseError):
    """Raised when an ongoing interval is not the last record of the database."""

    def __init__(self, file: Optional[str], line: int):
        super().__init__(file, line, "open interval is not the last record")


class RangeError(TimewDBError):
    """Raised when a range cannot be resolved."""


class InvalidRange(RangeError):
    def __init__(self, start: datetime, end: datetime):
        self.start = start
        self.end = end
        super().__init__(f"Range is invalid: {start.isoformat()} is after {end.isoformat()}")
