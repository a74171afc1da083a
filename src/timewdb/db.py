from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, replace
from datetime import timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import DatabaseError, DatabaseNotFound, MisplacedOpenInterval, ParseError
from .models import Interval
from .parser import parse_intervals
from .ranges import Range

logger = logging.getLogger(__name__)

DATAFILE_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>0[1-9]|1[0-2])\.data$")

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Datafile:
    path: Path
    year: int
    month: int

    @property
    def key(self) -> Tuple[int, int]:
        return (self.year, self.month)


def resolve_data_dir(explicit_path: Optional[PathLike] = None, configured: Optional[str] = None) -> Path:
    """Locate the Timewarrior data directory. Nothing is created.

    Order: explicit path, configured path, ``$TIMEWARRIORDB/data``,
    ``~/.timewarrior/data`` when present, then the XDG data location.
    """
    if explicit_path:
        return Path(explicit_path).expanduser()
    if configured:
        return Path(configured).expanduser()

    env = os.environ.get("TIMEWARRIORDB")
    if env:
        return Path(env).expanduser() / "data"

    legacy = Path.home() / ".timewarrior" / "data"
    if legacy.is_dir():
        return legacy

    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "timewarrior" / "data"
    return Path.home() / ".local" / "share" / "timewarrior" / "data"


def list_datafiles(root: PathLike) -> List[Datafile]:
    """All ``YYYY-MM.data`` files under ``root``, oldest first."""
    root = Path(root)
    if not root.is_dir():
        raise DatabaseNotFound(root)

    out: List[Datafile] = []
    for p in root.iterdir():
        m = DATAFILE_RE.match(p.name)
        if m is None or not p.is_file():
            continue
        out.append(Datafile(path=p, year=int(m.group("year")), month=int(m.group("month"))))
    out.sort(key=lambda f: f.key)
    return out


def _month_key(year: int, month: int, shift: int = 0) -> Tuple[int, int]:
    idx = year * 12 + (month - 1) + shift
    return (idx // 12, idx % 12 + 1)


def select_datafiles(files: List[Datafile], rng: Optional[Range]) -> List[Datafile]:
    """Files needed to load ``rng``.

    Starts at the month before the range (intervals crossing a month
    boundary). Every later file is kept: interval ids count back from the
    newest record, and the newest file may hold the ongoing interval.
    """
    if rng is None or not files:
        return list(files)

    start = rng.start.astimezone(timezone.utc)
    first = _month_key(start.year, start.month, -1)

    selected = [f for f in files if f.key >= first]
    for f in files:
        if f not in selected:
            logger.debug("Skipping %s (outside %s)", f.path.name, rng)
    return selected


def read_datafile(datafile: Datafile, *, allow_open: bool) -> List[Interval]:
    source = str(datafile.path)
    try:
        with open(datafile.path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        raise DatabaseError(f"Cannot read {source}: {exc}") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        line = raw.count(b"\n", 0, exc.start) + 1
        raise ParseError(source, line, "invalid UTF-8") from exc

    intervals = parse_intervals(text, source=source, allow_open=allow_open)
    logger.debug("Loaded %d intervals from %s", len(intervals), datafile.path.name)
    return intervals


def load_intervals(root: PathLike, rng: Optional[Range] = None) -> List[Interval]:
    """Read every interval that may overlap ``rng`` (all of them for None).

    The result is sorted ascending by start; records of equal start keep
    file order. Ids are numbered from 1 at the newest record, as timew
    shows them. No clipping is done here.
    """
    files = list_datafiles(root)
    if not files:
        return []
    newest = files[-1]

    seen: set = set()
    intervals: List[Interval] = []
    for f in select_datafiles(files, rng):
        parsed = read_datafile(f, allow_open=(f is newest))
        intervals.extend(iv for iv in parsed if iv not in seen)
        seen.update(parsed)

    intervals.sort(key=lambda iv: iv.start)
    for iv in intervals[:-1]:
        if iv.is_open:
            raise MisplacedOpenInterval(iv.source, iv.line)

    total = len(intervals)
    return [replace(iv, id=total - i) for i, iv in enumerate(intervals)]


def load_all(root: PathLike) -> List[Interval]:
    return load_intervals(root, None)
