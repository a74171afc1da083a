"""Render queried intervals back into the on-disk record syntax."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional, Union

from .db import load_intervals, resolve_data_dir
from .models import Entry
from .parser import ANNOTATION_MARKER, format_timestamp
from .query import Work, query
from .ranges import Range

logger = logging.getLogger(__name__)


def _escape(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def quote_tag(tag: str) -> str:
    if not tag or tag == ANNOTATION_MARKER or any(c in tag for c in ' "\\'):
        return _escape(tag)
    return tag


def render_interval(
    start: datetime,
    end: Optional[datetime],
    tags: AbstractSet[str] = frozenset(),
    annotation: Optional[str] = None,
) -> str:
    parts: List[str] = ["inc", format_timestamp(start)]
    if end is not None:
        parts += ["-", format_timestamp(end)]
    if tags or annotation is not None:
        parts.append("#")
        parts.extend(quote_tag(t) for t in sorted(tags))
        if annotation is not None:
            parts += [ANNOTATION_MARKER, _escape(annotation)]
    return " ".join(parts)


def render_entry(entry: Entry) -> str:
    # open intervals are written without an end even when clipped
    end = None if entry.is_open else entry.end
    return render_interval(entry.start, end, entry.tags, entry.annotation)


def render(work: Iterable[Entry]) -> str:
    return "".join(render_entry(e) + "\n" for e in work)


def raw(range: Optional[Range] = None, data_dir: Optional[Union[str, Path]] = None) -> Work:
    """Load the intervals overlapping ``range`` (all history for None).

    ``data_dir`` defaults to the resolved Timewarrior data directory.
    """
    root = resolve_data_dir(data_dir)
    logger.debug("Reading %s for %s", root, range if range is not None else "all history")
    return query(load_intervals(root, range), range)
