"""Decoder for Timewarrior data files.

Each record occupies one line::

    inc 20240105T083000Z - 20240105T101500Z # client "deep work" # "call with Ana"

The start timestamp is mandatory. A missing ``- <end>`` marks the ongoing
interval. After the first ``#`` every token is a tag; a bare ``#`` token
switches to the annotation. Tokens containing spaces are double-quoted,
with ``\\"`` and ``\\\\`` as escapes inside quotes.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from .errors import MisplacedOpenInterval, ParseError
from .models import AnnotationFragment, Interval, Tag, Token

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"
COMMENT_MARKER = "#"
ANNOTATION_MARKER = "#"

_TS_RE = re.compile(r"^[0-9]{8}T[0-9]{6}Z$")
_LINE_RE = re.compile(r"^inc (?P<start>[^ ]+)(?: - (?P<end>[^ ]+))?(?P<rest> #.*)?$")
_HEAD_RE = re.compile(r"^inc (?P<start>[^ ]+)(?: - (?P<end>[^ ]+))?")


def parse_timestamp(text: str) -> datetime:
    """Parse ``YYYYMMDDTHHMMSSZ`` into an aware UTC datetime."""
    if _TS_RE.match(text) is None:
        raise ValueError(f"not a timestamp: {text!r}")
    return datetime.strptime(text, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def tokenize(text: str, *, file: Optional[str] = None, line: int = 0) -> List[Tuple[str, bool]]:
    """Split the tag section of a record into ``(text, quoted)`` pairs."""
    tokens: List[Tuple[str, bool]] = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == " ":
            i += 1
            continue

        if c == '"':
            begin = i
            buf: List[str] = []
            i += 1
            while True:
                if i >= n:
                    raise ParseError(file, line, "unterminated quote", text[begin:])
                c = text[i]
                if c == "\\" and i + 1 < n:
                    buf.append(text[i + 1])
                    i += 2
                    continue
                if c == '"':
                    i += 1
                    break
                buf.append(c)
                i += 1
            if i < n and text[i] != " ":
                raise ParseError(file, line, "expected a space after closing quote", text[begin:])
            tokens.append(("".join(buf), True))
            continue

        j = text.find(" ", i)
        if j == -1:
            j = n
        word = text[i:j]
        if '"' in word:
            raise ParseError(file, line, "unexpected quote inside token", word)
        tokens.append((word, False))
        i = j
    return tokens


def classify(tokens: Iterable[Tuple[str, bool]]) -> List[Token]:
    """Resolve each raw token into a Tag or an AnnotationFragment."""
    out: List[Token] = []
    in_annotation = False
    for text, quoted in tokens:
        if in_annotation:
            out.append(AnnotationFragment(text))
        elif text == ANNOTATION_MARKER and not quoted:
            in_annotation = True
        else:
            out.append(Tag(text))
    return out


def _timestamp(text: str, *, file: Optional[str], line: int) -> datetime:
    try:
        return parse_timestamp(text)
    except ValueError:
        raise ParseError(file, line, "invalid timestamp", text) from None


def parse_line(text: str, *, file: Optional[str] = None, line: int = 0) -> Optional[Interval]:
    """Decode one record. Returns None for blank and comment lines."""
    s = text.strip(" \t")
    if not s or s.startswith(COMMENT_MARKER):
        return None

    m = _LINE_RE.match(s)
    if m is None:
        first = s.split(" ")[0]
        if first != "inc":
            raise ParseError(file, line, "unknown record type", first)
        head = _HEAD_RE.match(s)
        tail = (s[head.end():] if head is not None else s[len(first):]).split(" ")
        tail = [t for t in tail if t]
        raise ParseError(file, line, "expected 'inc <start> [- <end>] [# <tags>]'", tail[0] if tail else first)

    start = _timestamp(m.group("start"), file=file, line=line)
    end = None
    if m.group("end") is not None:
        end = _timestamp(m.group("end"), file=file, line=line)
        if end < start:
            raise ParseError(file, line, "interval ends before it starts", m.group("end"))

    tags: set = set()
    fragments: List[str] = []
    rest = m.group("rest")
    if rest is not None:
        body = rest[2:]
        if body and not body.startswith(" "):
            raise ParseError(file, line, "expected a space after '#'", body.split(" ")[0])
        for token in classify(tokenize(body, file=file, line=line)):
            if isinstance(token, Tag):
                tags.add(token.value)
            else:
                fragments.append(token.text)

    return Interval(
        start=start,
        end=end,
        tags=frozenset(tags),
        annotation=(" ".join(fragments) if fragments else None),
        source=file,
        line=line,
    )


def parse_intervals(text: str, *, source: Optional[str] = None, allow_open: bool = True) -> List[Interval]:
    """Decode a whole data file, in file order.

    An ongoing interval is accepted only as the final record, and only when
    ``allow_open`` is true (the file is the most recent one).
    """
    intervals: List[Interval] = []
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for number, raw in enumerate(lines, start=1):
        if raw.endswith("\r"):
            raw = raw[:-1]
        iv = parse_line(raw, file=source, line=number)
        if iv is None:
            continue
        if intervals and intervals[-1].is_open:
            raise MisplacedOpenInterval(source, intervals[-1].line)
        intervals.append(iv)

    if intervals and intervals[-1].is_open and not allow_open:
        raise MisplacedOpenInterval(source, intervals[-1].line)
    return intervals
