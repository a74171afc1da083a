from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .query import Work, tag_totals
from .utils import pretty_duration


@dataclass(frozen=True)
class Summary:
    title: str
    total: timedelta
    entries: int
    by_tag: list[tuple[str, timedelta]]


def _bar(value: float, max_value: float, width: int = 18) -> str:
    if max_value <= 0:
        return ""
    filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "█" * filled + " " * (width - filled)


def build_summary(work: Work, title: str, now: Optional[datetime] = None) -> Summary:
    totals = tag_totals(work, now)
    by_tag = sorted(totals.items(), key=lambda x: x[1], reverse=True)
    return Summary(title=title, total=work.duration(now), entries=len(work), by_tag=by_tag)


def render_summary_text(rep: Summary) -> str:
    lines: list[str] = []
    lines.append(rep.title)
    lines.append("")

    lines.append(f"Total tracked: {pretty_duration(rep.total)}  ({rep.entries} intervals)")
    lines.append("")

    if rep.by_tag:
        width = max(len(name) for name, _ in rep.by_tag)
        maxv = max(v.total_seconds() for _, v in rep.by_tag)
        lines.append("By tag:")
        for name, d in rep.by_tag:
            bar = _bar(d.total_seconds(), maxv)
            lines.append(f"  {name:<{width}} {pretty_duration(d):>9}  {bar}")
    else:
        lines.append("By tag: (no data)")
    return "\n".join(lines)
