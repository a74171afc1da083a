from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import load_config
from .db import resolve_data_dir
from .errors import TimewDBError
from .formatter import raw
from .query import Work
from .ranges import Range, weekday_index
from .report import build_summary, render_summary_text


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="timewdb",
        description="Read intervals from the Timewarrior database without running timew.",
    )
    p.add_argument("--data-dir", default=None, help="Timewarrior data directory (default: $TIMEWARRIORDB/data or ~/.timewarrior/data).")
    p.add_argument("--config", default=None, help="Path to the JSON config file.")
    p.add_argument("--week-start", default=None, help="First day of the week (default: monday).")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")
    p.add_argument("--version", action="store_true", help="Print version and exit.")

    sub = p.add_subparsers(dest="cmd", required=False)

    range_help = "':today', ':week', ':lastmonth', '<ts> - <ts>' ... (default: all history)"

    pr = sub.add_parser("raw", help="Print intervals in the database's own record syntax.")
    pr.add_argument("range", nargs="*", help=range_help)

    ps = sub.add_parser("summary", help="Show total time per tag.")
    ps.add_argument("range", nargs="*", help=range_help)

    pe = sub.add_parser("export", help="Export intervals as JSON or CSV.")
    pe.add_argument("range", nargs="*", help=range_help)
    pe.add_argument("--format", choices=["json", "csv"], default="json", help="Export format.")
    pe.add_argument("--out", default=None, help="Output file path (default: stdout).")
    return p


def main(argv: list[str] | None = None) -> int:
    from . import __version__
    argv = argv if argv is not None else sys.argv[1:]
    p = _parser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.version:
        print(__version__)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    cfg = load_config(args.config)
    week_start = args.week_start or cfg.week_start
    data_dir = resolve_data_dir(args.data_dir, cfg.data_dir)

    try:
        weekday_index(week_start)
        rng = _range(args.range, week_start)
        work = raw(rng, data_dir)
    except TimewDBError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.cmd == "raw":
        return _cmd_raw(work)
    if args.cmd == "summary":
        return _cmd_summary(work, " ".join(args.range))
    if args.cmd == "export":
        return _cmd_export(work, args)

    p.print_help()
    return 2


def _range(words: list[str], week_start: str) -> Optional[Range]:
    if not words:
        return None
    return Range.parse(" ".join(words), now=datetime.now(), week_start=week_start)


def _cmd_raw(work: Work) -> int:
    for line in work.entries():
        print(line)
    return 0


def _cmd_summary(work: Work, label: str) -> int:
    title = f"timewdb — {label or 'all history'}"
    print(render_summary_text(build_summary(work, title)))
    return 0


def _cmd_export(work: Work, args) -> int:
    rows = []
    for e in work:
        rows.append(
            {
                "id": e.id,
                "start": e.start.isoformat(),
                "end": (e.end.isoformat() if e.end is not None else None),
                "open": e.is_open,
                "duration_s": e.duration().total_seconds(),
                "tags": sorted(e.tags),
                "annotation": e.annotation,
            }
        )

    if args.format == "json":
        payload = json.dumps(rows, indent=2)
        if args.out:
            Path(args.out).write_text(payload, encoding="utf-8")
            print(f"Wrote {len(rows)} rows to {args.out}")
        else:
            print(payload)
        return 0

    # csv
    if args.out:
        out_f = open(args.out, "w", newline="", encoding="utf-8")
        close = True
    else:
        out_f = sys.stdout
        close = False

    try:
        fieldnames = ["id", "start", "end", "open", "duration_s", "tags", "annotation"]
        w = csv.DictWriter(out_f, fieldnames=fieldnames)
        w.writeheader()
        for row in rows:
            row = dict(row, tags=" ".join(row["tags"]))
            w.writerow(row)
    finally:
        if close:
            out_f.close()
            print(f"Wrote {len(rows)} rows to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
