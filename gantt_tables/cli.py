from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtGui import QGuiApplication

from .errors import GanttError
from .exporters import export_as_csv, export_as_html, export_as_pdf
from .models import DEFAULT_COLOR, PartitionOptions
from .partition import partition
from .storage import load_tasks

logger = logging.getLogger(__name__)

FORMATS = ("csv", "html", "pdf")


def _format_from_path(path: str) -> str:
    suffix = Path(path).suffix.lower().lstrip(".")
    if suffix == "htm":
        return "html"
    return suffix if suffix in FORMATS else "html"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gantt-tables",
        description="Render a task list as one calendar table per month.",
    )
    ap.add_argument(
        "--log-level",
        default=os.getenv("GANTT_TABLES_LOG_LEVEL", "WARNING"),
        help="Logging level (default: env GANTT_TABLES_LOG_LEVEL or WARNING)",
    )
    ap.add_argument("--default-color", default=DEFAULT_COLOR, help=f"Bar color for tasks without one (default: {DEFAULT_COLOR})")
    ap.add_argument("--no-weekend-shading", action="store_true", help="Do not shade Saturday/Sunday columns")
    sub = ap.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Export the month tables of a task CSV")
    render.add_argument("tasks", help="Task CSV with a label,start,end[,color] header")
    render.add_argument("--out", required=True, help="Output path")
    render.add_argument("--format", choices=FORMATS, default=None, help="Output format (default: from --out suffix)")
    render.add_argument("--no-styles", action="store_true", help="HTML: omit the default stylesheet")
    render.add_argument("--no-dates", action="store_true", help="PDF: omit the Start/End columns")

    gui = sub.add_parser("gui", help="Open the task editor window")
    gui.add_argument("tasks", nargs="?", default=None, help="Task CSV to open")
    return ap


def _render(args: argparse.Namespace, options: PartitionOptions) -> None:
    tasks = load_tasks(args.tasks, default_color=options.default_color)
    grids = partition(tasks, options)
    fmt = args.format or _format_from_path(args.out)
    if fmt == "csv":
        export_as_csv(args.out, grids)
    elif fmt == "pdf":
        # QPdfWriter needs a GUI application for font metrics
        app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])  # noqa: F841
        export_as_pdf(args.out, grids, include_dates=not args.no_dates)
    else:
        export_as_html(args.out, grids, inject_styles=not args.no_styles)
    print(f"Wrote {len(grids)} month table(s) to {args.out}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    options = PartitionOptions(weekend_shading=not args.no_weekend_shading, default_color=args.default_color)

    if args.command == "gui":
        from .app import run

        return run(args.tasks, options)

    try:
        _render(args, options)
    except GanttError as exc:
        logger.debug("Render failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


def gui_main() -> int:
    return main(["gui"] + sys.argv[1:])
