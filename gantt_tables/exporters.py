"""Export helpers for CSV, HTML and PDF month tables."""
from __future__ import annotations

import csv
import html
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QColor, QFont, QPageLayout, QPageSize, QPainter, QPen, QPdfWriter

from .calendar_math import format_day_month
from .models import MonthGrid, TaskRow

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Task", "Start", "End"]
CSV_ACTIVE_MARKER = "X"

TASK_COLUMN_TITLE = "Task"
WEEKDAY_ROW_TITLE = "Period"

PDF_TASK_MIN_WIDTH = 160
PDF_TASK_MAX_WIDTH_RATIO = 0.35  # fraction of available width
PDF_TASK_PADDING = 48
PDF_START_END_WIDTH = 90
PDF_TIMELINE_MIN_COL_WIDTH = 12
PDF_PAGE_MARGIN_RATIO = 0.04
PDF_TITLE_HEIGHT = 70
PDF_HEADER_HEIGHT = 40
PDF_ROW_HEIGHT_MIN = 24
PDF_ROW_HEIGHT_MAX = 48
PDF_FONT_SIZE = 8
PDF_TITLE_FONT_SIZE = 14
PDF_ROW_TEXT_BOTTOM_PADDING = 4
PDF_HEADER_FILL = QColor("#f2f2f2")
PDF_WEEKEND_FILL = QColor("#fafafa")
PDF_PEN_COLOR = QColor("#333333")

DEFAULT_STYLESHEET = """
@page { size: A4 portrait; margin: 10mm; }
@media print { .gt-month { page-break-after: always; } .gt-month:last-child { page-break-after: auto; } }

.gt-wrap { font-family: system-ui, -apple-system, Segoe UI, Roboto, "Helvetica Neue", Arial, sans-serif; padding: 16px; }
.gt-month { margin-bottom: 18px; }
.gt-month h2 { margin: 8px 0 6px; font-size: 16px; text-transform: capitalize; }

.gt-table { width: 100%; border-collapse: collapse; table-layout: fixed; }
.gt-table thead th { position: sticky; top: 0; background: #f2f2f2; }
.gt-table th, .gt-table td { border: 1px solid #d0d0d0; padding: 2px 4px; font-size: 11px; text-align: center; }
.gt-task, .gt-task-cell { text-align: left; width: 22ch; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
.gt-days th, .gt-days td { width: calc((100% - 22ch) / var(--days)); }
.gt-we { background: #fafafa; }

.gt-bar { display: block; height: 10px; border-radius: 3px; background: #7aa7ff; }
"""


def row_caption(row: TaskRow) -> str:
    """Label plus the task's full (unclipped) range, e.g. "Study  (03/09→10/09)"."""
    task = row.task
    return f"{task.label}  ({format_day_month(task.start)}→{format_day_month(task.end)})"


def export_as_csv(path: Path | str, grids: Iterable[MonthGrid]) -> None:
    """Export every month as its own block of rows, separated by a blank row."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        for index, grid in enumerate(grids):
            if index:
                writer.writerow([])
            writer.writerow([grid.title])
            writer.writerow(CSV_HEADERS + [str(column.day) for column in grid.day_columns])
            writer.writerow([WEEKDAY_ROW_TITLE, "", ""] + [column.label for column in grid.day_columns])
            for row in grid.rows:
                markers = [CSV_ACTIVE_MARKER if flag else "" for flag in row.occupied]
                writer.writerow([row.task.label, row.task.start.isoformat(), row.task.end.isoformat()] + markers)
    logger.info("Exported CSV to %s", csv_path)


def render_html(grids: Iterable[MonthGrid], *, inject_styles: bool = True) -> str:
    """Render the month grids as a standalone HTML document of tables."""
    parts: List[str] = ["<!DOCTYPE html>", "<html>", "<head>", '<meta charset="utf-8">']
    if inject_styles:
        parts.append('<style id="gantt-table-styles">' + DEFAULT_STYLESHEET + "</style>")
    parts.extend(["</head>", "<body>", '<div class="gt-wrap">'])
    for grid in grids:
        parts.append(_render_month_section(grid))
    parts.extend(["</div>", "</body>", "</html>"])
    return "\n".join(parts) + "\n"


def export_as_html(path: Path | str, grids: Iterable[MonthGrid], *, inject_styles: bool = True) -> None:
    html_path = Path(path)
    html_path.parent.mkdir(parents=True, exist_ok=True)
    html_path.write_text(render_html(grids, inject_styles=inject_styles), encoding="utf-8")
    logger.info("Exported HTML to %s", html_path)


def _shade_attr(shaded: bool) -> str:
    return ' class="gt-we"' if shaded else ""


def _render_month_section(grid: MonthGrid) -> str:
    lines = [
        '<section class="gt-month">',
        f"<h2>{html.escape(grid.title)}</h2>",
        f'<table class="gt-table" style="--days: {grid.day_count}">',
        "<thead>",
    ]
    numbers = "".join(f"<th{_shade_attr(c.shaded)}>{c.day}</th>" for c in grid.day_columns)
    lines.append(f'<tr><th class="gt-task">{TASK_COLUMN_TITLE}</th>{numbers}</tr>')
    weekdays = "".join(f"<th{_shade_attr(c.shaded)}>{c.label}</th>" for c in grid.day_columns)
    lines.append(f'<tr class="gt-days"><th class="gt-task-cell">{WEEKDAY_ROW_TITLE}</th>{weekdays}</tr>')
    lines.extend(["</thead>", "<tbody>"])
    for row in grid.rows:
        bar = f'<span class="gt-bar" style="background: {html.escape(row.task.color, quote=True)}"></span>'
        cells = "".join(
            f"<td{_shade_attr(column.shaded)}>{bar if flag else ''}</td>"
            for column, flag in zip(grid.day_columns, row.occupied)
        )
        lines.append(f'<tr><td class="gt-task">{html.escape(row_caption(row))}</td>{cells}</tr>')
    lines.extend(["</tbody>", "</table>", "</section>"])
    return "\n".join(lines)


def export_as_pdf(path: Path | str, grids: Iterable[MonthGrid], *, include_dates: bool = True) -> None:
    """Render one A4 portrait page per month, continuing a month onto extra pages when its rows overflow.

    A QGuiApplication (or QApplication) must exist before calling this.
    """
    pdf_path = Path(path)
    pdf_path.parent.mkdir(parents=True, exist_ok=True)

    writer = QPdfWriter(str(pdf_path))
    writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    writer.setPageOrientation(QPageLayout.Orientation.Portrait)
    writer.setResolution(300)

    per_page = rows_per_page(_content_rect(writer).height())
    painter = QPainter(writer)
    pages = 0
    for grid in grids:
        chunks = split_rows(grid.rows, per_page)
        if len(chunks) > 1:
            logger.info("%s continues over %d pages (%d rows)", grid.title, len(chunks), len(grid.rows))
        for part, rows in enumerate(chunks):
            if pages:
                writer.newPage()
            _draw_pdf_month(painter, writer, grid, rows, include_dates, continued=part > 0)
            pages += 1
    if not pages:
        _draw_pdf_empty(painter, writer)
    painter.end()
    logger.info("Exported %d page(s) to %s", max(1, pages), pdf_path)


def rows_per_page(content_height: float) -> int:
    """How many rows of minimum height fit below the title and day headers."""
    available = content_height - PDF_TITLE_HEIGHT - 2 * PDF_HEADER_HEIGHT
    return max(1, int(available // PDF_ROW_HEIGHT_MIN))


def split_rows(rows: Sequence[TaskRow], per_page: int) -> List[Tuple[TaskRow, ...]]:
    """Cut a month's rows into page-sized runs, keeping their order."""
    rows = tuple(rows)
    return [rows[start:start + per_page] for start in range(0, len(rows), per_page)]


def _content_rect(writer: QPdfWriter):
    page_rect = writer.pageLayout().paintRectPixels(writer.resolution())
    margin = int(page_rect.width() * PDF_PAGE_MARGIN_RATIO)
    return page_rect.adjusted(margin, margin, -margin, -margin)


def _compute_text_columns(font_metrics, content_rect, rows: Sequence[TaskRow], include_dates: bool) -> List[tuple[str, int]]:
    """Figure out how wide the Task/Start/End columns should be for PDF."""
    longest_task = max((font_metrics.horizontalAdvance(row_caption(row)) for row in rows), default=0)
    proportional_cap = int(content_rect.width() * PDF_TASK_MAX_WIDTH_RATIO)
    desired_width = longest_task + PDF_TASK_PADDING
    name_width = max(PDF_TASK_MIN_WIDTH, min(desired_width, proportional_cap))
    columns = [(TASK_COLUMN_TITLE, name_width)]
    if include_dates:
        columns.extend([("Start", PDF_START_END_WIDTH), ("End", PDF_START_END_WIDTH)])
    return columns


def _compute_day_layout(content_rect, text_columns, day_count: int):
    """Decide where the day columns begin and how wide each day is."""
    text_total_width = sum(width for _, width in text_columns)
    remaining = max(1, content_rect.width() - text_total_width)
    col_width = max(PDF_TIMELINE_MIN_COL_WIDTH, remaining / max(1, day_count))
    return col_width, content_rect.left() + text_total_width


def _compute_row_height(content_rect, rows: Sequence[TaskRow]) -> int:
    """Compute a bounded row height so all rows fit on the page."""
    available_height = content_rect.height() - PDF_TITLE_HEIGHT - 2 * PDF_HEADER_HEIGHT
    available_height = max(PDF_ROW_HEIGHT_MIN, available_height)
    return max(PDF_ROW_HEIGHT_MIN, min(PDF_ROW_HEIGHT_MAX, int(available_height / max(1, len(rows)))))


def _setup_painter(painter: QPainter, point_size: int) -> None:
    painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
    font = QFont(painter.font())
    font.setPointSize(point_size)
    painter.setFont(font)
    pen = QPen(PDF_PEN_COLOR)
    pen.setWidth(1)
    painter.setPen(pen)


def _draw_pdf_month(
    painter: QPainter,
    writer: QPdfWriter,
    grid: MonthGrid,
    rows: Sequence[TaskRow],
    include_dates: bool,
    *,
    continued: bool = False,
) -> None:
    content_rect = _content_rect(writer)

    _setup_painter(painter, PDF_TITLE_FONT_SIZE)
    title_rect = QRectF(content_rect.left(), content_rect.top(), content_rect.width(), PDF_TITLE_HEIGHT)
    title = f"{grid.title} (continued)" if continued else grid.title
    painter.drawText(title_rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter, title)

    _setup_painter(painter, PDF_FONT_SIZE)
    font_metrics = painter.fontMetrics()
    text_columns = _compute_text_columns(font_metrics, content_rect, grid.rows, include_dates)
    col_width, days_start_x = _compute_day_layout(content_rect, text_columns, grid.day_count)
    row_height = _compute_row_height(content_rect, rows)

    column_positions: List[float] = []
    cursor_x = content_rect.left()
    for _, width in text_columns:
        column_positions.append(cursor_x)
        cursor_x += width

    header_y = content_rect.top() + PDF_TITLE_HEIGHT
    # Text column headers span both header rows
    for (title, width), x in zip(text_columns, column_positions):
        rect = QRectF(x, header_y, width, 2 * PDF_HEADER_HEIGHT)
        painter.fillRect(rect, PDF_HEADER_FILL)
        painter.drawRect(rect)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, title)

    for offset, column in enumerate(grid.day_columns):
        x = days_start_x + offset * col_width
        fill = PDF_WEEKEND_FILL if column.shaded else PDF_HEADER_FILL
        for line, text in enumerate((str(column.day), column.label[:2])):
            rect = QRectF(x, header_y + line * PDF_HEADER_HEIGHT, col_width, PDF_HEADER_HEIGHT)
            painter.fillRect(rect, fill)
            painter.drawRect(rect)
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)

    current_y = header_y + 2 * PDF_HEADER_HEIGHT
    for row in rows:
        values = [row_caption(row)]
        if include_dates:
            values.extend([format_day_month(row.task.start), format_day_month(row.task.end)])
        for (_title, width), x, value in zip(text_columns, column_positions, values):
            rect = QRectF(x, current_y, width, row_height)
            painter.drawRect(rect)
            first = x == column_positions[0]
            alignment = Qt.AlignmentFlag.AlignVCenter | (
                Qt.AlignmentFlag.AlignLeft if first else Qt.AlignmentFlag.AlignCenter
            )
            padding = 6 if first else 0
            text_rect = rect.adjusted(padding, 0, -padding, -PDF_ROW_TEXT_BOTTOM_PADDING)
            painter.drawText(text_rect, alignment, value)

        bar_color = QColor(row.task.color)
        for offset, (column, flag) in enumerate(zip(grid.day_columns, row.occupied)):
            rect = QRectF(days_start_x + offset * col_width, current_y, col_width, row_height)
            if column.shaded:
                painter.fillRect(rect, PDF_WEEKEND_FILL)
            painter.drawRect(rect)
            if flag:
                inset = row_height / 3
                painter.fillRect(rect.adjusted(1, inset, -1, -inset), bar_color)
        current_y += row_height


def _draw_pdf_empty(painter: QPainter, writer: QPdfWriter) -> None:
    content_rect = _content_rect(writer)
    _setup_painter(painter, PDF_FONT_SIZE)
    rect = QRectF(content_rect.left(), content_rect.top(), content_rect.width(), PDF_ROW_HEIGHT_MAX)
    painter.drawRect(rect)
    painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, "No tasks defined")
