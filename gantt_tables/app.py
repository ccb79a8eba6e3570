"""Main PyQt application entry point."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from PyQt6.QtCore import Qt, QPoint, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent, QColor, QFont, QKeySequence
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QFileDialog,
    QHeaderView,
    QLabel,
    QMainWindow,
    QMenu,
    QMessageBox,
    QScrollArea,
    QSplitter,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from .errors import EmptyInputError, GanttError
from .exporters import export_as_csv, export_as_html, export_as_pdf, row_caption
from .models import MonthGrid, PartitionOptions, TaskInterval
from .normalize import normalize_tasks
from .partition import partition
from .storage import load_tasks, save_tasks

logger = logging.getLogger(__name__)

TASK_HEADERS = ["Task", "Start", "End", "Color"]
COLOR_COLUMN = 3
_UNDO_STACK_LIMIT = 20
_WEEKEND_COLOR = QColor("#fafafa")
_EMPTY_COLOR = QColor("white")
_STYLES_PROPERTY = "gantt_tables_styles"

DEFAULT_STYLESHEET = """
QLabel#monthTitle { font-size: 16px; font-weight: bold; margin: 8px 0 6px 0; }
QLabel#calendarMessage { color: #b00020; padding: 12px; }
QTableWidget { gridline-color: #d0d0d0; font-size: 11px; }
QHeaderView::section { background: #f2f2f2; border: 1px solid #d0d0d0; padding: 2px 4px; }
"""

TaskRecord = Dict[str, str]


def install_default_styles(app: QApplication) -> bool:
    """Apply the default stylesheet once per application.

    Returns True when the stylesheet was installed by this call.
    """
    if app.property(_STYLES_PROPERTY):
        return False
    app.setStyleSheet(app.styleSheet() + DEFAULT_STYLESHEET)
    app.setProperty(_STYLES_PROPERTY, True)
    return True


class TaskTableWidget(QTableWidget):
    """Editable task list.

    The widget keeps a trailing blank row as a buffer for new entries and
    emits `tasks_updated` with the raw row records any time they change.
    """

    tasks_updated = pyqtSignal(list)
    undo_available = pyqtSignal(bool)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(0, len(TASK_HEADERS), parent)
        self.blank_row_index = 0
        self._block_cell = False
        self._undo_stack: List[List[TaskRecord]] = []
        self._setup_table()
        self._append_blank_row()
        self._emit_undo_available()

    def _setup_table(self) -> None:
        self.setHorizontalHeaderLabels(TASK_HEADERS)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setEditTriggers(
            QAbstractItemView.EditTrigger.DoubleClicked
            | QAbstractItemView.EditTrigger.EditKeyPressed
            | QAbstractItemView.EditTrigger.AnyKeyPressed
        )
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)
        self.cellChanged.connect(self._handle_cell_changed)
        self.verticalHeader().setVisible(False)

        header = self.horizontalHeader()
        fm = self.fontMetrics()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        date_width = max(fm.horizontalAdvance("0000-00-00") + 16, 96)
        for col in (1, 2, COLOR_COLUMN):
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.Fixed)
            self.setColumnWidth(col, date_width)

    # --- Row lifecycle helpers -------------------------------------------------

    def _append_blank_row(self) -> None:
        row = self.rowCount()
        self.insertRow(row)
        self.blank_row_index = row
        for col in range(self.columnCount()):
            self.setItem(row, col, QTableWidgetItem(""))

    def _ensure_blank_row(self) -> None:
        """Keep a blank row at the bottom so users can type new tasks inline."""
        if not self._row_has_data(self.blank_row_index):
            return
        self._append_blank_row()

    def _row_has_data(self, row: int) -> bool:
        if row < 0 or row >= self.rowCount():
            return False
        return any(self._text(row, col) for col in range(self.columnCount()))

    def _text(self, row: int, col: int) -> str:
        item = self.item(row, col)
        return item.text().strip() if item else ""

    def _show_context_menu(self, position: QPoint) -> None:
        """Provide quick row actions (insert/delete/undo)."""
        index = self.indexAt(position)
        if not index.isValid():
            return
        row = index.row()
        if row == self.blank_row_index:
            return
        menu = QMenu(self)
        insert_action = menu.addAction("Insert row")
        delete_action = menu.addAction("Delete row")
        menu.addSeparator()
        undo_action = menu.addAction("Undo delete")
        undo_action.setEnabled(bool(self._undo_stack))
        action = menu.exec(self.viewport().mapToGlobal(position))
        if action == insert_action:
            self.insert_row_after(row)
        elif action == delete_action:
            self.delete_row(row)
        elif action == undo_action:
            self.undo_last_change()

    def insert_row_after(self, row: int) -> None:
        insert_at = min(self.blank_row_index, row + 1)
        self._block_cell = True
        self.insertRow(insert_at)
        for col in range(self.columnCount()):
            self.setItem(insert_at, col, QTableWidgetItem(""))
        self._block_cell = False
        if insert_at <= self.blank_row_index:
            self.blank_row_index += 1
        self.selectRow(insert_at)

    def delete_row(self, row: int) -> None:
        if row == self.blank_row_index:
            return
        self._push_undo_state()
        self.removeRow(row)
        if self.rowCount() == 0 or self._row_has_data(self.rowCount() - 1):
            self._append_blank_row()
        else:
            self.blank_row_index = self.rowCount() - 1
        self.tasks_updated.emit(self.get_records())

    def _handle_cell_changed(self, row: int, column: int) -> None:
        if self._block_cell:
            return
        if row == self.blank_row_index and not self._row_has_data(row):
            return
        if column == COLOR_COLUMN:
            self._paint_color(row)
        self._ensure_blank_row()
        self.tasks_updated.emit(self.get_records())

    def _paint_color(self, row: int) -> None:
        """Preview the task color as the background of its color cell."""
        item = self.item(row, COLOR_COLUMN)
        if item is None:
            return
        color = QColor(item.text().strip())
        self._block_cell = True
        item.setBackground(color if item.text().strip() and color.isValid() else _EMPTY_COLOR)
        self._block_cell = False

    # --- Data access -----------------------------------------------------------

    def get_records(self) -> List[TaskRecord]:
        """Return the raw text of every non-blank row, in table order."""
        records: List[TaskRecord] = []
        for row in range(self.rowCount()):
            if row == self.blank_row_index or not self._row_has_data(row):
                continue
            records.append(
                {
                    "label": self._text(row, 0),
                    "start": self._text(row, 1),
                    "end": self._text(row, 2),
                    "color": self._text(row, COLOR_COLUMN),
                }
            )
        return records

    def get_tasks(self, default_color: Optional[str] = None) -> List[TaskInterval]:
        """Validate the rows; raises GanttError on the first bad row."""
        records = self.get_records()
        if default_color is None:
            return normalize_tasks(records)
        return normalize_tasks(records, default_color=default_color)

    def set_records(self, records: Sequence[TaskRecord]) -> None:
        self._block_cell = True
        self.setRowCount(0)
        for record in records:
            row = self.rowCount()
            self.insertRow(row)
            for col, key in enumerate(("label", "start", "end", "color")):
                self.setItem(row, col, QTableWidgetItem(record.get(key, "")))
        self._append_blank_row()
        self._block_cell = False
        for row in range(self.blank_row_index):
            self._paint_color(row)
        self.tasks_updated.emit(self.get_records())

    def set_tasks(self, tasks: Iterable[TaskInterval]) -> None:
        self.set_records(
            [
                {
                    "label": task.label,
                    "start": task.start.isoformat(),
                    "end": task.end.isoformat(),
                    "color": task.color,
                }
                for task in tasks
            ]
        )

    # --- Undo ------------------------------------------------------------------

    def reset_undo_stack(self) -> None:
        """Drop all undo history (used after opening a new file)."""
        self._undo_stack.clear()
        self._emit_undo_available()

    def undo_last_change(self) -> bool:
        if not self._undo_stack:
            return False
        snapshot = self._undo_stack.pop()
        self.set_records(snapshot)
        self._emit_undo_available()
        return True

    def _push_undo_state(self) -> None:
        """Persist the latest snapshot and trim the fixed-size undo buffer."""
        self._undo_stack.append([dict(record) for record in self.get_records()])
        if len(self._undo_stack) > _UNDO_STACK_LIMIT:
            self._undo_stack.pop(0)
        self._emit_undo_available()

    def _emit_undo_available(self) -> None:
        self.undo_available.emit(bool(self._undo_stack))


class MonthGridWidget(QTableWidget):
    """Read-only table for one month: one row per task, one column per day."""

    def __init__(self, grid: MonthGrid, parent: Optional[QWidget] = None) -> None:
        super().__init__(len(grid.rows), 1 + grid.day_count, parent)
        self.grid = grid
        self.day_start_col = 1
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.verticalHeader().setVisible(False)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self._build_headers()
        self._fill_rows()
        self._configure_size()

    def _build_headers(self) -> None:
        labels = [TASK_HEADERS[0]] + [f"{c.day}\n{c.label[:2]}" for c in self.grid.day_columns]
        self.setHorizontalHeaderLabels(labels)
        for offset, column in enumerate(self.grid.day_columns):
            header_item = self.horizontalHeaderItem(self.day_start_col + offset)
            if header_item is not None and column.shaded:
                header_item.setBackground(_WEEKEND_COLOR)

    def _fill_rows(self) -> None:
        for row_index, row in enumerate(self.grid.rows):
            caption = QTableWidgetItem(row_caption(row))
            caption.setToolTip(row_caption(row))
            self.setItem(row_index, 0, caption)
            bar_color = QColor(row.task.color)
            for offset, (column, flag) in enumerate(zip(self.grid.day_columns, row.occupied)):
                item = QTableWidgetItem("")
                if flag:
                    item.setBackground(bar_color)
                elif column.shaded:
                    item.setBackground(_WEEKEND_COLOR)
                else:
                    item.setBackground(_EMPTY_COLOR)
                self.setItem(row_index, self.day_start_col + offset, item)

    def _configure_size(self) -> None:
        header = self.horizontalHeader()
        fm = self.fontMetrics()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        day_width = max(fm.horizontalAdvance("00") + 8, 26)
        for col in range(self.day_start_col, self.columnCount()):
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.Fixed)
            self.setColumnWidth(col, day_width)
        rows_height = sum(self.rowHeight(row) for row in range(self.rowCount()))
        self.setFixedHeight(header.sizeHint().height() + rows_height + 2 * self.frameWidth() + 2)

    def is_occupied(self, row: int, day: int) -> bool:
        return self.grid.rows[row].occupied[day - 1]


class CalendarPanel(QScrollArea):
    """Vertical stack of month tables, or a message when there is nothing to draw."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWidgetResizable(True)
        self._container = QWidget()
        self._layout = QVBoxLayout(self._container)
        self.setWidget(self._container)
        self.month_widgets: List[MonthGridWidget] = []
        self.message: Optional[str] = None

    def _clear(self) -> None:
        self.month_widgets = []
        self.message = None
        while self._layout.count():
            item = self._layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()

    def set_grids(self, grids: Sequence[MonthGrid]) -> None:
        self._clear()
        for grid in grids:
            title = QLabel(grid.title)
            title.setObjectName("monthTitle")
            font = QFont(title.font())
            font.setBold(True)
            title.setFont(font)
            widget = MonthGridWidget(grid)
            self._layout.addWidget(title)
            self._layout.addWidget(widget)
            self.month_widgets.append(widget)
        self._layout.addStretch(1)

    def show_message(self, text: str) -> None:
        self._clear()
        label = QLabel(text)
        label.setObjectName("calendarMessage")
        label.setWordWrap(True)
        self._layout.addWidget(label)
        self._layout.addStretch(1)
        self.message = text


class MainWindow(QMainWindow):
    """Primary window with menus, the task editor and the month tables."""

    def __init__(self, options: Optional[PartitionOptions] = None) -> None:
        super().__init__()
        self.setWindowTitle("Gantt Tables")
        self.current_path: Optional[Path] = None
        self.options = options or PartitionOptions()
        self.grids: List[MonthGrid] = []
        self.table = TaskTableWidget()
        self.calendar = CalendarPanel()
        self.undo_action: QAction | None = None
        self.weekend_action: QAction | None = None
        # Recompute the month tables whenever a row changes.
        self.table.tasks_updated.connect(self.refresh)
        self.table.undo_available.connect(self._handle_undo_available)
        self._build_layout()
        self._build_menu()
        self.refresh(self.table.get_records())
        self.resize(1100, 800)

    def _build_layout(self) -> None:
        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.addWidget(self.table)
        splitter.addWidget(self.calendar)
        splitter.setStretchFactor(1, 3)
        self.setCentralWidget(splitter)

    def _build_menu(self) -> None:
        """Create File/Edit/View menus along with shortcuts."""
        menu = self.menuBar()
        file_menu = menu.addMenu("File")

        new_action = QAction("New", self)
        new_action.setShortcut(QKeySequence.StandardKey.New)
        new_action.triggered.connect(self.action_new)
        file_menu.addAction(new_action)

        open_action = QAction("Open", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.action_open)
        file_menu.addAction(open_action)

        save_action = QAction("Save", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self.action_save)
        file_menu.addAction(save_action)

        export_action = QAction("Export", self)
        export_action.triggered.connect(self.action_export)
        file_menu.addAction(export_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        edit_menu = menu.addMenu("Edit")
        undo_action = QAction("Undo delete", self)
        undo_action.setShortcut("Ctrl+Z")
        undo_action.setEnabled(False)
        undo_action.triggered.connect(self._handle_undo_request)
        edit_menu.addAction(undo_action)
        self.undo_action = undo_action

        view_menu = menu.addMenu("View")
        weekend_action = QAction("Shade weekends", self)
        weekend_action.setCheckable(True)
        weekend_action.setChecked(self.options.weekend_shading)
        weekend_action.toggled.connect(self.set_weekend_shading)
        view_menu.addAction(weekend_action)
        self.weekend_action = weekend_action

    def refresh(self, records: Optional[List[TaskRecord]] = None) -> None:
        """Re-partition the rows; invalid input clears the calendar instead of drawing part of it."""
        if records is None:
            records = self.table.get_records()
        try:
            self.grids = partition(records, self.options)
        except EmptyInputError:
            self.grids = []
            self.calendar.show_message("Add a task with a start and end date to see the calendar.")
            return
        except GanttError as exc:
            logger.debug("Not rendering calendar: %s", exc)
            self.grids = []
            self.calendar.show_message(str(exc))
            self.statusBar().showMessage(str(exc), 5000)
            return
        self.calendar.set_grids(self.grids)

    def set_weekend_shading(self, enabled: bool) -> None:
        self.options = PartitionOptions(weekend_shading=enabled, default_color=self.options.default_color)
        self.refresh()

    def load_file(self, path: Path | str) -> bool:
        try:
            tasks = load_tasks(path, default_color=self.options.default_color)
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Open failed", str(exc))
            return False
        self.table.set_tasks(tasks)
        self.table.reset_undo_stack()
        self.current_path = Path(path)
        self.statusBar().showMessage(f"Loaded tasks from {path}", 3000)
        return True

    # Menu actions ------------------------------------------------------
    def action_new(self) -> None:
        self.table.set_records([])
        self.table.reset_undo_stack()
        self.current_path = None
        self.statusBar().showMessage("Started new task list", 3000)

    def action_open(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open tasks", filter="CSV Files (*.csv)")
        if not path:
            return
        self.load_file(path)

    def action_save(self) -> None:
        try:
            tasks = self.table.get_tasks(self.options.default_color)
        except GanttError as exc:
            QMessageBox.critical(self, "Save failed", str(exc))
            return
        if not self.current_path:
            path, _ = QFileDialog.getSaveFileName(
                self,
                "Save tasks",
                filter="CSV Files (*.csv)",
                initialFilter="CSV Files (*.csv)",
            )
            if not path:
                return
            self.current_path = Path(path)
        save_tasks(self.current_path, tasks)
        self.statusBar().showMessage(f"Saved to {self.current_path}", 3000)

    def action_export(self) -> None:
        if not self.grids:
            QMessageBox.warning(self, "Export", "There is no valid calendar to export.")
            return
        path, selected_filter = QFileDialog.getSaveFileName(
            self,
            "Export calendar",
            filter="CSV Files (*.csv);;HTML Files (*.html);;PDF Files (*.pdf)",
        )
        if not path:
            return
        lowered = path.lower()
        if lowered.endswith(".pdf") or "PDF" in selected_filter:
            include_dates = (
                QMessageBox.question(
                    self,
                    "PDF Columns",
                    "Include Start/End columns in the PDF export?",
                    QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                    QMessageBox.StandardButton.Yes,
                )
                == QMessageBox.StandardButton.Yes
            )
            export_as_pdf(path, self.grids, include_dates=include_dates)
            self.statusBar().showMessage(f"Exported PDF to {path}", 3000)
        elif lowered.endswith((".html", ".htm")) or "HTML" in selected_filter:
            export_as_html(path, self.grids)
            self.statusBar().showMessage(f"Exported HTML to {path}", 3000)
        else:
            export_as_csv(path, self.grids)
            self.statusBar().showMessage(f"Exported CSV to {path}", 3000)

    def _handle_undo_available(self, available: bool) -> None:
        if self.undo_action is not None:
            self.undo_action.setEnabled(available)

    def _handle_undo_request(self) -> None:
        if self.table.undo_last_change():
            self.statusBar().showMessage("Restored last deleted row", 3000)

    def closeEvent(self, event: QCloseEvent) -> None:  # pragma: no cover - requires UI
        """Ask for confirmation before closing the application."""
        if QMessageBox.question(self, "Quit", "Close Gantt Tables?") == QMessageBox.StandardButton.Yes:
            event.accept()
        else:
            event.ignore()


def run(path: Optional[str] = None, options: Optional[PartitionOptions] = None) -> int:
    """Show the main window, optionally loading a task CSV first."""
    app = QApplication.instance() or QApplication(sys.argv)
    install_default_styles(app)
    window = MainWindow(options)
    if path:
        window.load_file(path)
    window.show()
    return app.exec()


if __name__ == "__main__":
    run()
