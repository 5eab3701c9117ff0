from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import flet as ft

from grid_app.components.styles import (
    COLOR_BORDER,
    COLOR_MODIFIED,
    COLOR_SELECTED,
    COLOR_TEXT_MUTED,
    style_input,
)
from grid_app.editors import FieldEditor, HeaderDateEditor, editor_for
from grid_app.enums import SortDirection
from grid_app.models import (
    PAGE_SIZE,
    FilterSpec,
    PageRequest,
    PageResult,
    Record,
    SortSpec,
    coerce_field_value,
)

logger = logging.getLogger(__name__)

DataProvider = Callable[[PageRequest], PageResult]
EditGate = Callable[[Any], bool]
CellEditedCallback = Callable[[Any, str, Any], None]
SelectionChangedCallback = Callable[[List[Record]], None]
NotifyCallback = Callable[[str, str], None]

_ALL_VALUE = ""


@dataclass
class ColumnConfig:
    key: str
    label: str
    editable: bool = False
    sortable: bool = True
    width: Optional[int] = None
    formatter: Optional[Callable[[Any, Record], str]] = None
    header_filter: Optional[str] = None  # "input" | "list" | "date"
    header_filter_values: Optional[Dict[str, str]] = None
    values_lookup: bool = False


def values_lookup(records: Iterable[Record], key: str) -> List[str]:
    """Distinct non-empty values of one field, sorted, for list filters."""
    seen = set()
    for record in records:
        value = record.get_value(key)
        value = getattr(value, "value", value)
        if value not in (None, ""):
            seen.add(str(value))
    return sorted(seen, key=str.lower)


class UserTable:
    """Remote-paginated user grid.

    Owns the loaded page, the selection set and the sort/filter/pagination
    state. Every page fetch replaces the records and clears the selection.
    Edits are not applied here: a committed editor value is reported through
    ``on_cell_edited`` and the owner writes the resulting records back with
    ``update_data``.
    """

    def __init__(
        self,
        columns: Sequence[ColumnConfig],
        data_provider: DataProvider,
        id_field: str = "id",
        page_size: int = PAGE_SIZE,
        filter_delay_ms: int = 1000,
        notify: Optional[NotifyCallback] = None,
    ) -> None:
        self.columns = list(columns)
        self.data_provider = data_provider
        self.id_field = id_field
        self.page = 1
        self.page_size = page_size
        self.total_pages = 1
        self.total_rows: Optional[int] = None
        self.filter_delay = max(filter_delay_ms, 0) / 1000
        self.notify = notify
        self.sorts: List[Tuple[str, SortDirection]] = []
        self.header_filter_values: Dict[str, Any] = {}
        self.records: List[Record] = []
        self.selected_ids: set = set()
        # Guards records and selection; handlers run on worker threads and the event loop.
        self.lock = threading.RLock()
        self.can_edit: Optional[EditGate] = None
        self.on_cell_edited: Optional[CellEditedCallback] = None
        self.on_selection_changed: Optional[SelectionChangedCallback] = None
        self._active_edit: Optional[Tuple[Any, str, FieldEditor]] = None
        self._last_error: Optional[str] = None
        self._filter_timer: Optional[threading.Timer] = None
        self.root: Optional[ft.Control] = None

        self.status = ft.Text("", size=11, color=COLOR_TEXT_MUTED)
        self.range_label = ft.Text("", size=11, color=COLOR_TEXT_MUTED)
        self.sort_label = ft.Text("Sort: —", size=11, color=COLOR_TEXT_MUTED)
        self.pagination_label = ft.Text("Page 1 of 1", size=12)
        self.first_button = ft.IconButton(icon=ft.Icons.FIRST_PAGE, tooltip="First page", on_click=lambda e: self.load_page(1))
        self.prev_button = ft.IconButton(icon=ft.Icons.ARROW_BACK, tooltip="Previous page", on_click=lambda e: self.load_page(self.page - 1))
        self.next_button = ft.IconButton(icon=ft.Icons.ARROW_FORWARD, tooltip="Next page", on_click=lambda e: self.load_page(self.page + 1))
        self.last_button = ft.IconButton(icon=ft.Icons.LAST_PAGE, tooltip="Last page", on_click=lambda e: self.load_page(self.total_pages))

        self.select_all_checkbox = ft.Checkbox(
            value=False,
            tooltip="Select all (current page)",
            on_change=lambda e: self.toggle_select_all(bool(e.control.value)),
        )
        self._filter_controls: Dict[str, ft.Control] = {}
        self._header_editors: Dict[str, HeaderDateEditor] = {}
        for col in self.columns:
            control = self._build_filter_control(col)
            if control is not None:
                self._filter_controls[col.key] = control

        table_columns = [ft.DataColumn(self.select_all_checkbox)]
        for col in self.columns:
            on_sort = (lambda e, key=col.key: self.toggle_sort(key)) if col.sortable else None
            table_columns.append(ft.DataColumn(ft.Text(col.label), on_sort=on_sort))
        self.table = ft.DataTable(
            columns=table_columns,
            rows=[],
            column_spacing=20,
            heading_row_color="#F1F5F9",
            bgcolor="#FFFFFF",
            divider_thickness=1,
        )
        self._empty_message = ft.Text("No Data Set", size=12, color=COLOR_TEXT_MUTED, visible=False)

    # -----------------------------
    # Capability queries
    # -----------------------------
    def is_record_selected(self, record_id: Any) -> bool:
        return record_id in self.selected_ids

    def get_data(self) -> List[Record]:
        return list(self.records)

    def get_selected_data(self) -> List[Record]:
        return [record for record in self.records if record.id in self.selected_ids]

    def index_of(self, record_id: Any) -> Optional[int]:
        for idx, record in enumerate(self.records):
            if record.id == record_id:
                return idx
        return None

    def get_header_filters(self) -> List[FilterSpec]:
        return [
            FilterSpec(key, value)
            for key, value in self.header_filter_values.items()
            if value not in (None, "")
        ]

    # -----------------------------
    # Data
    # -----------------------------
    def update_data(self, records: Iterable[Record]) -> None:
        by_id = {record.id: record for record in records}
        with self.lock:
            self.records = [by_id.get(record.id, record) for record in self.records]
            self._render_rows()

    def load_page(self, page: int) -> None:
        if page < 1 or page > self.total_pages:
            return
        self.page = page
        self._reload()

    def refresh(self) -> None:
        self.page = 1
        self._reload()

    def refresh_filter(self) -> None:
        self._cancel_filter_timer()
        self.page = 1
        self._reload()

    def reset(self) -> None:
        self._cancel_filter_timer()
        self.sorts.clear()
        self.header_filter_values.clear()
        for control in self._filter_controls.values():
            control.value = _ALL_VALUE
        for editor in self._header_editors.values():
            editor.initial_input = editor.input_value = ""
        self._update_sort_label()
        self.page = 1
        self._reload()

    def _page_request(self) -> PageRequest:
        return PageRequest(
            page=self.page,
            per_page=self.page_size,
            sorts=[SortSpec(key, direction) for key, direction in self.sorts],
            filters=self.get_header_filters(),
        )

    def _reload(self) -> None:
        self._close_active_editor()
        self._last_error = None
        try:
            result = self.data_provider(self._page_request())
        except Exception as exc:
            logger.error("Error loading users page %s: %s", self.page, exc)
            self._last_error = str(exc)
            result = PageResult(records=[], last_page=1)
            self._notify(f"Error loading data: {exc}", "error")
        with self.lock:
            self.records = list(result.records)
            self.total_pages = max(1, result.last_page)
            self.total_rows = result.total
            had_selection = bool(self.selected_ids)
            self.selected_ids.clear()
            self._refresh_lookup_filters()
            self._render_rows()
            if had_selection:
                self._emit_selection_changed()

    # -----------------------------
    # Selection
    # -----------------------------
    def toggle_select(self, record_id: Any, value: bool) -> None:
        with self.lock:
            if self.index_of(record_id) is None:
                return
            if value:
                self.selected_ids.add(record_id)
            else:
                self.selected_ids.discard(record_id)
            self._render_rows()
            self._emit_selection_changed()

    def toggle_select_all(self, checked: bool) -> None:
        with self.lock:
            if checked:
                self.selected_ids.update(record.id for record in self.records)
            else:
                self.selected_ids.clear()
            self._render_rows()
            self._emit_selection_changed()

    def deselect_rows(self, record_ids: Iterable[Any]) -> None:
        ids = set(record_ids)
        with self.lock:
            if not ids & self.selected_ids:
                return
            self.selected_ids -= ids
            self._render_rows()
            self._emit_selection_changed()

    def _emit_selection_changed(self) -> None:
        if self.on_selection_changed:
            self.on_selection_changed(self.get_selected_data())

    # -----------------------------
    # Editing
    # -----------------------------
    def start_edit(self, record_id: Any, key: str) -> bool:
        """Open an inline editor; refused unless ``can_edit`` allows it right now."""
        col = next((c for c in self.columns if c.key == key), None)
        index = self.index_of(record_id)
        if col is None or not col.editable or index is None:
            return False
        if self.can_edit is None or not self.can_edit(record_id):
            return False
        self._close_active_editor()
        value = self.records[index].get_value(key)
        editor = editor_for(
            key,
            value,
            on_commit=lambda new_value: self._on_editor_commit(record_id, key, new_value),
            on_cancel=self._on_editor_cancel,
        )
        self._active_edit = (record_id, key, editor)
        self._render_rows()
        return True

    @property
    def active_editor(self) -> Optional[FieldEditor]:
        return self._active_edit[2] if self._active_edit else None

    def handle_key(self, key: str) -> None:
        editor = self.active_editor
        if editor is not None:
            editor.handle_key(key)

    def _on_editor_commit(self, record_id: Any, key: str, value: Any) -> None:
        self._active_edit = None
        index = self.index_of(record_id)
        changed = index is not None and coerce_field_value(key, value) != self.records[index].get_value(key)
        self._render_rows()
        if changed and self.on_cell_edited:
            self.on_cell_edited(record_id, key, value)

    def _on_editor_cancel(self) -> None:
        self._active_edit = None
        self._render_rows()

    def _close_active_editor(self) -> None:
        if self._active_edit is not None:
            _, _, editor = self._active_edit
            self._active_edit = None
            editor.teardown()

    # -----------------------------
    # Sorting & filtering
    # -----------------------------
    def toggle_sort(self, key: str) -> None:
        existing = next((i for i, (k, _) in enumerate(self.sorts) if k == key), None)
        if existing is None:
            self.sorts.append((key, SortDirection.ASC))
        else:
            _, direction = self.sorts.pop(existing)
            if direction == SortDirection.ASC:
                self.sorts.append((key, SortDirection.DESC))
        self._update_sort_label()
        self.page = 1
        self._reload()

    def set_header_filter(self, key: str, value: Any, *, immediate: bool = False) -> None:
        if isinstance(value, str):
            value = value.strip()
        if value == "":
            value = None
        if value == self.header_filter_values.get(key):
            return
        if value is None:
            self.header_filter_values.pop(key, None)
        else:
            self.header_filter_values[key] = value
        if immediate or self.filter_delay <= 0:
            self.refresh_filter()
        else:
            self._trigger_filter_refresh()

    def _trigger_filter_refresh(self) -> None:
        self._cancel_filter_timer()
        self._filter_timer = threading.Timer(self.filter_delay, self.refresh_filter)
        self._filter_timer.daemon = True
        self._filter_timer.start()

    def _cancel_filter_timer(self) -> None:
        if self._filter_timer:
            self._filter_timer.cancel()
            self._filter_timer = None

    def _build_filter_control(self, col: ColumnConfig) -> Optional[ft.Control]:
        if col.header_filter == "input":
            control = ft.TextField(
                label=col.label,
                width=170,
                on_change=lambda e, key=col.key: self.set_header_filter(key, e.control.value),
            )
            style_input(control)
            return control
        if col.header_filter == "list":
            control = ft.Dropdown(
                label=col.label,
                width=170,
                value=_ALL_VALUE,
                options=_list_options(col.header_filter_values or {}),
                on_change=lambda e, key=col.key: self.set_header_filter(key, e.control.value, immediate=True),
            )
            style_input(control)
            return control
        if col.header_filter == "date":
            editor = HeaderDateEditor(
                None,
                on_commit=lambda value, key=col.key: self.set_header_filter(key, value, immediate=True),
            )
            self._header_editors[col.key] = editor
            return editor.build()
        return None

    def _refresh_lookup_filters(self) -> None:
        for col in self.columns:
            control = self._filter_controls.get(col.key)
            if not col.values_lookup or not isinstance(control, ft.Dropdown):
                continue
            values = {value: value for value in values_lookup(self.records, col.key)}
            current = self.header_filter_values.get(col.key)
            if current not in (None, ""):
                values.setdefault(str(current), str(current))
            control.options = _list_options(values)

    def _update_sort_label(self) -> None:
        if not self.sorts:
            self.sort_label.value = "Sort: —"
            self.table.sort_column_index = None
            return
        labels = {col.key: col.label for col in self.columns}
        parts = []
        for idx, (key, direction) in enumerate(self.sorts, 1):
            arrow = "↑" if direction == SortDirection.ASC else "↓"
            parts.append(f"({idx}) {labels.get(key, key)} {arrow}")
        self.sort_label.value = "Sort: " + ", ".join(parts)
        last_key, last_dir = self.sorts[-1]
        column_index = next((i for i, col in enumerate(self.columns, start=1) if col.key == last_key), None)
        self.table.sort_column_index = column_index
        self.table.sort_ascending = last_dir == SortDirection.ASC

    # -----------------------------
    # Rendering
    # -----------------------------
    def build(self) -> ft.Control:
        filters_row = ft.Row(list(self._filter_controls.values()), wrap=True, spacing=10, run_spacing=10)
        self.root = ft.Column(
            [
                filters_row,
                ft.Row([self.range_label, self.sort_label], spacing=12),
                self.status,
                ft.Container(
                    ft.Column(
                        [ft.Row([self.table], scroll=ft.ScrollMode.ADAPTIVE), self._empty_message],
                        scroll=ft.ScrollMode.AUTO,
                        expand=True,
                    ),
                    expand=1,
                    bgcolor="#FFFFFF",
                    border=ft.border.all(1, COLOR_BORDER),
                    border_radius=12,
                ),
                ft.Row(
                    [self.first_button, self.prev_button, self.pagination_label, self.next_button, self.last_button],
                    alignment=ft.MainAxisAlignment.CENTER,
                ),
            ],
            expand=1,
            spacing=8,
        )
        return self.root

    def update(self) -> None:
        if not self.root:
            return
        try:
            if self.root.page:
                self.root.page.update()
            else:
                self.root.update()
        except Exception as exc:
            logger.debug("Table update skipped: %s", exc)

    def _render_rows(self) -> None:
        self.table.rows = [self._build_row(record) for record in self.records]
        self.select_all_checkbox.value = bool(self.records) and all(
            record.id in self.selected_ids for record in self.records
        )
        self.pagination_label.value = f"Page {self.page} of {self.total_pages}"
        self.first_button.disabled = self.page <= 1
        self.prev_button.disabled = self.page <= 1
        self.next_button.disabled = self.page >= self.total_pages
        self.last_button.disabled = self.page >= self.total_pages
        if self._last_error:
            self.status.value = f"Could not load users: {self._last_error}"
            self.status.color = "#B91C1C"
        else:
            self.status.value = f"{len(self.selected_ids)} selected"
            self.status.color = COLOR_TEXT_MUTED
        total = self.total_rows if self.total_rows is not None else len(self.records)
        self.range_label.value = f"{len(self.records)} shown of {total}"
        self._empty_message.visible = not self.records
        self.update()

    def _build_row(self, record: Record) -> ft.DataRow:
        selected = record.id in self.selected_ids
        cells = [
            ft.DataCell(
                ft.Checkbox(
                    value=selected,
                    on_change=lambda e, rid=record.id: self.toggle_select(rid, bool(e.control.value)),
                )
            )
        ]
        for col in self.columns:
            cells.append(self._build_cell(record, col))
        color = COLOR_MODIFIED if record.is_modified else (COLOR_SELECTED if selected else None)
        return ft.DataRow(cells=cells, selected=selected, color=color)

    def _build_cell(self, record: Record, col: ColumnConfig) -> ft.DataCell:
        active = self._active_edit
        if active is not None and active[0] == record.id and active[1] == col.key:
            editor = active[2]
            return ft.DataCell(editor.control or editor.build())
        value = record.get_value(col.key)
        if col.formatter:
            text = col.formatter(value, record)
        else:
            raw = getattr(value, "value", value)
            text = "" if raw is None else str(raw)
        on_tap = None
        if col.editable:
            on_tap = lambda e, rid=record.id, key=col.key: self.start_edit(rid, key)
        content = ft.Text(text, size=12, overflow=ft.TextOverflow.ELLIPSIS, width=col.width, tooltip=text or None)
        return ft.DataCell(content, on_tap=on_tap)

    def _notify(self, message: str, kind: str) -> None:
        if self.notify:
            self.notify(message, kind)


def _list_options(values: Dict[str, str]) -> List[ft.dropdown.Option]:
    return [ft.dropdown.Option(_ALL_VALUE, "All")] + [
        ft.dropdown.Option(key, label) for key, label in values.items()
    ]
