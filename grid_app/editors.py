"""
Inline cell editors.

An editor is created for one cell with two continuations: ``on_commit(value)``
passes the accepted value back to the table and ``on_cancel()`` aborts the
edit, leaving the cell untouched. Commit is triggered by a value change (the
input losing focus) or an Enter key, cancel by Escape. Once an editor
resolves it detaches the handlers from its control and ignores any further
signal.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import flet as ft

from grid_app.components.styles import style_cell_editor, style_input
from grid_app.enums import GENDER_LABELS, UpdateKey
from grid_app.services.date_format import format_iso_date, parse_iso_date

logger = logging.getLogger(__name__)

KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"

CommitCallback = Callable[[Any], None]
CancelCallback = Callable[[], None]

_KEYBOARD_TYPES = {
    "email": ft.KeyboardType.EMAIL,
    "date": ft.KeyboardType.DATETIME,
    "text": ft.KeyboardType.TEXT,
}


def get_input_type(key: str) -> str:
    if key == UpdateKey.EMAIL.value:
        return "email"
    if key == UpdateKey.DOB.value:
        return "date"
    return "text"


class FieldEditor:
    input_type = "text"
    # Header filter editors stay live after a commit.
    resolves_once = True

    def __init__(
        self,
        value: Any,
        on_commit: CommitCallback,
        on_cancel: Optional[CancelCallback] = None,
    ) -> None:
        self.original_value = value
        self.initial_input = self._to_input(value)
        self.input_value = self.initial_input
        self._on_commit = on_commit
        self._on_cancel = on_cancel
        self.resolved = False
        self.control: Optional[ft.Control] = None

    def _to_input(self, value: Any) -> str:
        return "" if value is None else str(value)

    def _resolve_value(self) -> Any:
        if self.input_value == self.initial_input:
            return self.original_value
        return self.input_value

    def set_input(self, text: Any) -> None:
        if self.resolved:
            return
        self.input_value = "" if text is None else str(text)

    def handle_change(self, text: Any = None) -> None:
        if text is not None:
            self.set_input(text)
        self.commit()

    def handle_key(self, key: str) -> None:
        if key == KEY_ENTER:
            self.commit()
        elif key == KEY_ESCAPE:
            self.cancel()

    def commit(self) -> None:
        if self.resolved:
            return
        try:
            value = self._resolve_value()
        except ValueError as exc:
            logger.debug("Edit aborted: %s", exc)
            self.cancel()
            return
        if self.resolves_once:
            self.teardown()
        else:
            self.initial_input = self.input_value
            self.original_value = value
        self._on_commit(value)

    def cancel(self) -> None:
        if self.resolved:
            return
        if self.resolves_once:
            self.teardown()
        else:
            self.input_value = self.initial_input
            if self.control is not None:
                self.control.value = self.input_value
        if self._on_cancel:
            self._on_cancel()

    def teardown(self) -> None:
        self.resolved = True
        if self.control is None:
            return
        for handler in ("on_change", "on_blur", "on_submit"):
            if hasattr(self.control, handler):
                setattr(self.control, handler, None)

    def build(self) -> ft.Control:
        self.control = ft.TextField(
            value=self.input_value,
            autofocus=True,
            keyboard_type=_KEYBOARD_TYPES.get(self.input_type, ft.KeyboardType.TEXT),
            on_change=lambda e: self.set_input(e.control.value),
            on_blur=lambda e: self.commit(),
            on_submit=lambda e: self.handle_key(KEY_ENTER),
        )
        style_cell_editor(self.control)
        return self.control


class PlainEditor(FieldEditor):
    def __init__(self, value: Any, on_commit: CommitCallback, on_cancel: Optional[CancelCallback] = None, *, input_type: str = "text") -> None:
        self.input_type = input_type
        super().__init__(value, on_commit, on_cancel)


class DateEditor(FieldEditor):
    """Edits a calendar date as ``YYYY-MM-DD``; malformed input aborts the edit."""

    input_type = "date"

    def _to_input(self, value: Any) -> str:
        return format_iso_date(value)

    def _resolve_value(self) -> Any:
        if self.input_value == self.initial_input:
            return self.original_value
        return parse_iso_date(self.input_value).isoformat()

    def build(self) -> ft.Control:
        control = super().build()
        control.hint_text = "YYYY-MM-DD"
        return control


class HeaderDateEditor(FieldEditor):
    """Date input for the filter row. Forwards the raw input, no formatting."""

    input_type = "date"
    resolves_once = False

    def _resolve_value(self) -> Any:
        return self.input_value

    def build(self) -> ft.Control:
        self.control = ft.TextField(
            value=self.input_value,
            label="Date Of Birth",
            hint_text="YYYY-MM-DD",
            keyboard_type=ft.KeyboardType.DATETIME,
            on_change=lambda e: self.set_input(e.control.value),
            on_blur=lambda e: self.commit(),
            on_submit=lambda e: self.handle_key(KEY_ENTER),
            width=160,
        )
        style_input(self.control)
        return self.control


class ListEditor(FieldEditor):
    """Choice editor; an empty choice clears the value."""

    def __init__(
        self,
        value: Any,
        on_commit: CommitCallback,
        on_cancel: Optional[CancelCallback] = None,
        *,
        options: Optional[Dict[str, str]] = None,
    ) -> None:
        self.options = dict(options or {})
        super().__init__(value, on_commit, on_cancel)

    def _to_input(self, value: Any) -> str:
        raw = getattr(value, "value", value)
        return "" if raw is None else str(raw)

    def _resolve_value(self) -> Any:
        if self.input_value == self.initial_input:
            return self.original_value
        if not self.input_value:
            return None
        if self.input_value not in self.options:
            raise ValueError(f"Unknown option: {self.input_value!r}")
        return self.input_value

    def build(self) -> ft.Control:
        self.control = ft.Dropdown(
            value=self.input_value or None,
            options=[ft.dropdown.Option("", "—")]
            + [ft.dropdown.Option(key, label) for key, label in self.options.items()],
            autofocus=True,
            on_change=lambda e: self.handle_change(e.control.value),
        )
        style_cell_editor(self.control, width=140)
        return self.control


def editor_for(
    key: str,
    value: Any,
    on_commit: CommitCallback,
    on_cancel: Optional[CancelCallback] = None,
) -> FieldEditor:
    if key == UpdateKey.DOB.value:
        return DateEditor(value, on_commit, on_cancel)
    if key == UpdateKey.GENDER.value:
        return ListEditor(value, on_commit, on_cancel, options=GENDER_LABELS)
    return PlainEditor(value, on_commit, on_cancel, input_type=get_input_type(key))
