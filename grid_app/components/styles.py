from __future__ import annotations

from typing import Any, Callable, Optional

import flet as ft


COLOR_ACCENT = "#6366F1"
COLOR_ACCENT_HOVER = "#4F46E5"
COLOR_BG = "#F8FAFC"
COLOR_BORDER = "#E2E8F0"
COLOR_TEXT = "#1E293B"
COLOR_TEXT_MUTED = "#64748B"
COLOR_ERROR = "#DC2626"
COLOR_MODIFIED = "#FEF9C3"
COLOR_SELECTED = "#EEF2FF"


def maybe_set(obj: Any, name: str, value: Any) -> None:
    if hasattr(obj, name):
        try:
            setattr(obj, name, value)
        except Exception:
            return


def style_input(control: Any) -> None:
    name = type(control).__name__.lower()
    maybe_set(control, "border_color", "#475569")
    maybe_set(control, "focused_border_color", COLOR_ACCENT_HOVER)
    maybe_set(control, "border_radius", 12)
    maybe_set(control, "text_size", 13)
    maybe_set(control, "filled", True)
    maybe_set(control, "bgcolor", COLOR_BG)
    maybe_set(control, "dense", True)
    if "dropdown" in name:
        maybe_set(control, "border_width", 2)
    else:
        maybe_set(control, "border_width", 1)
        maybe_set(control, "cursor_color", COLOR_ACCENT_HOVER)


def style_cell_editor(control: Any, *, width: Optional[int] = None) -> None:
    maybe_set(control, "filled", True)
    maybe_set(control, "bgcolor", "#FFFFFF")
    maybe_set(control, "border_color", COLOR_BORDER)
    maybe_set(control, "focused_border_color", COLOR_ACCENT)
    maybe_set(control, "border_radius", 6)
    maybe_set(control, "text_size", 12)
    maybe_set(control, "dense", True)
    maybe_set(control, "height", 38)
    if width is not None:
        maybe_set(control, "width", width)


def cancel_button(
    label: str,
    on_click: Optional[Callable],
    icon: Optional[Any] = ft.Icons.CLOSE_ROUNDED,
    *,
    radius: int = 8,
) -> ft.ElevatedButton:
    style = ft.ButtonStyle(
        shape=ft.RoundedRectangleBorder(radius=radius),
        color=COLOR_TEXT,
        bgcolor="#F1F5F9",
        elevation=0,
    )
    return ft.ElevatedButton(label, icon=icon, on_click=on_click, style=style)


def primary_button(label: str, on_click: Optional[Callable], icon: Optional[Any] = None) -> ft.ElevatedButton:
    return ft.ElevatedButton(
        label,
        icon=icon,
        on_click=on_click,
        bgcolor=COLOR_ACCENT_HOVER,
        color="#FFFFFF",
        style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=8)),
    )
