from __future__ import annotations

from typing import Any, Callable, Optional

import flet as ft

from grid_app.components.styles import COLOR_TEXT_MUTED, cancel_button, primary_button


def _open(page: Optional[ft.Page], dialog: ft.AlertDialog) -> None:
    if page is None:
        return
    if hasattr(page, "open"):
        page.open(dialog)
    else:
        page.dialog = dialog
        dialog.open = True
        page.update()


def _close(page: Optional[ft.Page], dialog: ft.AlertDialog) -> None:
    if page is None:
        return
    if hasattr(page, "close"):
        page.close(dialog)
    else:
        dialog.open = False
        page.update()


class ConfirmationDialog:
    """Modal prompt shown before a batch update is sent."""

    def __init__(
        self,
        page: Optional[ft.Page],
        on_confirm: Callable[[], Any],
        on_dismiss: Callable[[], Any],
    ) -> None:
        self.page = page
        self._message = ft.Text("", size=14, color=COLOR_TEXT_MUTED)
        self.dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text("Confirm update", size=20, weight=ft.FontWeight.BOLD),
            content=self._message,
            actions=[
                cancel_button("Cancel", on_click=lambda e: on_dismiss()),
                primary_button("Save changes", on_click=lambda e: on_confirm(), icon=ft.Icons.SAVE_ROUNDED),
            ],
            actions_alignment=ft.MainAxisAlignment.END,
            shape=ft.RoundedRectangleBorder(radius=16),
        )

    def show(self, count: int) -> None:
        self._message.value = (
            f"Are you sure you want to update {count} record(s)?\n"
            "The changes will be saved to the server."
        )
        _open(self.page, self.dialog)

    def hide(self) -> None:
        _close(self.page, self.dialog)


class MessageDialog:
    """Blocking notification; stays open until the operator acknowledges it."""

    def __init__(self, page: Optional[ft.Page]) -> None:
        self.page = page
        self._title = ft.Text("", size=18, weight=ft.FontWeight.BOLD)
        self._message = ft.Text("", size=14)
        self.dialog = ft.AlertDialog(
            modal=True,
            title=self._title,
            content=self._message,
            actions=[ft.TextButton("OK", on_click=lambda e: self.hide())],
            actions_alignment=ft.MainAxisAlignment.END,
        )

    def show(self, title: str, message: str) -> None:
        self._title.value = title
        self._message.value = message
        _open(self.page, self.dialog)

    def hide(self) -> None:
        _close(self.page, self.dialog)


class SubmitButton(ft.ElevatedButton):
    def __init__(self, on_submit: Callable[[], Any]) -> None:
        super().__init__(
            "Update selected",
            icon=ft.Icons.CLOUD_UPLOAD_ROUNDED,
            on_click=lambda e: on_submit(),
            disabled=True,
            bgcolor="#4F46E5",
            color="#FFFFFF",
            style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=8)),
        )

    def set_enabled(self, enabled: bool) -> None:
        self.disabled = not enabled
        if self.page is not None:
            self.update()
