import logging
import threading
from typing import Callable, Optional

import flet as ft

logger = logging.getLogger(__name__)

_STYLES = {
    "info": {"bg": ft.Colors.BLUE_50, "border": ft.Colors.BLUE_200, "icon": ft.Colors.BLUE_500, "text": ft.Colors.BLUE_900, "icon_name": ft.Icons.INFO_OUTLINE},
    "success": {"bg": ft.Colors.GREEN_50, "border": ft.Colors.GREEN_200, "icon": ft.Colors.GREEN_500, "text": ft.Colors.GREEN_900, "icon_name": ft.Icons.CHECK_CIRCLE_OUTLINE},
    "warning": {"bg": ft.Colors.AMBER_50, "border": ft.Colors.AMBER_200, "icon": ft.Colors.AMBER_500, "text": ft.Colors.AMBER_900, "icon_name": ft.Icons.WARNING_AMBER_ROUNDED},
    "error": {"bg": ft.Colors.RED_50, "border": ft.Colors.RED_200, "icon": ft.Colors.RED_500, "text": ft.Colors.RED_900, "icon_name": ft.Icons.ERROR_OUTLINE},
}


class ToastNotification(ft.Container):
    def __init__(
        self,
        message: str,
        kind: str = "info",
        duration: int = 4000,
        on_dismiss: Optional[Callable[["ToastNotification"], None]] = None,
    ):
        super().__init__()
        self.duration = duration
        self.on_dismiss_toast = on_dismiss
        self._timer: Optional[threading.Timer] = None
        style = _STYLES.get(kind, _STYLES["info"])

        self.content = ft.Row(
            controls=[
                ft.Icon(name=style["icon_name"], color=style["icon"], size=22),
                ft.Text(message, color=style["text"], size=14, weight=ft.FontWeight.W_500, expand=True),
                ft.IconButton(
                    icon=ft.Icons.CLOSE,
                    icon_size=18,
                    icon_color=style["text"],
                    tooltip="Close",
                    on_click=lambda e: self.dismiss(),
                ),
            ],
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=12,
        )
        self.bgcolor = style["bg"]
        self.border = ft.border.all(1, style["border"])
        self.border_radius = 8
        self.padding = ft.padding.symmetric(horizontal=12, vertical=8)
        self.width = 350

    def did_mount(self):
        if self.duration > 0:
            self._timer = threading.Timer(self.duration / 1000, self.dismiss)
            self._timer.daemon = True
            self._timer.start()

    def dismiss(self):
        if self._timer:
            self._timer.cancel()
            self._timer = None
        if self.on_dismiss_toast:
            self.on_dismiss_toast(self)


class ToastManager:
    """Stack of transient notifications in the page overlay."""

    def __init__(self, page: ft.Page):
        self.page = page
        self.container = ft.Column(
            controls=[],
            bottom=20,
            right=20,
            spacing=10,
            horizontal_alignment=ft.CrossAxisAlignment.END,
        )
        self.page.overlay.append(self.container)

    def show(self, message: str, kind: str = "info", duration: int = 4000) -> None:
        toast = ToastNotification(message, kind, duration, self._remove)
        self.container.controls.append(toast)
        self._update()

    def _remove(self, toast: ToastNotification) -> None:
        if toast in self.container.controls:
            self.container.controls.remove(toast)
            self._update()

    def _update(self) -> None:
        try:
            self.page.update()
        except Exception as exc:
            logger.debug("Toast update skipped: %s", exc)
