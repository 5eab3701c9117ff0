from __future__ import annotations

import logging
from typing import Any, List, Optional

import flet as ft
import httpx

from grid_app.components.dialogs import ConfirmationDialog, MessageDialog, SubmitButton
from grid_app.components.styles import COLOR_BG, COLOR_TEXT, cancel_button
from grid_app.components.toast import ToastManager
from grid_app.components.user_table import ColumnConfig, UserTable
from grid_app.config import AppConfig, load_config
from grid_app.enums import GENDER_LABELS, NotificationKind, UpdateKey
from grid_app.grid_controller import GridController
from grid_app.services.date_format import format_display_date
from grid_app.services.update_submitter import UpdateSubmitter
from grid_app.services.users_api import UsersApiClient

logger = logging.getLogger(__name__)


def build_columns() -> List[ColumnConfig]:
    return [
        ColumnConfig(key="id", label="ID", width=60),
        ColumnConfig(key=UpdateKey.NAME.value, label="Name", editable=True, width=150, header_filter="input"),
        ColumnConfig(key=UpdateKey.EMAIL.value, label="Email", editable=True, width=180, header_filter="input"),
        ColumnConfig(key=UpdateKey.PHONE_NUMBER.value, label="Phone Number", editable=True, width=130, header_filter="input"),
        ColumnConfig(key=UpdateKey.LOCATION.value, label="Location", editable=True, width=130),
        ColumnConfig(
            key=UpdateKey.GENDER.value,
            label="Gender",
            editable=True,
            width=80,
            formatter=lambda v, _: GENDER_LABELS.get(getattr(v, "value", v) or "", ""),
            header_filter="list",
            header_filter_values=GENDER_LABELS,
        ),
        ColumnConfig(
            key=UpdateKey.FAVOURITE.value,
            label="Favourite Color",
            editable=True,
            width=110,
            header_filter="list",
            values_lookup=True,
        ),
        ColumnConfig(
            key=UpdateKey.DOB.value,
            label="Date Of Birth",
            editable=True,
            width=100,
            formatter=lambda v, _: format_display_date(v),
            header_filter="date",
        ),
    ]


def main(page: ft.Page, config: Optional[AppConfig] = None) -> None:
    config = config or load_config()
    page.title = "Users"
    page.theme_mode = ft.ThemeMode.LIGHT
    page.bgcolor = COLOR_BG
    page.padding = 20

    http_client = httpx.Client(timeout=config.http_timeout)
    api = UsersApiClient(config.users_api_url, config.users_update_url, http_client)
    toasts = ToastManager(page)
    alert = MessageDialog(page)

    def notify(message: str, kind: str = NotificationKind.INFO.value) -> None:
        if kind == NotificationKind.ERROR.value:
            alert.show("Update failed", message)
        else:
            toasts.show(message, kind)

    table = UserTable(
        columns=build_columns(),
        data_provider=api.fetch_page,
        page_size=config.page_size,
        filter_delay_ms=config.filter_delay_ms,
        notify=lambda message, kind: toasts.show(message, kind),
    )

    controller: GridController = None  # type: ignore[assignment]

    def on_confirm() -> None:
        page.run_task(controller.confirm)

    confirmation = ConfirmationDialog(page, on_confirm=on_confirm, on_dismiss=lambda: controller.dismiss())
    submit_button = SubmitButton(on_submit=lambda: controller.submit_clicked())
    controller = GridController(
        grid=table,
        submit_button=submit_button,
        confirmation=confirmation,
        submitter=UpdateSubmitter(api),
        notify=notify,
        lock=table.lock,
    )
    table.can_edit = controller.can_edit
    table.on_cell_edited = controller.handle_cell_edited
    table.on_selection_changed = controller.handle_selection_changed

    def on_keyboard(e: ft.KeyboardEvent) -> None:
        if e.key in ("Enter", "Escape"):
            table.handle_key(e.key)

    def on_disconnect(_: Any) -> None:
        logger.info("Session closed, releasing HTTP client")
        http_client.close()

    page.on_keyboard_event = on_keyboard
    page.on_disconnect = on_disconnect

    header = ft.Row(
        [
            ft.Text("Users", size=24, weight=ft.FontWeight.BOLD, color=COLOR_TEXT),
            ft.Row(
                [
                    cancel_button("Reset", on_click=lambda e: controller.reset(), icon=ft.Icons.REPLAY),
                    submit_button,
                ],
                spacing=10,
            ),
        ],
        alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
    )
    page.add(ft.Column([header, table.build()], expand=True, spacing=12))
    table.refresh()
    logger.info("Users grid ready (%s)", config.users_api_url)
