"""
Grid controller

Owns the grid widget, the submit affordance and the confirmation prompt and
drives the batch update flow:

    IDLE --submit_clicked--> AWAITING_CONFIRMATION --confirm--> SUBMITTING --> IDLE
                                        \\--dismiss--> IDLE

The batch is captured when the operator confirms. Edits made while the
request is in flight are not part of it and keep their modified flag after
the response arrives.

Sync Flet handlers run on worker threads while ``confirm`` runs on the event
loop, so record, selection and state changes all hold one lock shared with
the grid. Network calls never run under it.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from grid_app.dirty_state import (
    apply_edit,
    build_update_batch,
    clear_modified,
    is_eligible_for_submit,
)
from grid_app.enums import REQUIRED_KEYS, GridState, NotificationKind
from grid_app.models import FilterSpec, Record
from grid_app.services.update_submitter import SubmitFailure, SubmitResult, SubmitSuccess

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Records updated successfully"


class GridWidget(Protocol):
    def is_record_selected(self, record_id: Any) -> bool: ...
    def get_data(self) -> List[Record]: ...
    def get_selected_data(self) -> List[Record]: ...
    def index_of(self, record_id: Any) -> Optional[int]: ...
    def update_data(self, records: Iterable[Record]) -> None: ...
    def deselect_rows(self, record_ids: Iterable[Any]) -> None: ...
    def get_header_filters(self) -> List[FilterSpec]: ...
    def refresh_filter(self) -> None: ...
    def reset(self) -> None: ...


class SubmitAffordance(Protocol):
    def set_enabled(self, enabled: bool) -> None: ...


class ConfirmationPrompt(Protocol):
    def show(self, count: int) -> None: ...
    def hide(self) -> None: ...


class Submitter(Protocol):
    def submit(self, batch: Sequence[Record]) -> SubmitResult: ...


Notifier = Callable[[str, str], None]


class GridController:
    def __init__(
        self,
        grid: GridWidget,
        submit_button: SubmitAffordance,
        confirmation: ConfirmationPrompt,
        submitter: Submitter,
        notify: Notifier,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self.grid = grid
        self.submit_button = submit_button
        self.confirmation = confirmation
        self.submitter = submitter
        self.notify = notify
        # Shared with the grid so edits, reloads and reconciliation never interleave.
        self._lock = lock or threading.RLock()
        self.state = GridState.IDLE
        # Edit counter per record id, used to spot edits made during a submission.
        self._revisions: Dict[Any, int] = {}
        self.submit_button.set_enabled(False)

    # -----------------------------
    # Grid events
    # -----------------------------
    def can_edit(self, record_id: Any) -> bool:
        return self.grid.is_record_selected(record_id)

    def handle_selection_changed(self, _selected: Optional[List[Record]] = None) -> None:
        self.refresh_submit_affordance()

    def handle_cell_edited(self, record_id: Any, field_key: str, value: Any) -> bool:
        with self._lock:
            return self._apply_cell_edit(record_id, field_key, value)

    def _apply_cell_edit(self, record_id: Any, field_key: str, value: Any) -> bool:
        if not self.can_edit(record_id):
            logger.debug("Ignoring edit on unselected record %s", record_id)
            return False
        index = self.grid.index_of(record_id)
        if index is None:
            return False
        if field_key in REQUIRED_KEYS and _is_blank(value):
            self.notify(f"'{field_key}' is required", NotificationKind.WARNING.value)
            return False

        records = apply_edit(self.grid.get_data(), index, field_key, value)
        self._revisions[record_id] = self._revisions.get(record_id, 0) + 1
        self.grid.update_data([records[index]])
        self.refresh_submit_affordance()
        return True

    def refresh_submit_affordance(self) -> None:
        self.submit_button.set_enabled(is_eligible_for_submit(self.grid.get_selected_data()))

    # -----------------------------
    # Submission flow
    # -----------------------------
    def submit_clicked(self) -> None:
        with self._lock:
            if self.state is not GridState.IDLE:
                return
            selected = self.grid.get_selected_data()
            if not is_eligible_for_submit(selected):
                return
            self._set_state(GridState.AWAITING_CONFIRMATION)
        self.confirmation.show(sum(1 for record in selected if record.is_modified))

    def dismiss(self) -> None:
        with self._lock:
            if self.state is not GridState.AWAITING_CONFIRMATION:
                return
            self._set_state(GridState.IDLE)
        self.confirmation.hide()

    async def confirm(self) -> Optional[SubmitResult]:
        with self._lock:
            if self.state is not GridState.AWAITING_CONFIRMATION:
                return None
            self.confirmation.hide()
            selected = self.grid.get_selected_data()
            batch = build_update_batch(selected, {record.id for record in selected})
            captured = {record.id: self._revisions.get(record.id, 0) for record in batch}
            self._set_state(GridState.SUBMITTING if batch else GridState.IDLE)
        if not batch:
            self.notify("Nothing to update", NotificationKind.INFO.value)
            self.refresh_submit_affordance()
            return None

        try:
            result = await asyncio.to_thread(self.submitter.submit, batch)
            if isinstance(result, SubmitSuccess):
                with self._lock:
                    self._reconcile_success(batch, captured)
        finally:
            with self._lock:
                self._set_state(GridState.IDLE)

        if isinstance(result, SubmitSuccess):
            if self.grid.get_header_filters():
                await asyncio.to_thread(self.grid.refresh_filter)
            self.notify(SUCCESS_MESSAGE, NotificationKind.SUCCESS.value)
        elif isinstance(result, SubmitFailure):
            logger.info("Batch of %d record(s) rejected: %s", len(batch), result.reason)
            self.notify(result.reason, NotificationKind.ERROR.value)
        self.refresh_submit_affordance()
        return result

    def _reconcile_success(self, batch: List[Record], captured: Dict[Any, int]) -> None:
        logger.info("Batch of %d record(s) synced", len(batch))
        synced_ids = [
            record.id for record in batch
            if self._revisions.get(record.id, 0) == captured[record.id]
        ]
        current = {record.id: record for record in self.grid.get_data()}
        synced = [current[rid] for rid in synced_ids if rid in current]
        if synced:
            self.grid.update_data(clear_modified(synced))
        self.grid.deselect_rows([record.id for record in batch])

    def reset(self) -> None:
        """Drop every client-side change and reload from scratch.

        Ignored while a batch is in flight.
        """
        with self._lock:
            if self.state is GridState.SUBMITTING:
                logger.debug("Reset ignored while a batch is in flight")
                return
            if self.state is GridState.AWAITING_CONFIRMATION:
                self.confirmation.hide()
            self._set_state(GridState.IDLE)
            self._revisions.clear()
        self.grid.reset()
        self.refresh_submit_affordance()

    def _set_state(self, state: GridState) -> None:
        if state is not self.state:
            logger.debug("Grid state %s -> %s", self.state.value, state.value)
        self.state = state


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
