"""
Dirty-state bookkeeping for loaded user records.

Every function here is pure: the input collection is never mutated, callers get
copies back and decide what to do with them (the table replaces its rows, the
controller builds update batches).
"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any, Collection, List, Sequence

from grid_app.enums import EDITABLE_KEYS
from grid_app.models import Record, coerce_field_value


def clone_record(record: Record, **changes: Any) -> Record:
    return replace(record, extra=copy.deepcopy(record.extra), **changes)


def clone_records(records: Sequence[Record]) -> List[Record]:
    return [clone_record(record) for record in records]


def apply_edit(records: Sequence[Record], index: int, field_key: str, new_value: Any) -> List[Record]:
    """Return a copy of ``records`` with one field of ``records[index]`` replaced.

    The edited record is flagged as modified; every other record and field is
    copied unchanged.
    """
    if field_key not in EDITABLE_KEYS:
        raise ValueError(f"Field '{field_key}' is not editable")
    if index < 0 or index >= len(records):
        raise IndexError(f"Record index {index} out of range")

    copied = clone_records(records)
    copied[index] = clone_record(
        copied[index],
        is_modified=True,
        **{field_key: coerce_field_value(field_key, new_value)},
    )
    return copied


def is_eligible_for_submit(records: Sequence[Record]) -> bool:
    return bool(records) and any(record.is_modified for record in records)


def build_update_batch(records: Sequence[Record], selected_ids: Collection[Any]) -> List[Record]:
    return [clone_record(r) for r in records if r.id in selected_ids and r.is_modified]


def clear_modified(records: Sequence[Record]) -> List[Record]:
    return [clone_record(record, is_modified=False) for record in records]
