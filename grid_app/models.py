from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from grid_app.enums import EDITABLE_KEYS, Gender, SortDirection, UpdateKey
from grid_app.services.date_format import format_iso_date, parse_calendar_date

logger = logging.getLogger(__name__)

PAGE_SIZE = 200

MODIFIED_FLAG = "isModified"

_RECORD_KEYS = ("id",) + EDITABLE_KEYS + (MODIFIED_FLAG,)


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_gender(value: Any) -> Optional[Gender]:
    if value is None or isinstance(value, Gender):
        return value
    raw = str(value).strip().lower()
    if not raw:
        return None
    try:
        return Gender(raw)
    except ValueError:
        logger.warning("Unknown gender value %r, keeping it empty", value)
        return None


def coerce_field_value(field_key: str, value: Any) -> Any:
    """Convert an editor value into the attribute type used by Record."""
    if field_key == UpdateKey.DOB.value:
        return parse_calendar_date(value)
    if field_key == UpdateKey.GENDER.value:
        return parse_gender(value)
    return _to_text(value)


@dataclass
class Record:
    id: Any
    name: str = ""
    email: str = ""
    phone_number: str = ""
    location: str = ""
    gender: Optional[Gender] = None
    favourite: str = ""
    dob: Optional[date] = None
    is_modified: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        if data.get("id") is None:
            raise ValueError("Record without id")
        return cls(
            id=data["id"],
            name=_to_text(data.get("name")),
            email=_to_text(data.get("email")),
            phone_number=_to_text(data.get("phone_number")),
            location=_to_text(data.get("location")),
            gender=parse_gender(data.get("gender")),
            favourite=_to_text(data.get("favourite")),
            dob=parse_calendar_date(data.get("dob")),
            is_modified=bool(data.get(MODIFIED_FLAG, False)),
            extra={k: v for k, v in data.items() if k not in _RECORD_KEYS},
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "id": self.id,
                "name": self.name,
                "email": self.email,
                "phone_number": self.phone_number,
                "location": self.location,
                "gender": self.gender.value if self.gender else None,
                "favourite": self.favourite,
                "dob": format_iso_date(self.dob) or None,
                MODIFIED_FLAG: self.is_modified,
            }
        )
        return payload

    def get_value(self, field_key: str) -> Any:
        return getattr(self, field_key)


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class FilterSpec:
    field: str
    value: Any


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    per_page: int = PAGE_SIZE
    sorts: Sequence[SortSpec] = ()
    filters: Sequence[FilterSpec] = ()

    def __post_init__(self) -> None:
        if int(self.page) < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if int(self.per_page) < 1:
            raise ValueError(f"per_page must be > 0, got {self.per_page}")


@dataclass
class PageResult:
    records: List[Record]
    last_page: int = 1
    total: Optional[int] = None
