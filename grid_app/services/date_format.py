from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional


ISO_DATE_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%d/%m/%Y"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")


def parse_calendar_date(value: Any) -> Optional[date]:
    """Lenient parse for values coming from the server.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and ISO
    timestamps; the time and zone parts are dropped, never converted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    if not raw:
        return None
    match = _ISO_PREFIX_RE.match(raw)
    if match:
        raw = match.group(1)
    try:
        return parse_iso_date(raw)
    except ValueError:
        return None


def parse_iso_date(text: str) -> date:
    """Strict ``YYYY-MM-DD`` parse. Raises ValueError on anything else."""
    raw = (text or "").strip()
    if not _ISO_DATE_RE.match(raw):
        raise ValueError(f"Invalid date: {text!r}")
    return datetime.strptime(raw, ISO_DATE_FORMAT).date()


def format_iso_date(value: Any) -> str:
    parsed = parse_calendar_date(value)
    return parsed.strftime(ISO_DATE_FORMAT) if parsed else ""


def format_display_date(value: Any) -> str:
    parsed = parse_calendar_date(value)
    return parsed.strftime(DISPLAY_DATE_FORMAT) if parsed else ""
