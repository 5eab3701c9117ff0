"""Query string encoding for remote pagination, sorting and filtering."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, Optional
from urllib.parse import urlencode

from grid_app.models import PAGE_SIZE, FilterSpec, PageRequest, SortSpec


def _param_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def encode_sort(sorts: Iterable[SortSpec]) -> str:
    return ",".join(f"{s.field}:{_param_value(s.direction)}" for s in sorts)


def encode_query(
    page: int,
    per_page: Optional[int] = PAGE_SIZE,
    sorts: Iterable[SortSpec] = (),
    filters: Iterable[FilterSpec] = (),
) -> str:
    params: Dict[str, str] = {
        "page": str(page),
        "per_page": str(per_page if per_page is not None else PAGE_SIZE),
    }
    sort_by = encode_sort(sorts)
    if sort_by:
        params["sort_by"] = sort_by
    # Filter fields are passed through unchecked; a repeated field keeps the last value.
    for flt in filters:
        if flt.field:
            params[flt.field] = _param_value(flt.value)
    return urlencode(params, safe=":,")


def build_page_url(base_url: str, request: PageRequest) -> str:
    query = encode_query(request.page, request.per_page, request.sorts, request.filters)
    return f"{base_url}?{query}"
