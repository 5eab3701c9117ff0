"""
Users API client

HTTP access to the remote users service: one GET endpoint serving pages of
records (remote pagination/sort/filter through the query string) and one POST
endpoint receiving batch updates.
"""

from __future__ import annotations

import logging
from math import ceil
from typing import Any, Dict, List, Optional, Sequence

import httpx

from grid_app.models import PageRequest, PageResult, Record
from grid_app.query import build_page_url

logger = logging.getLogger(__name__)


class UsersApiError(RuntimeError):
    """Raised when a page of users cannot be fetched or decoded."""


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_page_payload(payload: Any, per_page: int) -> PageResult:
    """Decode a fetch response.

    Expected shape is ``{"data": [...], "last_page": N}``; ``total`` or
    ``last_row`` are used to derive the page count when ``last_page`` is
    missing, and a bare list is taken as a single page.
    """
    if isinstance(payload, list):
        rows, meta = payload, {}
    elif isinstance(payload, dict):
        rows, meta = payload.get("data"), payload
    else:
        raise UsersApiError(f"Unexpected response type: {type(payload).__name__}")
    if not isinstance(rows, list):
        raise UsersApiError("Response has no 'data' list")

    records: List[Record] = []
    for row in rows:
        if not isinstance(row, dict):
            raise UsersApiError("Response rows must be objects")
        try:
            records.append(Record.from_dict(row))
        except ValueError as exc:
            raise UsersApiError(str(exc)) from exc

    total = _to_int(meta.get("total"))
    if total is None:
        total = _to_int(meta.get("last_row"))
    last_page = _to_int(meta.get("last_page"))
    if last_page is None:
        last_page = ceil(total / per_page) if total else 1
    return PageResult(records=records, last_page=max(1, last_page), total=total)


class UsersApiClient:
    def __init__(self, users_url: str, update_url: str, http_client: httpx.Client):
        self.users_url = users_url.rstrip("/")
        self.update_url = update_url
        self.http_client = http_client

    def fetch_page(self, request: PageRequest) -> PageResult:
        url = build_page_url(self.users_url, request)
        logger.debug("Fetching users page: %s", url)
        try:
            response = self.http_client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise UsersApiError(f"Server returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise UsersApiError(f"Could not reach users API: {exc}") from exc
        except ValueError as exc:
            raise UsersApiError("Response is not valid JSON") from exc
        return parse_page_payload(payload, request.per_page)

    def post_updates(self, batch: Sequence[Record]) -> httpx.Response:
        """POST ``{"updates": [...]}``. Transport errors propagate as httpx.HTTPError."""
        body: Dict[str, Any] = {"updates": [record.to_payload() for record in batch]}
        logger.debug("Posting %d updated record(s) to %s", len(batch), self.update_url)
        return self.http_client.post(self.update_url, json=body)
