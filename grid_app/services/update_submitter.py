from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import httpx

from grid_app.models import Record
from grid_app.services.users_api import UsersApiClient

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong"


@dataclass(frozen=True)
class SubmitSuccess:
    response: Any = None


@dataclass(frozen=True)
class SubmitFailure:
    reason: str = GENERIC_FAILURE_MESSAGE


SubmitResult = Union[SubmitSuccess, SubmitFailure]


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> Optional[str]:
    body = _json_or_none(response)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            return error
    return None


class UpdateSubmitter:
    """Sends one update batch and turns every outcome into a SubmitResult."""

    def __init__(self, client: UsersApiClient):
        self.client = client

    def submit(self, batch: Sequence[Record]) -> SubmitResult:
        try:
            response = self.client.post_updates(batch)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Update request failed: %s", exc)
            return SubmitFailure(GENERIC_FAILURE_MESSAGE)

        if response.status_code == 200:
            logger.info("Update accepted for %d record(s)", len(batch))
            return SubmitSuccess(_json_or_none(response))

        reason = _error_message(response) or GENERIC_FAILURE_MESSAGE
        logger.warning("Update rejected with status %s: %s", response.status_code, reason)
        return SubmitFailure(reason)
