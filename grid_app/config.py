import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from grid_app.models import PAGE_SIZE


DEFAULT_USERS_API_URL = "http://localhost:5001/api/users"
DEFAULT_USERS_UPDATE_URL = "http://localhost:5001/api/update-user"


@dataclass(frozen=True)
class AppConfig:
    users_api_url: str = DEFAULT_USERS_API_URL
    users_update_url: str = DEFAULT_USERS_UPDATE_URL
    page_size: int = PAGE_SIZE
    http_timeout: int = 30
    filter_delay_ms: int = 1000
    log_level: str = "INFO"


def _read_int_env(name: str, default: int, *, min_value: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= min_value else default


def _read_log_level(name: str, default: str = "INFO") -> str:
    raw = (os.getenv(name) or "").strip().upper()
    if raw and isinstance(logging.getLevelName(raw), int):
        return raw
    return default


def load_config() -> AppConfig:
    load_dotenv()
    return AppConfig(
        users_api_url=(os.getenv("USERS_API_URL") or DEFAULT_USERS_API_URL).strip(),
        users_update_url=(os.getenv("USERS_UPDATE_URL") or DEFAULT_USERS_UPDATE_URL).strip(),
        page_size=_read_int_env("USERS_PAGE_SIZE", PAGE_SIZE, min_value=1),
        http_timeout=_read_int_env("HTTP_TIMEOUT", 30, min_value=1),
        filter_delay_ms=_read_int_env("FILTER_DELAY_MS", 1000, min_value=0),
        log_level=_read_log_level("LOG_LEVEL"),
    )
