from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_PAGE_SIZE = 5
PAGE_SIZE_OPTIONS = (5, 10, 25, 50)
RECONCILE_STRATEGIES = ("patch", "refetch")


@dataclass(frozen=True)
class Settings:
    """
    Client settings loaded from environment variables.

    Env vars:
    - TASKS_API_URL: base URL of the remote task service. Default 'http://localhost:8000/api'
    - TASKS_API_TIMEOUT: transport timeout in seconds (default: 10)
    - TASKS_PAGE_SIZE: initial page size; one of 5, 10, 25, 50 (default: 5)
    - TASKS_RECONCILE: 'patch' (default) or 'refetch'
    - TASKS_API_USERNAME / TASKS_API_PASSWORD: optional HTTP Basic credentials
    - TASKS_LOG_LEVEL: console log level name (default: INFO)
    """

    api_url: str
    timeout: float
    page_size: int
    reconcile: str
    api_username: Optional[str]
    api_password: Optional[str]
    log_level: str

    @property
    def basic_auth(self) -> Optional[tuple[str, str]]:
        if self.api_username is None or self.api_password is None:
            return None
        return (self.api_username, self.api_password)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_page_size(value: str) -> int:
    try:
        size = int(value.strip())
    except ValueError:
        return DEFAULT_PAGE_SIZE
    return size if size in PAGE_SIZE_OPTIONS else DEFAULT_PAGE_SIZE


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return client settings loaded from environment variables."""
    reconcile = _get_env("TASKS_RECONCILE", "patch").strip().lower()
    if reconcile not in RECONCILE_STRATEGIES:
        # Fallback to local patching if unsupported
        reconcile = "patch"

    username = os.getenv("TASKS_API_USERNAME") or None
    password = os.getenv("TASKS_API_PASSWORD") or None

    return Settings(
        api_url=_get_env("TASKS_API_URL", DEFAULT_API_URL).strip().rstrip("/"),
        timeout=_parse_float(_get_env("TASKS_API_TIMEOUT", "10"), 10.0),
        page_size=_parse_page_size(_get_env("TASKS_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
        reconcile=reconcile,
        api_username=username,
        api_password=password,
        log_level=_get_env("TASKS_LOG_LEVEL", "INFO").strip().upper(),
    )
