"""
page_analyzer/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

PAGE_LOADER_PLAYWRIGHT = "playwright"
PAGE_LOADER_STATIC = "static"
_ALLOWED_PAGE_LOADERS = {PAGE_LOADER_PLAYWRIGHT, PAGE_LOADER_STATIC}
_ALLOWED_WAIT_UNTIL = {"load", "domcontentloaded", "networkidle", "commit"}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_optional_float_env(name: str) -> float | None:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        value = float(raw_value)
    except ValueError:
        return None
    return value if value > 0 else None


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw_value = _get_str_env(name, "")
    if not raw_value:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class BrowserSettings:
    """
    Playwright page loader settings.
    """

    headless: bool = True
    page_load_timeout_ms: int = 30000
    wait_until: str = "networkidle"


@dataclass(frozen=True)
class StaticFetchSettings:
    """
    HTTP behavior for the static (no-script) page loader.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    user_agent: str = "PageAnalyzer/1.0"


@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Top-level runtime settings for the analysis service.
    """

    page_loader: str = PAGE_LOADER_PLAYWRIGHT
    browser: BrowserSettings = field(default_factory=BrowserSettings)
    static_fetch: StaticFetchSettings = field(default_factory=StaticFetchSettings)
    job_timeout_seconds: float | None = None
    max_concurrent_jobs: int = 4
    cors_allow_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"


def _require_page_loader() -> str:
    """
    Read and validate PAGE_LOADER from the environment.
    """

    raw = _get_str_env("PAGE_LOADER", PAGE_LOADER_PLAYWRIGHT)
    loader = raw.lower()
    if loader not in _ALLOWED_PAGE_LOADERS:
        raise RuntimeError(
            f"PAGE_LOADER '{raw}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_PAGE_LOADERS)}."
        )
    return loader


def _get_wait_until() -> str:
    value = _get_str_env("PAGE_WAIT_UNTIL", "networkidle").lower()
    return value if value in _ALLOWED_WAIT_UNTIL else "networkidle"


@lru_cache(maxsize=1)
def get_analyzer_settings() -> AnalyzerSettings:
    """
    Return cached analyzer settings from environment variables.

    Raises RuntimeError if PAGE_LOADER names an unknown loader.
    """

    return AnalyzerSettings(
        page_loader=_require_page_loader(),
        browser=BrowserSettings(
            headless=_get_bool_env("BROWSER_HEADLESS", True),
            page_load_timeout_ms=max(1000, _get_int_env("PAGE_LOAD_TIMEOUT_MS", 30000)),
            wait_until=_get_wait_until(),
        ),
        static_fetch=StaticFetchSettings(
            timeout_seconds=max(1.0, _get_float_env("STATIC_FETCH_TIMEOUT_SECONDS", 15.0)),
            max_retries=max(0, _get_int_env("STATIC_FETCH_MAX_RETRIES", 2)),
            backoff_initial_seconds=max(0.1, _get_float_env("STATIC_FETCH_BACKOFF_SECONDS", 0.5)),
            user_agent=_get_str_env("STATIC_USER_AGENT", "PageAnalyzer/1.0"),
        ),
        job_timeout_seconds=_get_optional_float_env("JOB_TIMEOUT_SECONDS"),
        max_concurrent_jobs=max(1, _get_int_env("MAX_CONCURRENT_JOBS", 4)),
        cors_allow_origins=_get_list_env("CORS_ALLOW_ORIGINS", ("*",)),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
