"""
Structured logging helpers for page analysis jobs.

Every event is one compact JSON object so job ids and URLs stay greppable
across the API, the orchestrator and the page loaders.
"""

from __future__ import annotations

import json
import logging
from typing import Any

MAX_ERROR_MESSAGE_LENGTH = 2000


def describe_error(exc: BaseException, *, limit: int = MAX_ERROR_MESSAGE_LENGTH) -> str:
    """
    Render an exception as ``"<Type>: <message>"``, truncated to ``limit`` characters.
    """

    return f"{type(exc).__name__}: {exc}"[:limit]


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    job_id: str | None = None,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    ``job_id`` is omitted from the payload when not given so loader events
    outside a job stay short.
    """

    if not logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {"event": event, **fields}
    if job_id is not None:
        payload["job_id"] = job_id
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
