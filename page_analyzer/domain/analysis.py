"""
page_analyzer/domain/analysis.py

Domain models for page analysis jobs and extraction output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class AnalysisJobStatus:
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    TERMINAL = frozenset({COMPLETED, FAILED})


@dataclass(frozen=True)
class ElementDescriptor:
    """
    Minimal view of one DOM element as returned by a page query.
    """

    tag: str
    element_id: str | None = None
    class_list: tuple[str, ...] = ()
    class_name: str = ""
    href: str = ""
    text: str = ""
    src: str = ""
    alt: str = ""
    outer_html: str = ""
    input_type: str | None = None

    @staticmethod
    def split_classes(class_name: str | None) -> tuple[str, ...]:
        if not class_name:
            return ()
        return tuple(token for token in class_name.split() if token)


@dataclass(frozen=True)
class Locator:
    css: str
    xpath: str


@dataclass
class PageExtraction:
    """
    Grouped output of the three extraction passes over one page.
    """

    links: list[dict[str, Any]] = field(default_factory=list)
    icons: list[dict[str, Any]] = field(default_factory=list)
    buttons: list[dict[str, Any]] = field(default_factory=list)
    inputs: list[dict[str, Any]] = field(default_factory=list)
    navigation: list[dict[str, Any]] = field(default_factory=list)

    def to_result(self, url: str) -> dict[str, Any]:
        """
        Assemble the public analysis result payload.

        Counts are derived from the item lists so they always agree.
        """

        return {
            "url": url,
            "links": {"count": len(self.links), "items": list(self.links)},
            "icons": {"count": len(self.icons), "items": list(self.icons)},
            "locators": {
                "buttons": list(self.buttons),
                "inputs": list(self.inputs),
                "navigation": list(self.navigation),
            },
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AnalysisJob:
    """
    Immutable snapshot of one analysis job.

    Exactly one of ``result``/``error`` is set, and only once the job is terminal.
    """

    job_id: str
    url: str
    status: str = AnalysisJobStatus.PROCESSING
    result: dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in AnalysisJobStatus.TERMINAL
