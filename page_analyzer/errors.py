"""
Exception hierarchy for page analysis and job lifecycle flows.
"""

from __future__ import annotations


class PageAnalyzerError(Exception):
    """Base exception for page analyzer failures."""


class SubmissionValidationError(PageAnalyzerError):
    """Raised when a submitted analysis request is rejected before job creation."""


class NavigationError(PageAnalyzerError):
    """Raised when a page cannot be loaded or navigated."""


class ExtractionError(PageAnalyzerError):
    """Raised when querying a loaded page fails unexpectedly."""


class JobNotFoundError(PageAnalyzerError):
    """Raised when a referenced analysis job does not exist."""


class JobStateError(PageAnalyzerError):
    """Raised when a terminal analysis job is transitioned again."""


class AnalysisTimeoutError(PageAnalyzerError):
    """Raised when an analysis job exceeds its configured deadline."""
