"""
page_analyzer/domain package marker.
"""

from page_analyzer.domain.analysis import (
    AnalysisJob,
    AnalysisJobStatus,
    ElementDescriptor,
    Locator,
    PageExtraction,
)

__all__ = [
    "AnalysisJob",
    "AnalysisJobStatus",
    "ElementDescriptor",
    "Locator",
    "PageExtraction",
]
