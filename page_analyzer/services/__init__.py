"""
page_analyzer/services package marker.
"""

from page_analyzer.services.analysis_orchestrator_service import (
    AnalysisOrchestratorService,
    AnalysisTaskExecutor,
    AsyncioTaskExecutor,
    build_analysis_orchestrator_service,
    build_page_loader,
)

__all__ = [
    "AnalysisOrchestratorService",
    "AnalysisTaskExecutor",
    "AsyncioTaskExecutor",
    "build_analysis_orchestrator_service",
    "build_page_loader",
]
