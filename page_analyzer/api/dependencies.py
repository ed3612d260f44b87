"""
page_analyzer/api/dependencies.py

Shared FastAPI dependencies for application-scoped services.
"""

from __future__ import annotations

from fastapi import Request

from page_analyzer.services.analysis_orchestrator_service import AnalysisOrchestratorService


def get_analysis_orchestrator(request: Request) -> AnalysisOrchestratorService:
    """
    Return the orchestrator built once for this application instance.
    """

    return request.app.state.analysis_orchestrator
