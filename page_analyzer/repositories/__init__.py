"""
page_analyzer/repositories package marker.
"""

from page_analyzer.repositories.analysis_job_repository import AnalysisJobRepository

__all__ = ["AnalysisJobRepository"]
