"""
page_analyzer/api/routers package marker.
"""

from page_analyzer.api.routers.analysis import router as analysis_router

__all__ = ["analysis_router"]
