"""
Async page analysis submission and status endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from page_analyzer.api.dependencies import get_analysis_orchestrator
from page_analyzer.domain.analysis import AnalysisJob
from page_analyzer.errors import SubmissionValidationError
from page_analyzer.schemas.analysis import (
    AnalysisJobAcceptedResponse,
    AnalysisJobListResponse,
    AnalysisJobStatusResponse,
    AnalysisJobSummary,
    AnalysisRequest,
)
from page_analyzer.services.analysis_orchestrator_service import AnalysisOrchestratorService

router = APIRouter(tags=["page-analysis"])


def status_path(job_id: str) -> str:
    return f"/status/{job_id}"


@router.post(
    "/kickoff",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=AnalysisJobAcceptedResponse,
)
async def kickoff_analysis(
    payload: AnalysisRequest | None = None,
    orchestrator: AnalysisOrchestratorService = Depends(get_analysis_orchestrator),
) -> AnalysisJobAcceptedResponse:
    """
    Accept a URL for analysis and return the job handle immediately.
    """

    try:
        job = orchestrator.submit(payload.url if payload is not None else None)
    except SubmissionValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return AnalysisJobAcceptedResponse(
        job_id=job.job_id,
        status=job.status,
        status_url=status_path(job.job_id),
    )


@router.get(
    "/status/{job_id}",
    response_model=AnalysisJobStatusResponse,
    response_model_exclude_none=True,
)
async def get_analysis_status(
    job_id: str,
    orchestrator: AnalysisOrchestratorService = Depends(get_analysis_orchestrator),
) -> AnalysisJobStatusResponse:
    job = orchestrator.get_job_status(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job not found: {job_id}",
        )
    return AnalysisJobStatusResponse(status=job.status, result=job.result, error=job.error)


@router.get("/jobs", response_model=AnalysisJobListResponse)
async def list_analysis_jobs(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=100, ge=1, le=500, description="Max jobs returned"),
    orchestrator: AnalysisOrchestratorService = Depends(get_analysis_orchestrator),
) -> AnalysisJobListResponse:
    jobs = orchestrator.list_job_statuses(limit=limit, status=status_filter)
    return AnalysisJobListResponse(jobs=[_to_summary(job) for job in jobs])


def _to_summary(job: AnalysisJob) -> AnalysisJobSummary:
    return AnalysisJobSummary(
        job_id=job.job_id,
        url=job.url,
        status=job.status,
        created_at=job.created_at,
        completed_at=job.completed_at,
    )
