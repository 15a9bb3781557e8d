"""Job polling endpoint."""
from __future__ import annotations

import re

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.models.errors import ErrorCodes, ErrorResponse, error_detail
from app.api.models.responses import AnalysisResult, JobResponse
from app.api.services.job_queue import Job, job_queue
from app.api.v1.deps import check_rate_limit

router = APIRouter(tags=["Jobs"])

# uuid4().hex
JOB_ID_PATTERN = re.compile(r"^[a-f0-9]{32}$")


def job_to_response(job: Job) -> JobResponse:
    """Wrap a job in the response envelope; the result only once completed."""
    result = None
    if job.status == "completed" and job.result:
        result = AnalysisResult.model_validate(job.result)

    return JobResponse(
        job_id=job.id,
        status=job.status,
        url=job.url,
        created_at=job.created_at,
        completed_at=job.completed_at,
        result=result,
        error=job.error,
    )


@router.get(
    "/jobs/{job_id}",
    response_model=JobResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed job ID"},
        404: {"model": ErrorResponse, "description": "Unknown or expired job"},
        429: {"model": ErrorResponse, "description": "Analysis quota exceeded"},
    },
    dependencies=[Depends(check_rate_limit)],
    summary="Poll an analysis job",
    description="""
Return the current state of an analysis.

URL analyses move through `pending` → `processing` → `completed` or `failed`.
HTML and text analyses are stored as `completed` straight away.
`result` is present once completed; `error` explains a failure.
Jobs are kept for `AI_MAPPER_JOB_RETENTION_HOURS` (24 by default).
""",
)
async def get_job(job_id: str) -> JobResponse:
    if not JOB_ID_PATTERN.match(job_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail(
                ErrorCodes.INVALID_REQUEST,
                "Invalid job ID format. Expected 32 hex characters.",
                job_id=job_id,
            ),
        )

    job = job_queue.get(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail(ErrorCodes.JOB_NOT_FOUND, f"Job not found: {job_id}", job_id=job_id),
        )

    return job_to_response(job)
