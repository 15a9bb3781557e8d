"""Analysis submission endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from aimapper.fetcher.html_fetcher import normalize_url
from aimapper.pipeline import analyze_document, analyze_text
from app.api.models.errors import ErrorCodes, ErrorResponse, error_detail
from app.api.models.requests import AnalyzeRequest
from app.api.models.responses import JobResponse
from app.api.services.job_queue import job_queue
from app.api.v1.deps import check_rate_limit
from app.api.v1.endpoints.jobs import job_to_response

router = APIRouter(tags=["Analysis"])


def _analyze_inline(body: AnalyzeRequest) -> dict:
    options = {"content_type": body.content_type, "industry": body.industry}
    if body.text:
        return analyze_text(body.text, **options)
    return analyze_document(
        body.html,
        body.base_url,
        site_signals=body.site_signals.to_signals() if body.site_signals else None,
        status_code=body.status_code,
        **options,
    )


@router.post(
    "/analyze",
    response_model=JobResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
    dependencies=[Depends(check_rate_limit)],
    summary="Score content for SEO and GEO",
    description="""
Score a page for SEO and GEO (Generative Engine Optimization).

Send exactly one of:
- **html**: scored immediately; the response carries `status=completed` and the result
- **text**: plain text, blank lines separate paragraphs; scored immediately
- **url**: fetched in the background; poll `GET /api/v1/jobs/{job_id}` for the result

URL jobs also collect site signals (robots.txt, llms.txt, IndexNow key file, sitemap).
""",
)
async def submit_analysis(body: AnalyzeRequest) -> JobResponse:
    """Analyze inline content, or queue a URL job."""
    if body.url:
        try:
            url = normalize_url(body.url)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_detail(ErrorCodes.INVALID_URL, str(e), url=body.url),
            )
        job_id = job_queue.submit(url, body.content_type, body.industry)
        return job_to_response(job_queue.get(job_id))

    result = await run_in_threadpool(_analyze_inline, body)
    return job_to_response(job_queue.record(result, url=body.base_url or None))
