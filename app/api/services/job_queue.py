"""In-memory job queue for URL analysis."""
from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from aimapper.config.settings import settings
from aimapper.fetcher.html_fetcher import fetch_page
from aimapper.fetcher.performance import measure_performance
from aimapper.logging import get_logger
from aimapper.fetcher.site_signals import collect_site_signals
from aimapper.pipeline import analyze_document

logger = get_logger(__name__)

JobStatus = Literal["pending", "processing", "completed", "failed"]


@dataclass
class Job:
    """Analysis job."""

    id: str
    url: str | None
    status: JobStatus
    created_at: datetime
    content_type: str = "general"
    industry: str | None = None
    completed_at: datetime | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


class JobQueue:
    """In-memory job store; URL analyses run on a small thread pool."""

    def __init__(self, max_workers: int | None = None):
        self.max_workers = max_workers or settings.api.job_max_workers
        self.jobs: dict[str, Job] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers)
        self._cleanup_interval = 3600  # seconds
        self._last_cleanup = time.time()
        self._running = True

    def submit(self, url: str, content_type: str = "general", industry: str | None = None) -> str:
        """Queue analysis of ``url``. Returns job_id."""
        job = Job(
            id=uuid4().hex,
            url=url,
            status="pending",
            created_at=datetime.now(UTC),
            content_type=content_type,
            industry=industry,
        )
        self._store(job)
        self._executor.submit(self._run_analysis, job.id)
        return job.id

    def record(self, result: dict[str, Any], url: str | None = None) -> Job:
        """Store an already-finished analysis so it can be fetched by id."""
        now = datetime.now(UTC)
        job = Job(
            id=uuid4().hex,
            url=url,
            status="completed",
            created_at=now,
            content_type=result["meta"]["contentType"],
            industry=result["meta"]["industry"],
            completed_at=now,
            result=result,
        )
        self._store(job)
        return job

    @property
    def is_running(self) -> bool:
        return self._running

    def get(self, job_id: str) -> Job | None:
        """Get job by ID."""
        with self._lock:
            return self.jobs.get(job_id)

    def _store(self, job: Job) -> None:
        with self._lock:
            self.jobs[job.id] = job
            self._maybe_cleanup()

    def _run_analysis(self, job_id: str) -> None:
        """Fetch, collect site signals, measure performance and score (executed in thread pool)."""
        job = self.jobs.get(job_id)
        if not job:
            return

        job.status = "processing"

        try:
            page = fetch_page(job.url)
            signals = collect_site_signals(page.final_url)
            performance = measure_performance(page) if settings.performance.enabled else None
            job.result = analyze_document(
                page.body,
                page.final_url,
                site_signals=signals,
                status_code=page.status_code,
                performance=performance,
                content_type=job.content_type,
                industry=job.industry,
                input_type="url",
            )
            job.status = "completed"

        except (ValueError, RuntimeError) as e:
            job.error = str(e)
            job.status = "failed"

        except Exception as e:
            logger.exception("analysis_job_failed", job_id=job_id, url=job.url)
            job.error = f"Analysis failed: {type(e).__name__}: {str(e)}"
            job.status = "failed"

        finally:
            job.completed_at = datetime.now(UTC)

    def _maybe_cleanup(self) -> None:
        """Drop jobs past the retention window, at most once an hour. Caller holds the lock."""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = datetime.now(UTC).timestamp() - settings.api.job_retention_hours * 3600
        for job_id in [j.id for j in self.jobs.values() if j.created_at.timestamp() < cutoff]:
            del self.jobs[job_id]

        self._last_cleanup = now

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the executor."""
        self._running = False
        self._executor.shutdown(wait=wait)


# Global job queue instance
job_queue = JobQueue()
