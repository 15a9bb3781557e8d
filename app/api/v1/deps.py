"""API dependencies for per-client analysis quotas."""
from __future__ import annotations

import time

from cachetools import TTLCache
from fastapi import HTTPException, Request, status

from aimapper.config.settings import settings
from app.api.models.errors import ErrorCodes, error_detail


class AnalysisQuota:
    """Sliding-window request quota per client IP, with TTL-based cleanup."""

    def __init__(self, limit: int | None = None, window: int | None = None, max_clients: int | None = None):
        self.limit = limit or settings.api.analysis_quota
        self.window = window or settings.api.quota_window
        # Entries outlive the window so the oldest timestamp is still visible
        self._requests: TTLCache[str, list[float]] = TTLCache(
            maxsize=max_clients or settings.api.max_clients, ttl=self.window * 2
        )

    @staticmethod
    def client_id(request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def check(self, client: str, now: float | None = None) -> tuple[bool, int, int]:
        """
        Record a request for ``client`` if it is within quota.

        Returns:
            (allowed, remaining, reset_seconds)
        """
        now = time.time() if now is None else now
        window_start = now - self.window

        requests = [t for t in self._requests.get(client, []) if t > window_start]

        if len(requests) >= self.limit:
            self._requests[client] = requests
            reset_seconds = int(min(requests) + self.window - now)
            return False, 0, max(1, reset_seconds)

        requests.append(now)
        self._requests[client] = requests
        return True, self.limit - len(requests), self.window

    def reset(self) -> None:
        self._requests.clear()


# Global quota instance
analysis_quota = AnalysisQuota()


async def check_rate_limit(request: Request) -> None:
    """Enforce the analysis quota.

    Stores quota info on request.state for the response-header middleware.
    Raises HTTPException 429 when the client is over quota.
    """
    allowed, remaining, reset = analysis_quota.check(AnalysisQuota.client_id(request))

    request.state.rate_limit_remaining = remaining
    request.state.rate_limit_reset = reset
    request.state.rate_limit_limit = analysis_quota.limit

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=error_detail(
                ErrorCodes.RATE_LIMIT_EXCEEDED,
                "Too many requests. Please slow down.",
                retry_after=reset,
                limit=analysis_quota.limit,
            ),
            headers={
                "Retry-After": str(reset),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(time.time()) + reset),
            },
        )
