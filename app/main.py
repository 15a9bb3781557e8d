"""FastAPI entry point."""
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from aimapper.cli.run import VERSION
from aimapper.config.settings import settings
from aimapper.logging import setup_logging
from app.api.v1.router import router as api_router

setup_logging()

DOCS_PATHS = frozenset({"/api/docs", "/api/redoc", "/api/openapi.json"})

# Swagger UI and ReDoc load their bundles from jsDelivr
DOCS_CSP = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com",
    "font-src 'self' https://cdn.jsdelivr.net",
    "connect-src 'self'",
    "frame-ancestors 'none'",
])
JSON_CSP = "default-src 'none'; frame-ancestors 'none'"

STATIC_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Lock down every response; only the docs pages may load scripts."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Content-Security-Policy"] = (
            DOCS_CSP if request.url.path in DOCS_PATHS else JSON_CSP
        )
        response.headers.update(STATIC_SECURITY_HEADERS)
        return response


class QuotaHeadersMiddleware(BaseHTTPMiddleware):
    """Copy the analysis quota state left by ``check_rate_limit`` into headers."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        limit = getattr(request.state, "rate_limit_limit", None)
        if limit is None:
            return response

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(request.state.rate_limit_remaining)
        response.headers["X-RateLimit-Reset"] = str(int(time.time()) + request.state.rate_limit_reset)
        return response


app = FastAPI(
    title="AI Mapper API",
    description="""
Score web content for classic search (SEO) and generative engines (GEO).

## Features

- **SEO Score**: 0-100 across technical, content quality and readability checks
- **GEO Score**: 0-100 across structured data, answerability, entity architecture,
  crawl signals, trust, freshness and safety
- **Pillars**: per-category roll-ups with Strong / Watch / Risk status
- **Recommendations**: up to ten prioritized actions, plus content-type tips
- **Benchmarks**: comparison against industry score ranges

## Processing

1. `POST /api/v1/analyze` with `html` or `text`: scored immediately
2. `POST /api/v1/analyze` with `url`: returns a `job_id`; poll `GET /api/v1/jobs/{job_id}`
""",
    version=VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.add_middleware(QuotaHeadersMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(api_router, prefix="/api/v1")
