"""API response models."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Score Models ===


class BreakdownEntry(_CamelModel):
    """Points earned by a single rule."""

    id: str
    label: str
    category: str
    points: int = Field(..., ge=0)
    max_points: int = Field(..., ge=0)
    passed: bool


class Score(_CamelModel):
    """SEO or GEO score with its per-rule breakdown."""

    total: int = Field(..., ge=0, le=100, description="Score (0-100)")
    total_points: int = Field(..., ge=0)
    max_points: int = Field(..., ge=0)
    grade: Literal["A", "B", "C", "D", "F"] = Field(..., description="Letter grade")
    grade_label: str = Field(..., description="Human-readable grade label")
    breakdown: dict[str, BreakdownEntry]


class Pillar(_CamelModel):
    """Category-level roll-up of a score."""

    id: str
    label: str
    description: str
    score: int = Field(..., ge=0, le=100)
    points: int
    max_points: int
    notes: list[str]
    status: Literal["Strong", "Watch", "Risk"]


# === Recommendation Models ===


class Recommendation(_CamelModel):
    """Single prioritized action."""

    id: str
    text: str
    priority: Literal["Critical", "High", "Medium", "Maintain"]
    mode: Literal["seo", "geo", "combined"]


class Recommendations(_CamelModel):
    combined: list[Recommendation]
    seo: list[Recommendation]
    geo: list[Recommendation]


# === Benchmark Models ===


class BenchmarkSummary(_CamelModel):
    delta: int | None = None
    label: str
    status: str = ""
    average: int | None = None


class Benchmark(_CamelModel):
    industry: str
    seo: BenchmarkSummary
    geo: BenchmarkSummary


# === Performance Models ===


class PerformanceMetrics(_CamelModel):
    """Timing and weight of the fetched page (URL analysis only)."""

    response_time_ms: int = Field(..., ge=0)
    page_size_bytes: int = Field(..., ge=0)
    num_requests: int = Field(..., ge=1, description="Page request plus redirect hops")
    largest_image_bytes: int = Field(..., ge=0)
    performance_score: int = Field(..., ge=0, le=100)
    grades: dict[str, Literal["optimal", "acceptable", "poor"]]
    status_code: int


class PerformanceSummary(BaseModel):
    """Display-ready performance figures, sizes in KB."""

    performance_score: int | float | None = Field(default=None, alias="performanceScore")
    response_time: int | float | None = Field(default=None, alias="responseTime")
    page_size_kb: int | float | None = Field(default=None, alias="pageSizeKB")
    num_requests: int | float | None = Field(default=None, alias="numRequests")
    largest_image_kb: int | float | None = Field(default=None, alias="largestImageKB")
    grades: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


# === Main Response Models ===


class AnalysisMeta(_CamelModel):
    title: str = ""
    input_type: Literal["url", "html", "text"]
    content_type: str
    industry: str | None = None


class AnalysisResult(_CamelModel):
    """Complete SEO/GEO analysis result."""

    url: str = ""
    meta: AnalysisMeta
    metrics: dict[str, Any] = Field(..., description="Extracted content metrics")
    seo: Score
    geo: Score
    seo_pillars: list[Pillar]
    geo_pillars: list[Pillar]
    recommendations: Recommendations
    type_findings: list[str]
    benchmark: Benchmark | None = None
    site_signals: dict[str, Any] | None = Field(default=None, description="Site-wide signals, when collected")
    performance: PerformanceMetrics | None = None
    performance_normalized: PerformanceSummary | None = None
    snapshot: str


class JobResponse(BaseModel):
    """Response for job status and results."""

    job_id: str = Field(..., description="Unique job identifier")
    status: Literal["pending", "processing", "completed", "failed"] = Field(
        ..., description="Job status"
    )
    url: str | None = Field(default=None, description="URL being analyzed")
    created_at: datetime = Field(..., description="When job was created")
    completed_at: datetime | None = Field(
        default=None, description="When job completed"
    )
    result: AnalysisResult | None = Field(
        default=None, description="Analysis result (when completed)"
    )
    error: str | None = Field(default=None, description="Error message (when failed)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "job_id": "abc123def456789012345678901234ab",
                "status": "completed",
                "url": "https://example.com/article",
                "created_at": "2026-01-15T10:30:00Z",
                "completed_at": "2026-01-15T10:30:04Z",
                "result": {
                    "seo": {"total": 72, "totalPoints": 68, "maxPoints": 95, "grade": "C", "gradeLabel": "fair"},
                    "geo": {"total": 54, "totalPoints": 54, "maxPoints": 100, "grade": "D", "gradeLabel": "poor"},
                },
            }
        }
    }


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    timestamp: datetime
    checks: dict[str, bool] = Field(
        default_factory=dict, description="Individual health check results"
    )
