"""API request models."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from aimapper.config.settings import settings
from aimapper.metrics.record import SiteSignals
from aimapper.recommend.recommendations import CONTENT_TYPES
from aimapper.report.benchmarks import INDUSTRY_BENCHMARKS


class SiteSignalsModel(BaseModel):
    """Site-level signals collected by the caller."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    llms_txt_present: bool = False
    robots_allows_all: bool | None = None
    index_now_endpoint_ok: bool = False
    sitemap_lastmod_recent: bool | None = None
    bingbot_allowed: bool | None = None
    bingbot_disallow: list[str] = Field(default_factory=list)

    def to_signals(self) -> SiteSignals:
        return SiteSignals(**self.model_dump())


class AnalyzeRequest(BaseModel):
    """Request body for analysis.

    Exactly one of ``html``, ``text`` or ``url`` must be given. HTML and text
    are scored inline; a URL is fetched and scored by a background job.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "html": "<html><head><title>Widgets</title></head><body><h1>Widgets</h1>"
                        "<p>A widget is a small tool.</p></body></html>",
                "url": None,
                "contentType": "blogArticle",
                "industry": "technology",
            }
        },
    )

    html: str | None = Field(default=None, description="Raw HTML page or fragment")
    text: str | None = Field(default=None, description="Plain text; blank lines separate paragraphs")
    url: str | None = Field(default=None, description="Page URL to fetch and analyze")
    base_url: str = Field(default="", description="Base URL for link checks when sending HTML")
    content_type: str = Field(default="general", description="Content type for tips")
    industry: str | None = Field(default=None, description="Industry key for benchmarks")
    site_signals: SiteSignalsModel | None = Field(default=None, description="Site-level signals for HTML input")
    status_code: int | None = Field(default=None, ge=100, le=599, description="HTTP status for HTML input")

    @field_validator("html", "text")
    @classmethod
    def validate_size(cls, v: str | None) -> str | None:
        """Reject payloads above the configured size."""
        if v is not None and len(v) > settings.api.max_content_length:
            raise ValueError(f"Content exceeds {settings.api.max_content_length} characters")
        return v

    @field_validator("content_type")
    @classmethod
    def validate_content_type(cls, v: str) -> str:
        if v not in CONTENT_TYPES:
            raise ValueError(f"Unknown content type '{v}'. Use one of: {', '.join(CONTENT_TYPES)}")
        return v

    @field_validator("industry")
    @classmethod
    def validate_industry(cls, v: str | None) -> str | None:
        if v is not None and v not in INDUSTRY_BENCHMARKS:
            raise ValueError(f"Unknown industry '{v}'")
        return v

    @model_validator(mode="after")
    def validate_single_source(self) -> AnalyzeRequest:
        """Ensure exactly one input is supplied."""
        supplied = [name for name in ("html", "text", "url") if getattr(self, name)]
        if len(supplied) != 1:
            raise ValueError("Provide exactly one of html, text or url")
        return self
