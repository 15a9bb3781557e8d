"""Centralized configuration settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class FetcherSettings:
    """Settings for the page fetcher."""
    request_timeout: int = 15
    max_response_size: int = 10 * 1024 * 1024  # 10 MB
    max_redirects: int = 5
    user_agent: str = "AI-Mapper/1.0 (+https://example.com)"


@dataclass
class SignalSettings:
    """Settings for site-level signal collection (robots.txt, llms.txt, sitemap)."""
    request_timeout: int = 7
    max_redirects: int = 3
    max_workers: int = 3
    sitemap_recent_days: int = 60


@dataclass
class PerformanceSettings:
    """Settings for the basic page performance check."""
    enabled: bool = True
    head_timeout: int = 7
    max_images: int = 20
    max_workers: int = 4


@dataclass
class ScoringSettings:
    """Thresholds shared by the metrics extractor and the report layer."""
    # Freshness
    freshness_window_days: int = 90

    # Entity architecture
    internal_link_target: int = 3
    natural_anchor_threshold: float = 0.7
    clean_url_max_segments: int = 5

    # Safety
    vague_statement_threshold: float = 0.15
    redundancy_threshold: float = 0.8

    # Content clarity
    chunked_paragraph_max_words: int = 120

    # Server-side rendering heuristic
    ssr_min_words: int = 50

    # Grade thresholds
    grade_a_threshold: int = 90
    grade_b_threshold: int = 75
    grade_c_threshold: int = 60
    grade_d_threshold: int = 40

    # Pillar status thresholds
    status_strong_threshold: int = 80
    status_watch_threshold: int = 60


@dataclass
class APISettings:
    """API-specific settings."""
    # Analysis quota (requests per window, per client)
    analysis_quota: int = 10
    quota_window: int = 60  # seconds
    max_clients: int = 10000

    # Background jobs for URL analysis
    job_max_workers: int = 3
    job_retention_hours: int = 24

    # Raw HTML/text payload limit
    max_content_length: int = 2 * 1024 * 1024

    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class Settings:
    """Main application settings container."""
    fetcher: FetcherSettings = field(default_factory=FetcherSettings)
    signals: SignalSettings = field(default_factory=SignalSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)
    scoring: ScoringSettings = field(default_factory=ScoringSettings)
    api: APISettings = field(default_factory=APISettings)

    # Application settings
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self):
        """Load settings from environment variables."""
        self.debug = os.environ.get("AI_MAPPER_DEBUG", "").lower() in ("true", "1", "yes")
        self.log_level = os.environ.get("AI_MAPPER_LOG_LEVEL", "DEBUG" if self.debug else self.log_level)
        self.log_json = os.environ.get("AI_MAPPER_LOG_JSON", "").lower() in ("true", "1", "yes")

        # Fetcher overrides
        if timeout := os.environ.get("AI_MAPPER_REQUEST_TIMEOUT"):
            self.fetcher.request_timeout = int(timeout)
        if user_agent := os.environ.get("AI_MAPPER_USER_AGENT"):
            self.fetcher.user_agent = user_agent

        # Signal collection overrides
        if signal_timeout := os.environ.get("AI_MAPPER_SIGNAL_TIMEOUT"):
            self.signals.request_timeout = int(signal_timeout)

        # Performance overrides
        if perf := os.environ.get("AI_MAPPER_PERFORMANCE"):
            self.performance.enabled = perf.lower() not in ("false", "0", "no")
        if head_timeout := os.environ.get("AI_MAPPER_PERFORMANCE_HEAD_TIMEOUT"):
            self.performance.head_timeout = int(head_timeout)

        # Scoring overrides
        if window := os.environ.get("AI_MAPPER_FRESHNESS_DAYS"):
            self.scoring.freshness_window_days = int(window)

        # API overrides
        if quota := os.environ.get("AI_MAPPER_ANALYSIS_QUOTA"):
            self.api.analysis_quota = int(quota)
        if job_workers := os.environ.get("AI_MAPPER_JOB_WORKERS"):
            self.api.job_max_workers = int(job_workers)
        if retention := os.environ.get("AI_MAPPER_JOB_RETENTION_HOURS"):
            self.api.job_retention_hours = int(retention)
        if cors := os.environ.get("AI_MAPPER_CORS_ORIGINS"):
            self.api.cors_origins = [o.strip() for o in cors.split(",")]


# Global settings instance
settings = Settings()
