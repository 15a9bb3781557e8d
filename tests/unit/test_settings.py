"""Unit tests for settings and environment overrides."""
from __future__ import annotations

from aimapper.config.settings import Settings


class TestSettings:
    """Tests for Settings defaults and env overrides."""

    def test_defaults(self, monkeypatch):
        """Defaults apply when no env vars are set."""
        for name in ("AI_MAPPER_DEBUG", "AI_MAPPER_LOG_LEVEL", "AI_MAPPER_ANALYSIS_QUOTA", "AI_MAPPER_CORS_ORIGINS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.scoring.grade_a_threshold == 90
        assert settings.scoring.freshness_window_days == 90
        assert settings.signals.sitemap_recent_days == 60
        assert settings.api.cors_origins == ["*"]

    def test_debug_lowers_log_level(self, monkeypatch):
        """Debug mode defaults the log level to DEBUG."""
        monkeypatch.setenv("AI_MAPPER_DEBUG", "true")
        monkeypatch.delenv("AI_MAPPER_LOG_LEVEL", raising=False)
        assert Settings().log_level == "DEBUG"

    def test_overrides(self, monkeypatch):
        """Numeric and list overrides are parsed."""
        monkeypatch.setenv("AI_MAPPER_ANALYSIS_QUOTA", "3")
        monkeypatch.setenv("AI_MAPPER_FRESHNESS_DAYS", "30")
        monkeypatch.setenv("AI_MAPPER_CORS_ORIGINS", "https://a.example, https://b.example")
        settings = Settings()
        assert settings.api.analysis_quota == 3
        assert settings.scoring.freshness_window_days == 30
        assert settings.api.cors_origins == ["https://a.example", "https://b.example"]

    def test_performance_overrides(self, monkeypatch):
        """The performance check can be switched off and its HEAD timeout tuned."""
        monkeypatch.delenv("AI_MAPPER_PERFORMANCE", raising=False)
        monkeypatch.delenv("AI_MAPPER_PERFORMANCE_HEAD_TIMEOUT", raising=False)
        defaults = Settings()
        assert defaults.performance.enabled is True
        assert defaults.performance.max_images == 20

        monkeypatch.setenv("AI_MAPPER_PERFORMANCE", "false")
        monkeypatch.setenv("AI_MAPPER_PERFORMANCE_HEAD_TIMEOUT", "3")
        settings = Settings()
        assert settings.performance.enabled is False
        assert settings.performance.head_timeout == 3
