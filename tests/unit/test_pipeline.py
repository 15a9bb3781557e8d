"""Unit tests for the analysis pipeline and report formatting."""
from __future__ import annotations

import json

import pytest

from aimapper.fetcher.performance import build_report
from aimapper.metrics.record import SiteSignals
from aimapper.pipeline import analyze_document, analyze_text
from aimapper.report.formatter import bingbot_status, format_report


@pytest.fixture
def results(article_html, mock_url, fixed_now) -> dict:
    return analyze_document(
        article_html,
        mock_url,
        site_signals=SiteSignals(llms_txt_present=True, robots_allows_all=True),
        status_code=200,
        content_type="blogArticle",
        industry="technology",
        input_type="url",
        now=fixed_now,
    )


class TestAnalyzeDocument:
    """Tests for analyze_document."""

    def test_result_keys(self, results):
        """The result carries every section."""
        assert set(results) == {
            "url", "meta", "metrics", "seo", "geo", "seoPillars", "geoPillars",
            "recommendations", "typeFindings", "benchmark", "siteSignals",
            "performance", "performanceNormalized", "snapshot",
        }
        assert results["meta"]["title"].startswith("Solar Panels Explained")
        assert results["meta"]["contentType"] == "blogArticle"

    def test_scores_graded(self, results):
        """Both scores carry a grade and stay in range."""
        for key in ("seo", "geo"):
            score = results[key]
            assert 0 <= score["total"] <= 100
            assert score["grade"] in {"A", "B", "C", "D", "F"}
            assert score["gradeLabel"]

    def test_site_signals_scored(self, results):
        """Supplied site signals earn their GEO points."""
        breakdown = results["geo"]["breakdown"]
        assert breakdown["llmsTxt"]["passed"] is True
        assert breakdown["robotsAccess"]["passed"] is True
        assert breakdown["statusOk"]["passed"] is True
        assert breakdown["indexNow"]["points"] == 0

    def test_pillars_have_status(self, results):
        """Pillars carry a Strong/Watch/Risk status."""
        assert len(results["seoPillars"]) == 3
        assert len(results["geoPillars"]) == 7
        assert {p["status"] for p in results["geoPillars"]} <= {"Strong", "Watch", "Risk"}

    def test_benchmark_and_tips(self, results):
        """Industry and content type add benchmark and tips."""
        assert results["benchmark"]["industry"] == "Technology"
        assert results["benchmark"]["seo"]["average"] == 82
        assert results["typeFindings"]
        assert 1 <= len(results["recommendations"]["combined"]) <= 10

    def test_json_ready(self, results):
        """The whole result serializes to JSON."""
        assert json.loads(json.dumps(results)) == results

    def test_no_industry(self, minimal_html):
        """Without an industry there is no benchmark."""
        assert analyze_document(minimal_html)["benchmark"] is None

    def test_snapshot(self, results, mock_url):
        """Snapshot lists input type, schema and counts."""
        snapshot = results["snapshot"]
        assert snapshot.startswith(f"Input: URL ({mock_url})")
        assert "Schema: Article" in snapshot


class TestAnalyzeText:
    """Tests for plain-text input."""

    def test_paragraphs_from_blank_lines(self):
        """Blank-line blocks become paragraphs."""
        text = "Compost is a soil amendment. It feeds plants.\n\nTurn the pile every week."
        results = analyze_text(text)
        assert results["meta"]["inputType"] == "text"
        assert results["metrics"]["wordCount"] == 13
        assert results["metrics"]["avgParagraphLength"] == pytest.approx(6.5)
        assert results["snapshot"].startswith("Input: TEXT")

    def test_markup_is_text(self):
        """Angle brackets in text input are not parsed as tags."""
        results = analyze_text("Use <h1> once per page.")
        assert results["metrics"]["h1Count"] == 0


class TestFormatReport:
    """Tests for output formats."""

    def test_json(self, results):
        """JSON output round-trips."""
        assert json.loads(format_report(results, "json"))["seo"]["total"] == results["seo"]["total"]

    def test_markdown(self, results):
        """Markdown has scores, pillars and breakdown tables."""
        report = format_report(results, "markdown")
        assert report.startswith("# AI Mapper Report")
        assert "## Scores" in report
        assert "## GEO Pillars" in report
        assert "| Title length | technical |" in report
        assert "## Recommendations" in report

    def test_cli(self, results):
        """CLI output uses Rich markup."""
        report = format_report(results, "cli")
        assert "[bold cyan]AI Mapper Report[/bold cyan]" in report
        assert "SEO Score:" in report
        assert "Benchmark (Technology)" in report


class TestPerformanceAndBing:
    """Tests for performance figures and Bing robots status in results."""

    @pytest.fixture
    def report(self):
        return build_report(
            response_time_ms=340,
            page_size_bytes=200 * 1024,
            num_requests=2,
            largest_image_bytes=80 * 1024,
        )

    def test_performance_surfaced(self, article_html, mock_url, report):
        """Raw and display-ready figures are both returned."""
        results = analyze_document(article_html, mock_url, input_type="url", performance=report)
        assert results["performance"]["performanceScore"] == 63
        assert results["performance"]["grades"]["responseTime"] == "acceptable"
        assert results["performanceNormalized"]["pageSizeKB"] == 200
        assert results["performanceNormalized"]["largestImageKB"] == 80

    def test_performance_snapshot_line(self, article_html, mock_url, report):
        """The snapshot gains a performance line after the counts."""
        snapshot = analyze_document(article_html, mock_url, performance=report)["snapshot"]
        assert snapshot.splitlines()[-1] == (
            "Performance: 63/100 · Response: 340ms · Size: 200 KB · Requests: 2"
        )

    def test_no_performance_line_without_report(self, results):
        """Without a report the snapshot keeps four lines."""
        assert len(results["snapshot"].splitlines()) == 4
        assert results["performance"] is None
        assert results["performanceNormalized"] is None

    def test_bing_signals_surfaced(self, minimal_html):
        """Bing crawl status travels with the site signals."""
        signals = SiteSignals(bingbot_allowed=True, bingbot_disallow=["/drafts"])
        results = analyze_document(minimal_html, site_signals=signals)
        assert results["siteSignals"]["bingbotAllowed"] is True
        assert results["siteSignals"]["bingbotDisallow"] == ["/drafts"]

    def test_markdown_sections(self, article_html, mock_url, report):
        """Markdown lists site signals and a performance table."""
        signals = SiteSignals(llms_txt_present=True, bingbot_allowed=False, bingbot_disallow=["/"])
        results = analyze_document(article_html, mock_url, site_signals=signals, performance=report)
        markdown = format_report(results, "markdown")
        assert "- Bingbot in robots.txt: Blocked" in markdown
        assert "- llms.txt: Detected" in markdown
        assert "| Page size | 200 KB | acceptable |" in markdown
        assert "**Score:** 63/100" in markdown

    @pytest.mark.parametrize(
        "signals,expected",
        [
            (None, "Unknown"),
            ({"bingbotAllowed": None}, "Unknown"),
            ({"bingbotAllowed": False, "bingbotDisallow": ["/"]}, "Blocked"),
            ({"bingbotAllowed": True, "bingbotDisallow": []}, "Allowed"),
            ({"bingbotAllowed": True, "bingbotDisallow": ["/a", "/b"]}, "Allowed · Disallowed: /a, /b"),
        ],
    )
    def test_bingbot_status(self, signals, expected):
        """Bing status reads as unknown, blocked or allowed with exceptions."""
        assert bingbot_status(signals) == expected
