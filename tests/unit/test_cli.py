"""Unit tests for the command line interface."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from aimapper.cli.run import app
from aimapper.config.settings import settings
from aimapper.fetcher.html_fetcher import FetchResult
from aimapper.fetcher.performance import build_report
from aimapper.metrics.record import SiteSignals

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Leave logging handlers to pytest."""
    with patch("aimapper.cli.run.setup_logging"):
        yield


def _expected_exit(results: dict) -> int:
    failing = {"D", "F"}
    return 1 if results["seo"]["grade"] in failing or results["geo"]["grade"] in failing else 0


class TestRunCommand:
    """Tests for `ai-mapper run`."""

    def test_html_file_json(self, tmp_path, article_html):
        """HTML files are scored and printed as JSON."""
        page = tmp_path / "page.html"
        page.write_text(article_html, encoding="utf-8")

        result = runner.invoke(app, ["run", str(page), "--input", "html", "-o", "json"])

        data = json.loads(result.stdout)
        assert data["meta"]["inputType"] == "html"
        assert result.exit_code == _expected_exit(data)

    def test_text_from_stdin(self):
        """'-' reads plain text from stdin."""
        result = runner.invoke(
            app,
            ["run", "-", "--input", "text", "-o", "json", "-t", "blogArticle"],
            input="Mulch is a protective layer. It keeps soil moist.\n\nApply it in spring.",
        )

        data = json.loads(result.stdout)
        assert data["meta"]["inputType"] == "text"
        assert data["meta"]["contentType"] == "blogArticle"

    def test_save_report(self, tmp_path, minimal_html):
        """--save writes the report to disk."""
        page = tmp_path / "page.html"
        page.write_text(minimal_html, encoding="utf-8")
        out = tmp_path / "report.md"

        runner.invoke(app, ["run", str(page), "-i", "html", "-o", "markdown", "-s", str(out)])

        assert out.read_text(encoding="utf-8").startswith("# AI Mapper Report")

    def test_url_input(self, article_html, mock_url):
        """URL input fetches the page, collects site signals and measures performance."""
        page = FetchResult(article_html, 200, mock_url, "text/html", elapsed_ms=120)
        report = build_report(120, len(article_html), 1, 0)
        with patch("aimapper.cli.run.fetch_page", return_value=page) as mock_fetch, \
                patch("aimapper.cli.run.collect_site_signals", return_value=SiteSignals(llms_txt_present=True)), \
                patch("aimapper.cli.run.measure_performance", return_value=report) as mock_measure:
            result = runner.invoke(app, ["run", mock_url, "-o", "json"])

        mock_fetch.assert_called_once_with(mock_url)
        mock_measure.assert_called_once_with(page)
        data = json.loads(result.stdout)
        assert data["url"] == mock_url
        assert data["geo"]["breakdown"]["llmsTxt"]["passed"] is True
        assert data["performance"]["performanceScore"] == 100
        assert "Performance: 100/100" in data["snapshot"]

    def test_url_input_performance_disabled(self, article_html, mock_url):
        """With the performance check switched off no HEAD requests are made."""
        page = FetchResult(article_html, 200, mock_url, "text/html")
        with patch.object(settings.performance, "enabled", False), \
                patch("aimapper.cli.run.fetch_page", return_value=page), \
                patch("aimapper.cli.run.collect_site_signals", return_value=SiteSignals()), \
                patch("aimapper.cli.run.measure_performance") as mock_measure:
            result = runner.invoke(app, ["run", mock_url, "-o", "json"])

        mock_measure.assert_not_called()
        data = json.loads(result.stdout)
        assert data["performance"] is None
        assert data["performanceNormalized"] is None

    def test_missing_file(self, tmp_path):
        """A missing file exits with an error."""
        result = runner.invoke(app, ["run", str(tmp_path / "nope.html"), "-i", "html"])
        assert result.exit_code == 1
        assert "File not found" in result.stdout

    @pytest.mark.parametrize(
        "args,message",
        [
            (["--input", "pdf"], "Invalid input type"),
            (["--content-type", "poem"], "Invalid content type"),
            (["--industry", "space"], "Unknown industry"),
            (["--output", "xml"], "Invalid output format"),
        ],
    )
    def test_invalid_options(self, args, message):
        """Bad option values exit 1 before any work."""
        with patch("aimapper.cli.run.fetch_page") as mock_fetch:
            result = runner.invoke(app, ["run", "https://example.com", *args])
        assert result.exit_code == 1
        assert message in result.stdout
        mock_fetch.assert_not_called()

    def test_fetch_failure(self):
        """Fetch errors exit 1 with the message."""
        with patch("aimapper.cli.run.fetch_page", side_effect=RuntimeError("Unable to fetch URL (503)")):
            result = runner.invoke(app, ["run", "https://example.com", "-o", "json"])
        assert result.exit_code == 1
        assert "Unable to fetch URL (503)" in result.stdout


class TestOtherCommands:
    """Tests for `check` and `version`."""

    def test_version(self):
        """Version prints the product name."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "AI Mapper" in result.stdout

    def test_check(self, article_html, mock_url):
        """check prints both grades on one line."""
        page = FetchResult(article_html, 200, mock_url)
        with patch("aimapper.cli.run.fetch_page", return_value=page), \
                patch("aimapper.cli.run.collect_site_signals", return_value=SiteSignals()):
            result = runner.invoke(app, ["check", mock_url])

        assert "SEO" in result.stdout
        assert "GEO" in result.stdout
        assert result.exit_code in (0, 1)

    def test_serve(self):
        """serve hands the API app to uvicorn."""
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "9001"])

        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.args == ("app.main:app",)
        assert mock_run.call_args.kwargs["port"] == 9001
