"""Unit tests for the basic page performance check."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from aimapper.config.settings import settings
from aimapper.fetcher.html_fetcher import FetchResult
from aimapper.fetcher.performance import (
    PerformanceGrade,
    build_report,
    bytes_to_kb,
    grade_largest_image,
    grade_page_size,
    grade_request_count,
    grade_response_time,
    head_content_length,
    image_sources,
    largest_image_bytes,
    measure_performance,
    normalize_performance,
)

PUBLIC_IP = "93.184.216.34"


def _head(status_code=200, content_length="1024"):
    response = MagicMock()
    response.status_code = status_code
    response.headers = {"Content-Length": content_length} if content_length is not None else {}
    return response


class TestGrades:
    """Tests for the per-metric thresholds."""

    @pytest.mark.parametrize(
        "ms,expected",
        [
            (0, PerformanceGrade.OPTIMAL),
            (199, PerformanceGrade.OPTIMAL),
            (200, PerformanceGrade.ACCEPTABLE),
            (500, PerformanceGrade.ACCEPTABLE),
            (501, PerformanceGrade.POOR),
        ],
    )
    def test_response_time(self, ms, expected):
        """Under 200 ms is optimal, up to 500 ms acceptable."""
        assert grade_response_time(ms) is expected

    @pytest.mark.parametrize(
        "size,expected",
        [
            (149 * 1024, PerformanceGrade.OPTIMAL),
            (150 * 1024, PerformanceGrade.ACCEPTABLE),
            (500 * 1024, PerformanceGrade.ACCEPTABLE),
            (500 * 1024 + 1, PerformanceGrade.POOR),
        ],
    )
    def test_sizes(self, size, expected):
        """Page and image weights share the 150 KB / 500 KB bands."""
        assert grade_page_size(size) is expected
        assert grade_largest_image(size) is expected

    @pytest.mark.parametrize("count,expected", [(1, "optimal"), (2, "acceptable"), (3, "acceptable"), (4, "poor")])
    def test_request_count(self, count, expected):
        """One request is optimal, up to three acceptable."""
        assert grade_request_count(count).value == expected

    def test_grades_ordered(self):
        """Grades compare worst to best."""
        assert PerformanceGrade.POOR < PerformanceGrade.ACCEPTABLE < PerformanceGrade.OPTIMAL


class TestBuildReport:
    """Tests for scoring a set of measurements."""

    def test_all_optimal(self):
        """Every metric optimal scores 100."""
        report = build_report(120, 40_000, 1, 10_000)
        assert report.performance_score == 100
        assert set(report.grades) == {"responseTime", "pageSize", "numRequests", "largestImage"}

    def test_all_poor(self):
        """Every metric poor scores 0."""
        assert build_report(900, 900_000, 6, 900_000).performance_score == 0

    def test_half_points_round_up(self):
        """Five of eight points is 62.5, shown as 63."""
        report = build_report(340, 200 * 1024, 2, 80 * 1024)
        assert report.performance_score == 63

    def test_to_dict(self):
        """Serialized report uses camelCase keys and grade strings."""
        data = build_report(120, 2048, 1, 0, status_code=203).to_dict()
        assert data == {
            "responseTimeMs": 120,
            "pageSizeBytes": 2048,
            "numRequests": 1,
            "largestImageBytes": 0,
            "performanceScore": 100,
            "grades": {
                "responseTime": "optimal",
                "pageSize": "optimal",
                "numRequests": "optimal",
                "largestImage": "optimal",
            },
            "statusCode": 203,
        }


class TestNormalize:
    """Tests for bytes_to_kb and normalize_performance."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 0), (-5, 0), (None, 0), ("abc", 0), (1536, 1.5), (100 * 1024, 100), (153_700, 150)],
    )
    def test_bytes_to_kb(self, value, expected):
        """Whole KB from 100 KB upward, one decimal below."""
        assert bytes_to_kb(value) == expected

    def test_from_report(self):
        """Report dicts become KB figures with grades kept."""
        data = build_report(250, 300 * 1024, 2, 1536).to_dict()
        normalized = normalize_performance(data)
        assert normalized == {
            "performanceScore": 63,
            "responseTime": 250,
            "pageSizeKB": 300,
            "numRequests": 2,
            "largestImageKB": 1.5,
            "grades": data["grades"],
        }

    def test_alternate_spellings(self):
        """responseTime, pageSizeKB and requests are accepted as given."""
        normalized = normalize_performance({"responseTime": "180", "pageSizeKB": 12.5, "requests": 3})
        assert normalized["responseTime"] == 180
        assert normalized["pageSizeKB"] == 12.5
        assert normalized["numRequests"] == 3
        assert normalized["performanceScore"] is None
        assert normalized["grades"] == {}

    @pytest.mark.parametrize("data", [None, {}, {"grades": {"pageSize": "poor"}}, {"responseTime": "fast"}])
    def test_nothing_usable(self, data):
        """Without a single numeric figure there is nothing to show."""
        assert normalize_performance(data) is None


class TestImageSources:
    """Tests for collecting image URLs from markup."""

    def test_resolved_and_deduplicated(self):
        """Relative sources resolve against the page; repeats and data URIs are dropped."""
        html = """
        <img src="/a.jpg"><img src="https://cdn.example.net/b.png">
        <img src="/a.jpg"><img src="data:image/png;base64,AAAA"><img alt="no src">
        <img src="ftp://example.com/c.gif"><img src="  ">
        """
        assert image_sources(html, "https://example.com/blog/post") == [
            "https://example.com/a.jpg",
            "https://cdn.example.net/b.png",
        ]


class TestHeadContentLength:
    """Tests for sizing one image with a HEAD request."""

    @patch("socket.gethostbyname", return_value=PUBLIC_IP)
    @patch("requests.head")
    def test_declared_size(self, mock_head, mock_dns):
        """Content-Length of a 200 response is the size."""
        mock_head.return_value = _head(content_length="204800")
        assert head_content_length("https://example.com/a.jpg") == 204_800
        assert mock_head.call_args.kwargs["allow_redirects"] is False
        assert mock_head.call_args.kwargs["headers"]["User-Agent"] == settings.fetcher.user_agent

    @pytest.mark.parametrize(
        "response",
        [_head(404), _head(301), _head(content_length=None), _head(content_length="lots")],
    )
    @patch("socket.gethostbyname", return_value=PUBLIC_IP)
    @patch("requests.head")
    def test_unknown_sizes_are_zero(self, mock_head, mock_dns, response):
        """Errors, redirects and missing or bad lengths count as 0."""
        mock_head.return_value = response
        assert head_content_length("https://example.com/a.jpg") == 0

    @patch("socket.gethostbyname", return_value=PUBLIC_IP)
    @patch("requests.head", side_effect=requests.Timeout("slow"))
    def test_transport_error_is_zero(self, mock_head, mock_dns):
        """Timeouts do not fail the check."""
        assert head_content_length("https://example.com/a.jpg") == 0

    @patch("socket.gethostbyname", return_value="10.0.0.5")
    @patch("requests.head")
    def test_private_address_not_requested(self, mock_head, mock_dns):
        """Images on internal hosts are never requested."""
        assert head_content_length("https://intranet.example.com/a.jpg") == 0
        mock_head.assert_not_called()


class TestMeasurePerformance:
    """Tests for measuring a fetched page."""

    @patch("aimapper.fetcher.performance.head_content_length")
    def test_largest_image(self, mock_size):
        """The largest declared size wins."""
        sizes = {"https://example.com/a.jpg": 1000, "https://example.com/b.jpg": 52_000}
        mock_size.side_effect = sizes.get
        html = '<img src="/a.jpg"><img src="/b.jpg">'
        assert largest_image_bytes(html, "https://example.com/") == 52_000

    @patch("aimapper.fetcher.performance.head_content_length", return_value=10)
    def test_image_requests_capped(self, mock_size):
        """At most max_images images are requested."""
        html = "".join(f'<img src="/img{i}.jpg">' for i in range(settings.performance.max_images + 5))
        largest_image_bytes(html, "https://example.com/")
        assert mock_size.call_count == settings.performance.max_images

    def test_no_images(self):
        """Pages without images report 0 without any request."""
        with patch("aimapper.fetcher.performance.head_content_length") as mock_size:
            assert largest_image_bytes("<p>Text only</p>", "https://example.com/") == 0
        mock_size.assert_not_called()

    @patch("aimapper.fetcher.performance.head_content_length", return_value=600 * 1024)
    def test_report_from_fetch(self, mock_size):
        """Timing and redirects come from the fetch; size is the UTF-8 body."""
        page = FetchResult(
            body='<p>Café</p><img src="/hero.jpg">',
            status_code=200,
            final_url="https://example.com/",
            elapsed_ms=180,
            redirects=2,
        )
        report = measure_performance(page)

        assert report.response_time_ms == 180
        assert report.page_size_bytes == len(page.body) + 1
        assert report.num_requests == 3
        assert report.largest_image_bytes == 600 * 1024
        assert report.grades["largestImage"] is PerformanceGrade.POOR
        assert report.performance_score == 63
        mock_size.assert_called_once_with("https://example.com/hero.jpg")
