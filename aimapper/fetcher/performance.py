"""Basic page performance: response time, page weight, requests and images."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urljoin, urlparse

import requests

from aimapper.config.settings import settings
from aimapper.fetcher.html_fetcher import FetchResult, _resolve_and_validate_url
from aimapper.logging import get_logger
from aimapper.metrics.record import QualityLevel
from aimapper.parser.document import parse_html
from aimapper.parser.text import round_half_up

logger = get_logger(__name__)


class PerformanceGrade(QualityLevel):
    POOR = "poor"
    ACCEPTABLE = "acceptable"
    OPTIMAL = "optimal"


GRADE_POINTS = {
    PerformanceGrade.OPTIMAL: 2,
    PerformanceGrade.ACCEPTABLE: 1,
    PerformanceGrade.POOR: 0,
}


def grade_response_time(ms: int) -> PerformanceGrade:
    if ms < 200:
        return PerformanceGrade.OPTIMAL
    if ms <= 500:
        return PerformanceGrade.ACCEPTABLE
    return PerformanceGrade.POOR


def _grade_kilobytes(size_bytes: int) -> PerformanceGrade:
    kilobytes = size_bytes / 1024
    if kilobytes < 150:
        return PerformanceGrade.OPTIMAL
    if kilobytes <= 500:
        return PerformanceGrade.ACCEPTABLE
    return PerformanceGrade.POOR


def grade_page_size(size_bytes: int) -> PerformanceGrade:
    return _grade_kilobytes(size_bytes)


def grade_largest_image(size_bytes: int) -> PerformanceGrade:
    return _grade_kilobytes(size_bytes)


def grade_request_count(count: int) -> PerformanceGrade:
    if count <= 1:
        return PerformanceGrade.OPTIMAL
    if count <= 3:
        return PerformanceGrade.ACCEPTABLE
    return PerformanceGrade.POOR


def bytes_to_kb(size_bytes: Any) -> float:
    """Kilobytes for display: whole numbers from 100 KB, one decimal below."""
    try:
        numeric = float(size_bytes)
    except (TypeError, ValueError):
        return 0
    if numeric != numeric or numeric <= 0:
        return 0
    kilobytes = numeric / 1024
    return int(round_half_up(kilobytes)) if kilobytes >= 100 else round_half_up(kilobytes, 1)


@dataclass
class PerformanceReport:
    """Measurements of one page fetch and the grade of each.

    Attributes:
        response_time_ms: Time to fetch the page, redirects and body included
        page_size_bytes: UTF-8 size of the decoded HTML
        num_requests: The page request plus one per redirect hop
        largest_image_bytes: Largest Content-Length among the page's images
        status_code: HTTP status of the final response
        grades: Grade per measurement, keyed by camelCase metric name
        performance_score: 0-100, two points per optimal and one per acceptable grade
    """
    response_time_ms: int
    page_size_bytes: int
    num_requests: int
    largest_image_bytes: int
    status_code: int
    grades: dict[str, PerformanceGrade] = field(default_factory=dict)
    performance_score: int = 0

    def to_dict(self) -> dict:
        return {
            "responseTimeMs": self.response_time_ms,
            "pageSizeBytes": self.page_size_bytes,
            "numRequests": self.num_requests,
            "largestImageBytes": self.largest_image_bytes,
            "performanceScore": self.performance_score,
            "grades": {name: grade.value for name, grade in self.grades.items()},
            "statusCode": self.status_code,
        }


def build_report(
    response_time_ms: int,
    page_size_bytes: int,
    num_requests: int,
    largest_image_bytes: int,
    status_code: int = 200,
) -> PerformanceReport:
    """Grade raw measurements and score them out of 100."""
    grades = {
        "responseTime": grade_response_time(response_time_ms),
        "pageSize": grade_page_size(page_size_bytes),
        "numRequests": grade_request_count(num_requests),
        "largestImage": grade_largest_image(largest_image_bytes),
    }
    points = sum(GRADE_POINTS[grade] for grade in grades.values())
    max_points = len(grades) * GRADE_POINTS[PerformanceGrade.OPTIMAL]
    return PerformanceReport(
        response_time_ms=response_time_ms,
        page_size_bytes=page_size_bytes,
        num_requests=num_requests,
        largest_image_bytes=largest_image_bytes,
        status_code=status_code,
        grades=grades,
        performance_score=int(round_half_up(points / max_points * 100)),
    )


def image_sources(html: str, base_url: str) -> list[str]:
    """Absolute http(s) URLs of ``<img src>`` in document order, without duplicates."""
    sources: list[str] = []
    for img in parse_html(html).find_all("img", src=True):
        src = img["src"].strip()
        if not src or src.lower().startswith("data:"):
            continue
        resolved = urljoin(base_url, src)
        if urlparse(resolved).scheme in {"http", "https"} and resolved not in sources:
            sources.append(resolved)
    return sources


def head_content_length(url: str) -> int:
    """Declared size of one image; anything unknown or unreachable counts as 0."""
    error_msg = _resolve_and_validate_url(url)
    if error_msg:
        logger.debug("image_head_skipped", url=url, reason=error_msg)
        return 0
    try:
        response = requests.head(
            url,
            timeout=settings.performance.head_timeout,
            allow_redirects=False,
            headers={"User-Agent": settings.fetcher.user_agent},
        )
    except requests.RequestException as e:
        logger.debug("image_head_failed", url=url, error=str(e))
        return 0
    if response.status_code >= 300:
        return 0
    content_length = response.headers.get("Content-Length", "")
    return int(content_length) if content_length.isdigit() else 0


def largest_image_bytes(html: str, base_url: str) -> int:
    """HEAD each image concurrently and return the largest declared size."""
    sources = image_sources(html, base_url)[: settings.performance.max_images]
    if not sources:
        return 0
    with ThreadPoolExecutor(max_workers=settings.performance.max_workers) as executor:
        sizes = list(executor.map(head_content_length, sources))
    return max(sizes)


def measure_performance(page: FetchResult) -> PerformanceReport:
    """Grade a fetched page; image sizes are looked up with HEAD requests."""
    report = build_report(
        response_time_ms=page.elapsed_ms,
        page_size_bytes=len(page.body.encode("utf-8")),
        num_requests=1 + page.redirects,
        largest_image_bytes=largest_image_bytes(page.body, page.final_url),
        status_code=page.status_code,
    )
    logger.info(
        "performance_measured",
        url=page.final_url,
        score=report.performance_score,
        response_time_ms=report.response_time_ms,
    )
    return report


def _to_number(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def normalize_performance(data: Mapping[str, Any] | None) -> dict | None:
    """Display-ready view of a performance dict, sizes in KB.

    Accepts ``PerformanceReport.to_dict()`` output or caller-supplied figures
    (``responseTime``/``pageSizeKB``/``requests`` spellings included). Returns
    None when no figure is usable.
    """
    if not data:
        return None

    def first(*keys: str) -> Any:
        for key in keys:
            if data.get(key) not in (None, ""):
                return data[key]
        return None

    page_kb = first("pageSizeKB")
    if page_kb is None and "pageSizeBytes" in data:
        page_kb = bytes_to_kb(data["pageSizeBytes"])
    image_kb = first("largestImageKB")
    if image_kb is None and "largestImageBytes" in data:
        image_kb = bytes_to_kb(data["largestImageBytes"])

    normalized = {
        "performanceScore": _to_number(data.get("performanceScore")),
        "responseTime": _to_number(first("responseTime", "responseTimeMs")),
        "pageSizeKB": _to_number(page_kb),
        "numRequests": _to_number(first("numRequests", "requests")),
        "largestImageKB": _to_number(image_kb),
        "grades": dict(data.get("grades") or {}),
    }
    if all(value is None for key, value in normalized.items() if key != "grades"):
        return None
    return normalized
