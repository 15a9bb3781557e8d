"""One-call analysis: metrics, both scores, pillars and recommendations."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from aimapper.fetcher.performance import PerformanceReport, bytes_to_kb, normalize_performance
from aimapper.logging import get_logger
from aimapper.metrics.extractor import extract_metrics
from aimapper.metrics.record import MetricsRecord, SiteSignals
from aimapper.parser.document import text_to_html
from aimapper.recommend.recommendations import build_recommendations, type_specific_findings
from aimapper.report.benchmarks import get_benchmark, summarize_benchmark
from aimapper.report.grading import determine_grade, score_status
from aimapper.scoring.base import ScoreResult
from aimapper.scoring.geo_rules import compute_geo_score
from aimapper.scoring.pillars import Pillar, build_geo_pillars, build_seo_pillars
from aimapper.scoring.seo_rules import compute_seo_score

logger = get_logger(__name__)

InputType = Literal["url", "html", "text"]


def _score_dict(score: ScoreResult) -> dict:
    grade, grade_label = determine_grade(score.total)
    return {**score.to_dict(), "grade": grade, "gradeLabel": grade_label}


def _pillar_dicts(pillars: list[Pillar]) -> list[dict]:
    return [{**pillar.to_dict(), "status": score_status(pillar.score)} for pillar in pillars]


def build_snapshot(
    metrics: MetricsRecord,
    input_type: str,
    url: str = "",
    performance: PerformanceReport | None = None,
) -> str:
    """Short plain-text digest of the analysed input."""
    schema = ", ".join(metrics.schema_types) if metrics.schema_types else "None detected"
    source = f" ({url})" if url else ""
    snapshot = (
        f"Input: {input_type.upper()}{source}\n"
        f"Schema: {schema}\n"
        f"Readability: {metrics.readability_score:.1f}\n"
        f"Sentences: {metrics.sentence_count}, Entities: {metrics.entity_definitions}, Q&A: {metrics.qa_count}"
    )
    if performance is not None:
        snapshot += (
            f"\nPerformance: {performance.performance_score}/100 · "
            f"Response: {performance.response_time_ms}ms · "
            f"Size: {bytes_to_kb(performance.page_size_bytes)} KB · "
            f"Requests: {performance.num_requests}"
        )
    return snapshot


def analyze_document(
    html: str = "",
    url: str = "",
    *,
    site_signals: SiteSignals | None = None,
    status_code: int | None = None,
    content_type: str = "general",
    industry: str | None = None,
    input_type: InputType = "html",
    performance: PerformanceReport | None = None,
    now: datetime | None = None,
) -> dict:
    """Run the full analysis over one HTML document.

    Args:
        html: Page or fragment markup
        url: Page URL, if known
        site_signals: Site-wide facts from the signals collector
        status_code: HTTP status the page was served with
        content_type: Content type used for recommendations and tips
        industry: Industry key for benchmark comparison
        input_type: How the document was supplied, reported in the snapshot
        performance: Page timing and weight from ``measure_performance``
        now: Reference time for freshness checks

    Returns:
        Dict with metrics, seo, geo, pillars, recommendations, type-specific
        findings, benchmark comparison, site signals, performance and a
        snapshot, all JSON-ready. Site signals and performance are None
        when not supplied.
    """
    metrics = extract_metrics(
        html,
        url,
        site_signals=site_signals,
        status_code=status_code,
        now=now,
    )
    seo = compute_seo_score(metrics, html)
    geo = compute_geo_score(metrics, html)
    recommendations = build_recommendations(metrics, {"contentType": content_type})

    benchmark = None
    industry_benchmark = get_benchmark(industry)
    if industry_benchmark is not None:
        benchmark = {
            "industry": industry_benchmark.name,
            "seo": summarize_benchmark(seo.total, industry_benchmark.seo),
            "geo": summarize_benchmark(geo.total, industry_benchmark.geo),
        }

    performance_dict = performance.to_dict() if performance is not None else None

    logger.info(
        "analysis_completed",
        url=url or None,
        input_type=input_type,
        seo_score=seo.total,
        geo_score=geo.total,
    )

    return {
        "url": url,
        "meta": {
            "title": metrics.title,
            "inputType": input_type,
            "contentType": content_type,
            "industry": industry,
        },
        "metrics": metrics.to_dict(),
        "seo": _score_dict(seo),
        "geo": _score_dict(geo),
        "seoPillars": _pillar_dicts(build_seo_pillars(seo)),
        "geoPillars": _pillar_dicts(build_geo_pillars(geo)),
        "recommendations": {
            key: [item.to_dict() for item in items]
            for key, items in recommendations.items()
        },
        "typeFindings": type_specific_findings(content_type, metrics),
        "benchmark": benchmark,
        "siteSignals": site_signals.to_dict() if site_signals is not None else None,
        "performance": performance_dict,
        "performanceNormalized": normalize_performance(performance_dict),
        "snapshot": build_snapshot(metrics, input_type, url, performance),
    }


def analyze_text(text: str, **options) -> dict:
    """Analyse plain text; blank lines separate paragraphs."""
    options.setdefault("input_type", "text")
    return analyze_document(text_to_html(text), **options)
