"""SEO rule table (95 points across technical, content and readability)."""
from __future__ import annotations

from aimapper.metrics.record import HeadingQuality, MetricsRecord
from aimapper.scoring.base import Rule, ScoreResult
from aimapper.scoring.registry import RuleTable


# Technical

def _title_length(metrics: MetricsRecord, html: str) -> int:
    length = metrics.title_length
    if 45 <= length <= 60:
        return 8
    if 30 <= length < 45 or 60 < length <= 70:
        return 4
    return 0


def _meta_description(metrics: MetricsRecord, html: str) -> int:
    return 6 if metrics.meta_description_present else 0


def _h1_usage(metrics: MetricsRecord, html: str) -> int:
    return 6 if metrics.h1_count == 1 else 0


def _canonical(metrics: MetricsRecord, html: str) -> int:
    return 5 if metrics.canonical_present else 0


def _word_count(metrics: MetricsRecord, html: str) -> int:
    if metrics.word_count > 900:
        return 5
    if metrics.word_count >= 300:
        return 3
    return 0


# Content

def _keyword_intro(metrics: MetricsRecord, html: str) -> int:
    return 8 if metrics.keyword_in_intro else 0


def _heading_structure(metrics: MetricsRecord, html: str) -> int:
    return {
        HeadingQuality.STRONG: 6,
        HeadingQuality.MINOR: 3,
    }.get(metrics.heading_structure_quality, 0)


def _internal_links(metrics: MetricsRecord, html: str) -> int:
    if metrics.internal_link_count >= 3:
        return 5
    if metrics.internal_link_count >= 1:
        return 3
    return 0


def _alt_coverage(metrics: MetricsRecord, html: str) -> int:
    if metrics.alt_coverage > 0.8:
        return 5
    if metrics.alt_coverage >= 0.3:
        return 3
    return 0


def _schema_presence(metrics: MetricsRecord, html: str) -> int:
    return 6 if metrics.schema_types else 0


def _keyword_density(metrics: MetricsRecord, html: str) -> int:
    density = metrics.keyword_density
    if 1 <= density <= 2:
        return 5
    if density < 1:
        return 2
    if density > 2.5:
        return 0
    return 4


# Readability

def _sentence_length(metrics: MetricsRecord, html: str) -> int:
    if metrics.avg_sentence_length < 20:
        return 10
    if metrics.avg_sentence_length <= 25:
        return 5
    return 0


def _paragraph_length(metrics: MetricsRecord, html: str) -> int:
    if metrics.avg_paragraph_length < 120:
        return 10
    if metrics.avg_paragraph_length <= 180:
        return 5
    return 0


def _list_presence(metrics: MetricsRecord, html: str) -> int:
    return 10 if metrics.list_count > 0 else 0


SEO_RULES: tuple[Rule, ...] = (
    Rule("titleLength", "Title length", "technical", 8, _title_length),
    Rule("metaDescription", "Meta description", "technical", 6, _meta_description),
    Rule("h1Usage", "H1 tag usage", "technical", 6, _h1_usage),
    Rule("canonical", "Canonical tag", "technical", 5, _canonical),
    Rule("wordCount", "Word count", "technical", 5, _word_count),
    Rule("keywordIntro", "Keyword in intro", "content", 8, _keyword_intro),
    Rule("headingStructure", "Heading structure quality", "content", 6, _heading_structure),
    Rule("internalLinks", "Internal links", "content", 5, _internal_links),
    Rule("altCoverage", "Alt text coverage", "content", 5, _alt_coverage),
    Rule("schemaPresence", "Schema presence", "content", 6, _schema_presence),
    Rule("keywordDensity", "Topical coverage", "content", 5, _keyword_density),
    Rule("sentenceLength", "Average sentence length", "readability", 10, _sentence_length),
    Rule("paragraphLength", "Paragraph length", "readability", 10, _paragraph_length),
    Rule("listPresence", "Bullets or lists", "readability", 10, _list_presence),
)

seo_table = RuleTable("seo", list(SEO_RULES))


def compute_seo_score(metrics: MetricsRecord, html: str = "") -> ScoreResult:
    """Score a metrics record against the SEO table."""
    return seo_table.score(metrics, html)
