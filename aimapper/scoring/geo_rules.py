"""GEO rule table (100 points across seven categories).

Signal-backed rules award their cap only when the signal is ``True``;
unknown (``None``) signals earn nothing.
"""
from __future__ import annotations

from aimapper.metrics.record import (
    DefinitionClarity,
    MetricsRecord,
    QACoverage,
    SectionAlignment,
    SnippetFormatting,
    SummaryQuality,
)
from aimapper.scoring.base import Evaluator, Rule, ScoreResult
from aimapper.scoring.registry import RuleTable


def signal_rule(category: str, signal: str, points: int) -> Evaluator:
    """Evaluator awarding ``points`` when a GEO signal is exactly ``True``."""
    def evaluate(metrics: MetricsRecord, html: str) -> int:
        return points if metrics.signal(category, signal) is True else 0
    evaluate.__name__ = f"_{signal}"
    return evaluate


def _answer_intro(metrics: MetricsRecord, html: str) -> int:
    return {SummaryQuality.STRONG: 5, SummaryQuality.PARTIAL: 3}.get(metrics.summary_quality, 0)


def _definition_clarity(metrics: MetricsRecord, html: str) -> int:
    return {DefinitionClarity.CLEAR: 3, DefinitionClarity.PARTIAL: 2}.get(metrics.definition_clarity, 0)


def _snippet_formatting(metrics: MetricsRecord, html: str) -> int:
    return {SnippetFormatting.STRONG: 3, SnippetFormatting.PARTIAL: 2}.get(metrics.snippet_formatting, 0)


def _qa_structure(metrics: MetricsRecord, html: str) -> int:
    return {QACoverage.MULTIPLE: 3, QACoverage.SINGLE: 2}.get(metrics.qa_coverage, 0)


def _section_alignment(metrics: MetricsRecord, html: str) -> int:
    return {SectionAlignment.STRONG: 3, SectionAlignment.PARTIAL: 2}.get(metrics.section_alignment, 0)


def _internal_links(metrics: MetricsRecord, html: str) -> int:
    if metrics.internal_link_count >= 3:
        return 5
    if metrics.internal_link_count >= 1:
        return 3
    return 0


def _factual_statements(metrics: MetricsRecord, html: str) -> int:
    if metrics.factual_density >= 5:
        return 2
    if metrics.factual_density >= 2:
        return 1
    return 0


def _redundancy(metrics: MetricsRecord, html: str) -> int:
    if metrics.word_count == 0:
        return 0
    if metrics.redundancy_score >= 0.8:
        return 2
    if metrics.redundancy_score >= 0.6:
        return 1
    return 0


def _reading_clarity(metrics: MetricsRecord, html: str) -> int:
    return 1 if 60 <= metrics.readability_score <= 80 else 0


GEO_RULES: tuple[Rule, ...] = (
    # Structured data (20)
    Rule("validSchema", "Valid schema markup", "structuredData", 6,
         signal_rule("structuredData", "validSchema", 6)),
    Rule("articleSchema", "Article-type schema", "structuredData", 5,
         signal_rule("structuredData", "articleSchema", 5)),
    Rule("breadcrumbSchema", "Breadcrumb schema", "structuredData", 4,
         signal_rule("structuredData", "breadcrumbSchema", 4)),
    Rule("entityRelations", "Entity relationships", "structuredData", 5,
         signal_rule("structuredData", "entityRelations", 5)),
    # Content structure and clarity (20)
    Rule("answerIntro", "Summary intro", "contentClarity", 5, _answer_intro),
    Rule("definitionClarity", "Definition clarity", "contentClarity", 3, _definition_clarity),
    Rule("snippetFormatting", "Snippet-friendly formatting", "contentClarity", 3, _snippet_formatting),
    Rule("qaStructure", "Q&A structure", "contentClarity", 3, _qa_structure),
    Rule("sectionAlignment", "Section labeling", "contentClarity", 3, _section_alignment),
    Rule("chunkedParagraphs", "Chunked paragraphs", "contentClarity", 3,
         signal_rule("contentClarity", "chunkedParagraphs", 3)),
    # Entity architecture (15)
    Rule("internalLinks", "Internal linking", "entityArchitecture", 5, _internal_links),
    Rule("naturalAnchors", "Descriptive anchor text", "entityArchitecture", 4,
         signal_rule("entityArchitecture", "naturalAnchors", 4)),
    Rule("entityHubLinks", "Entity hub links", "entityArchitecture", 3,
         signal_rule("entityArchitecture", "entityHubLinks", 3)),
    Rule("cleanUrl", "Clean URL structure", "entityArchitecture", 3,
         signal_rule("entityArchitecture", "cleanUrl", 3)),
    # Technical GEO and indexability (20)
    Rule("llmsTxt", "llms.txt published", "technicalGeo", 5,
         signal_rule("technicalGeo", "llmsTxtPresent", 5)),
    Rule("indexNow", "IndexNow key file", "technicalGeo", 3,
         signal_rule("technicalGeo", "indexNowEndpointOk", 3)),
    Rule("robotsAccess", "robots.txt allows crawling", "technicalGeo", 4,
         signal_rule("technicalGeo", "robotsAllowsAll", 4)),
    Rule("serverRendered", "Server-rendered content", "technicalGeo", 4,
         signal_rule("technicalGeo", "serverRendered", 4)),
    Rule("indexable", "Indexable page", "technicalGeo", 2,
         signal_rule("technicalGeo", "indexable", 2)),
    Rule("statusOk", "Healthy HTTP status", "technicalGeo", 2,
         signal_rule("technicalGeo", "statusOk", 2)),
    # Authority and source signals (15)
    Rule("authorAttribution", "Author schema", "authoritySignals", 4,
         signal_rule("authoritySignals", "authorSchema", 4)),
    Rule("authorBio", "Author bio", "authoritySignals", 2,
         signal_rule("authoritySignals", "authorBio", 2)),
    Rule("authoritativeCitations", "Authoritative citations", "authoritySignals", 3,
         signal_rule("authoritySignals", "authoritativeCitations", 3)),
    Rule("firstPartyData", "First-party data", "authoritySignals", 2,
         signal_rule("authoritySignals", "firstPartyData", 2)),
    Rule("factualStatements", "Factual statements", "authoritySignals", 2, _factual_statements),
    Rule("imageCitation", "Image credits", "authoritySignals", 2,
         signal_rule("authoritySignals", "imageCitation", 2)),
    # Freshness (5)
    Rule("dateModifiedRecent", "Recently modified", "freshness", 3,
         signal_rule("freshness", "dateModifiedRecent", 3)),
    Rule("currentYearReference", "Current year referenced", "freshness", 1,
         signal_rule("freshness", "currentYearReferenced", 1)),
    Rule("sitemapFreshness", "Fresh sitemap lastmod", "freshness", 1,
         signal_rule("freshness", "sitemapLastmodRecent", 1)),
    # Safety and consistency (5)
    Rule("disclaimer", "Disclaimer present", "safety", 1,
         signal_rule("safety", "disclaimerPresent", 1)),
    Rule("lowVagueness", "Low vagueness", "safety", 1,
         signal_rule("safety", "lowVagueness", 1)),
    Rule("redundancy", "Redundancy control", "safety", 2, _redundancy),
    Rule("readingClarity", "Clarity & simplicity", "safety", 1, _reading_clarity),
)

geo_table = RuleTable("geo", list(GEO_RULES))


def compute_geo_score(metrics: MetricsRecord, html: str = "") -> ScoreResult:
    """Score a metrics record against the GEO table."""
    return geo_table.score(metrics, html)
