"""Recommendation selection.

Each table is a fixed list of condition rules kept in declaration order.
Selection is a filter, never a re-sort.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from aimapper.metrics.record import MetricsRecord

MAX_RECOMMENDATIONS = 10

CONTENT_TYPES = (
    "general",
    "pressRelease",
    "blogArticle",
    "productPage",
    "landingPage",
    "newsArticle",
    "howTo",
)

Condition = Callable[[MetricsRecord, str], bool]


@dataclass(frozen=True)
class RecommendationRule:
    id: str
    text: str
    priority: str
    condition: Condition


@dataclass(frozen=True)
class RecommendationItem:
    id: str
    text: str
    priority: str
    mode: str

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "priority": self.priority, "mode": self.mode}


MAINTAIN = RecommendationItem(
    id="maintain",
    text="Maintain current optimization approach: both SEO and GEO pillars score within benchmark range.",
    priority="Maintain",
    mode="combined",
)

SEO_RECOMMENDATIONS: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        "schemaNews",
        "Add NewsArticle schema markup so AI news surfaces recognize this release.",
        "Critical",
        lambda m, ct: ct == "pressRelease" and "NewsArticle" not in m.schema_types,
    ),
    RecommendationRule(
        "schemaFaq",
        "Add FAQ schema to unlock multi-framework visibility for conversational queries.",
        "High",
        lambda m, ct: ct in ("blogArticle", "productPage", "howTo") and "FAQPage" not in m.schema_types,
    ),
    RecommendationRule(
        "productSchema",
        "Include Product schema with Offer data for richer shopping experiences.",
        "High",
        lambda m, ct: ct == "productPage" and "Product" not in m.schema_types,
    ),
    RecommendationRule(
        "titleLength",
        "Optimize the title tag to 50–60 characters for SERP pixel control.",
        "Medium",
        lambda m, ct: ct != "pressRelease" and bool(m.title_length) and not 50 <= m.title_length <= 60,
    ),
    RecommendationRule(
        "metaDescription",
        "Rewrite the meta description to 150–160 characters with a clear CTA.",
        "Medium",
        lambda m, ct: bool(m.meta_description_length) and not 140 <= m.meta_description_length <= 170,
    ),
    RecommendationRule(
        "keywordIntro",
        "Introduce the dominant keyword within the first 100 words.",
        "High",
        lambda m, ct: bool(m.dominant_keyword) and not m.keyword_in_intro,
    ),
    RecommendationRule(
        "internalLinks",
        "Add internal links to supporting assets to lift crawl depth and topical authority.",
        "Medium",
        lambda m, ct: m.internal_link_count < 3,
    ),
    RecommendationRule(
        "speed",
        "Improve page load speed by compressing media and deferring heavy scripts.",
        "High",
        lambda m, ct: m.page_speed_estimate < (65 if ct == "pressRelease" else 75),
    ),
    RecommendationRule(
        "wordCount",
        "Expand the narrative beyond 800 words to increase depth and SERP coverage.",
        "Medium",
        lambda m, ct: m.word_count < 800,
    ),
)


def _needs_authority(m: MetricsRecord, ct: str) -> bool:
    if ct == "pressRelease":
        return not (m.attribution_count >= 1 or m.has_proprietary_data or m.factual_density >= 8)
    return m.topical_authority_score < 55 and not m.has_proprietary_data


GEO_RECOMMENDATIONS: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        "entityDefinitions",
        "Add explicit entity definitions (“X is a…”) within the opening section for AI clarity.",
        "Critical",
        lambda m, ct: m.entity_definitions < 2,
    ),
    RecommendationRule(
        "infoDensity",
        "Increase information density above 5% by layering in stats, dates, and data points.",
        "High",
        lambda m, ct: m.factual_density < 5,
    ),
    RecommendationRule(
        "qaFormat",
        "Convert key talking points into a mini Q&A block to mimic prompt-ready snippets.",
        "High",
        lambda m, ct: ct != "pressRelease" and m.qa_count < 3,
    ),
    RecommendationRule(
        "conversationalTone",
        "Infuse more conversational markers (“you”, “we”, natural questions) for GEO tone.",
        "Medium",
        lambda m, ct: ct != "pressRelease" and m.conversational_markers < 10,
    ),
    RecommendationRule(
        "quotable",
        "Craft quotable soundbites under 20 words with attribution for AI citation.",
        "Medium",
        lambda m, ct: m.quotable_statements_ratio < 0.4,
    ),
    RecommendationRule(
        "attribution",
        "Add clear attribution (“Name, Title said…”) to boost trust and citation readiness.",
        "Medium",
        lambda m, ct: m.attribution_count < (1 if ct == "pressRelease" else 2),
    ),
    RecommendationRule(
        "voiceSearch",
        "Add voice-search friendly questions beginning with who/what/when/where/why/how.",
        "High",
        lambda m, ct: ct != "pressRelease" and m.voice_pattern_score < 70,
    ),
    RecommendationRule(
        "parserStructure",
        "Structure listings with bullets, numbered steps, and short paragraphs for AI parsers.",
        "Medium",
        lambda m, ct: m.parser_accessibility_score < 75,
    ),
    RecommendationRule(
        "authority",
        "Layer in proprietary data or POV to strengthen topical authority signals.",
        "High",
        _needs_authority,
    ),
)

TYPE_SPECIFIC_TIPS: dict[str, tuple[str, ...]] = {
    "pressRelease": (
        "Host the release on an owned domain (/news or /media-center) to retain equity.",
        "Mirror the boilerplate copy across every release for brand consistency.",
        "Add outbound links to executive LinkedIn or Crunchbase profiles.",
        "Enable IndexNow submissions for immediate AI indexing.",
        "Publish proprietary benchmarks or data points within the announcement.",
    ),
    "blogArticle": (
        "Add FAQ schema and conversational H2s that mirror natural queries.",
        "Call out author credentials and byline to reinforce expertise.",
        "Include a TL;DR summary at the top for fast AI referencing.",
    ),
    "productPage": (
        "Structure specifications inside tables or definition lists for easy extraction.",
        "Add comparison/alternative language to help AI summarize positioning.",
        "Ensure pricing and availability are explicit near the top.",
    ),
    "landingPage": (
        "Front-load the value proposition and CTA before the fold.",
        "Showcase trust signals (logos, awards, testimonials) near CTAs.",
        "Use conversational headings that map to intent-based prompts.",
    ),
    "newsArticle": (
        "Cite primary sources with outbound links and timestamps.",
        "Include reporter name, publication date, and update cadence.",
        "Highlight at least one quotable insight per section.",
    ),
    "howTo": (
        "Add HowTo schema with structured steps and estimated completion time.",
        "Include troubleshooting or “what could go wrong” sections.",
        "Provide materials/tools lists formatted as bullet points.",
    ),
}


def _content_type(ctx: Mapping[str, str] | None) -> str:
    if not ctx:
        return "general"
    return ctx.get("contentType") or ctx.get("content_type") or "general"


def _select(rules: tuple[RecommendationRule, ...], metrics: MetricsRecord, content_type: str, mode: str) -> list[RecommendationItem]:
    return [
        RecommendationItem(rule.id, rule.text, rule.priority, mode)
        for rule in rules
        if rule.condition(metrics, content_type)
    ]


def build_recommendations(
    metrics: MetricsRecord,
    ctx: Mapping[str, str] | None = None,
) -> dict[str, list[RecommendationItem]]:
    """Select the recommendations whose conditions hold.

    Args:
        metrics: Extracted metrics record
        ctx: Context mapping, reads ``contentType`` (defaults to ``general``)

    Returns:
        Dict with ``combined`` (SEO then GEO, at most ten items, or a single
        ``maintain`` item when nothing triggers), ``seo`` and ``geo``.
    """
    content_type = _content_type(ctx)
    seo = _select(SEO_RECOMMENDATIONS, metrics, content_type, "seo")
    geo = _select(GEO_RECOMMENDATIONS, metrics, content_type, "geo")

    combined = (seo + geo)[:MAX_RECOMMENDATIONS]
    if not combined:
        combined = [MAINTAIN]

    return {
        "combined": combined,
        "seo": seo or [item for item in combined if item.mode == "seo"],
        "geo": geo or [item for item in combined if item.mode == "geo"],
    }


def type_specific_findings(content_type: str, metrics: MetricsRecord) -> list[str]:
    """Static tips for a content type.

    Press-release tips that the page already satisfies are dropped.
    """
    tips = list(TYPE_SPECIFIC_TIPS.get(content_type, ()))
    if content_type != "pressRelease":
        return tips

    kept = []
    for tip in tips:
        if tip.startswith("Host the release") and metrics.likely_owned_domain:
            continue
        if "proprietary" in tip and metrics.has_proprietary_data:
            continue
        kept.append(tip)
    return kept
