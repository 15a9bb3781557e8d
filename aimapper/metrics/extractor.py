"""Metrics extraction: one HTML document in, one MetricsRecord out."""
from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from aimapper.config.settings import settings
from aimapper.logging import get_logger
from aimapper.metrics.record import (
    DefinitionClarity,
    HeadingQuality,
    MetricsRecord,
    QACoverage,
    SectionAlignment,
    SiteSignals,
    SnippetFormatting,
    SummaryQuality,
)
from aimapper.parser.document import (
    body_text,
    headings,
    link_href,
    meta_content,
    meta_property,
    parse_html,
    title_text,
)
from aimapper.parser.structured_data import StructuredData, collect_structured_data
from aimapper.parser.text import (
    count_words,
    dominant_keyword,
    flesch_reading_ease,
    intro_sample,
    normalize_whitespace,
    round_half_up,
    split_sentences,
    total_syllables,
)

logger = get_logger(__name__)

# Content classification
_GENERIC_DEFINITION = re.compile(r"\bis\s(an|a|the)\s", re.I)
_QUESTION_MARKER = re.compile(r"\bQ[:\-]", re.I)
_SECTION_CUE = re.compile(r"\b(who|what|when|where|why|how|guide|overview|benefits)\b")
_FACTUAL = re.compile(r"\b\d+(?:\.\d+)?(?:%|(?:\s?(?:million|billion|k|m)))?\b", re.I)
_BLANK_LINES = re.compile(r"\n{2,}")

# GEO signal rules
_HEDGE = re.compile(
    r"\b(might|maybe|perhaps|possibly|could be|some say|it is said|arguably|somewhat|probably|likely)\b",
    re.I,
)
_FIRST_PARTY = re.compile(
    r"\b(our (data|research|survey|study|analysis)|we (surveyed|analy[sz]ed|found|measured|tested)"
    r"|proprietary|internal data)\b",
    re.I,
)
_DISCLAIMER = re.compile(
    r"\b(disclaimer|not (financial|medical|legal|investment) advice|for informational purposes)\b",
    re.I,
)
_ENTITY_HUB_PATH = re.compile(r"/(topics?|tags?|category|categories|glossary|about|authors?|wiki)(/|$)", re.I)
_ENTITY_HUB_HOSTS = ("wikipedia.org", "wikidata.org")
_AUTHORITATIVE_HOST = re.compile(r"(^|\.)(gov|edu)(\.[a-z]{2})?$|(^|\.)(who\.int|un\.org)$")
_CLEAN_PATH = re.compile(r"(/[a-z0-9-]+)*/?")
_SPA_SHELL = "#root, #app, #__next, #__nuxt, [data-reactroot], [ng-app]"
_AUTHOR_BIO_CLASSES = ("author-bio", "author-box", "author-info")

# Anchor texts that say nothing about the target
_GENERIC_ANCHORS = frozenset({"click here", "here", "link", "read more", "more", "learn more", "this"})

# Text statistics
# Subject span is capped so a long run of capitalised words stays linear
_ENTITY_DEFINITION = re.compile(r"\b[A-Z][\w\s]{1,80}?\s(is|are)\s(a|an|the)\b")
_CONVERSATIONAL = re.compile(r"\b(you|your|we|let's|imagine|picture|let us|chatgpt|copilot)\b", re.I)
_ATTRIBUTION_VERB = re.compile(r"\b(said|according to|stated|noted|reports|announced)\b", re.I)
_QUOTE_MARK = re.compile(r"[\"“”]")
_SAID = re.compile(r"said|according to", re.I)
_VOICE_OPENER = re.compile(r"^\s*(who|what|when|where|why|how)\b", re.I)
_AUTHORITY_TOKEN = re.compile(r"\b[a-z]{4,}\b")
_BULLET = re.compile(r"^-|\n-|\*", re.M)
_CURRENCY = re.compile(r"[$€£]\s?\d[\d,\.]*|\bUSD\b|\bCAD\b|\bC\$|\bTSX\b", re.I)
_PERCENT = re.compile(r"\b\d+(?:\.\d+)?%")
_DATA_KEYWORD = re.compile(r"\b(proprietary|benchmark|distribution|ETF|index|internal)\b", re.I)
_NEWSROOM_HINTS = ("news", "press", "media", "newsroom", "mediaroom", "investor")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def is_internal_link(href: str | None, base_url: str = "") -> bool:
    """Whether ``href`` stays on the host of ``base_url``.

    Root-relative links count as internal even without a base URL.
    """
    if not href:
        return False
    if href.startswith("#") or href.startswith("mailto:"):
        return False
    if href.startswith("/"):
        return True
    if not base_url:
        return False
    try:
        source = urlparse(base_url).hostname
        if not source:
            return False
        return urlparse(urljoin(base_url, href)).hostname == source
    except ValueError:
        return False


def _paragraphs(soup: BeautifulSoup, raw_text: str) -> list[str]:
    found = [normalize_whitespace(node.get_text()) for node in soup.find_all("p")]
    found = [p for p in found if p]
    if found:
        return found
    blocks = (normalize_whitespace(block) for block in _BLANK_LINES.split(raw_text))
    return [block for block in blocks if block]


def _heading_quality(heading_list: list[dict]) -> HeadingQuality:
    if not heading_list:
        return HeadingQuality.POOR

    status = HeadingQuality.STRONG
    previous_level = None
    h1_count = 0
    for heading in heading_list:
        level = heading["level"]
        if level == 1:
            h1_count += 1
        if previous_level and level - previous_level > 1:
            status = HeadingQuality.MINOR if status is HeadingQuality.STRONG else HeadingQuality.POOR
        previous_level = level

    if heading_list[0]["level"] != 1:
        status = HeadingQuality.MINOR
    if h1_count != 1:
        status = HeadingQuality.POOR
    return status


def _summary_quality(paragraph: str) -> SummaryQuality:
    candidate = split_sentences(paragraph)[:4]
    if not candidate:
        return SummaryQuality.NONE
    concise = [s for s in candidate if count_words(s) <= 30]
    if 2 <= len(candidate) <= 4 and len(concise) == len(candidate):
        return SummaryQuality.STRONG
    if len(concise) >= max(1, len(candidate) - 1):
        return SummaryQuality.PARTIAL
    return SummaryQuality.NONE


def _definition_clarity(text: str, keyword: str, title: str) -> DefinitionClarity:
    focus = keyword or title.split("|", 1)[0].strip()
    if focus:
        pattern = re.compile(rf"\b{re.escape(focus)}\b\s+(is|are)\s+(an?|the)", re.I)
        if pattern.search(text):
            return DefinitionClarity.CLEAR
    if _GENERIC_DEFINITION.search(text):
        return DefinitionClarity.PARTIAL
    return DefinitionClarity.NONE


def _snippet_formatting(sentences: list[str], list_count: int) -> SnippetFormatting:
    if not sentences and not list_count:
        return SnippetFormatting.NONE
    short = sum(1 for s in sentences if count_words(s) <= 20)
    ratio = short / len(sentences) if sentences else 1.0
    if ratio >= 0.6 and list_count > 0:
        return SnippetFormatting.STRONG
    if ratio >= 0.4 or list_count > 0:
        return SnippetFormatting.PARTIAL
    return SnippetFormatting.NONE


def _qa_coverage(text: str) -> QACoverage:
    questions = text.count("?")
    markers = len(_QUESTION_MARKER.findall(text))
    if questions >= 3 or markers >= 2:
        return QACoverage.MULTIPLE
    if questions >= 1 or markers >= 1:
        return QACoverage.SINGLE
    return QACoverage.NONE


def _section_alignment(heading_list: list[dict], keyword: str) -> SectionAlignment:
    if not heading_list:
        return SectionAlignment.WEAK
    keyword = keyword.lower()
    aligned = 0
    for heading in heading_list:
        value = heading["text"].lower()
        if (keyword and keyword in value) or _SECTION_CUE.search(value):
            aligned += 1
    ratio = aligned / len(heading_list)
    if ratio >= 0.6:
        return SectionAlignment.STRONG
    if ratio >= 0.3:
        return SectionAlignment.PARTIAL
    return SectionAlignment.WEAK


def _redundancy(sentences: list[str]) -> float:
    normalized = [s.lower().strip() for s in sentences]
    normalized = [s for s in normalized if s]
    if not normalized:
        return 1.0
    return len(set(normalized)) / len(normalized)


def _natural_anchor_ratio(anchors: list) -> float | None:
    texts = [normalize_whitespace(a.get_text()) for a in anchors]
    texts = [t for t in texts if t]
    if not texts:
        return None
    descriptive = sum(1 for t in texts if t.lower() not in _GENERIC_ANCHORS and len(t) > 3)
    return descriptive / len(texts)


def _resolved_hosts(anchors: list, url: str) -> list[tuple[str, str]]:
    """(hostname, path) of every link, resolved against ``url`` when given."""
    resolved = []
    for anchor in anchors:
        href = anchor.get("href", "").strip()
        if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
            continue
        try:
            parsed = urlparse(urljoin(url, href) if url else href)
        except ValueError:
            continue
        resolved.append(((parsed.hostname or "").lower(), parsed.path))
    return resolved


def _has_entity_hub_links(links: list[tuple[str, str]]) -> bool:
    for host, path in links:
        if any(host == hub or host.endswith("." + hub) for hub in _ENTITY_HUB_HOSTS):
            return True
        if _ENTITY_HUB_PATH.search(path):
            return True
    return False


def _has_authoritative_citations(links: list[tuple[str, str]]) -> bool:
    return any(host and _AUTHORITATIVE_HOST.search(host) for host, _ in links)


def _is_clean_url(url: str) -> bool | None:
    if not url:
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    path = parsed.path or "/"
    segments = [segment for segment in path.split("/") if segment]
    return (
        not parsed.query
        and _CLEAN_PATH.fullmatch(path) is not None
        and len(segments) <= settings.scoring.clean_url_max_segments
    )


def _has_author_bio(soup: BeautifulSoup, text: str) -> bool:
    if soup.find(attrs={"rel": lambda value: value and value.lower() == "author"}):
        return True
    bio = soup.find(class_=lambda value: value and any(name in value.lower() for name in _AUTHOR_BIO_CLASSES))
    if bio is not None:
        return True
    return "about the author" in text.lower()


def _is_indexable(soup: BeautifulSoup) -> bool:
    robots = meta_content(soup, "robots") or ""
    return "noindex" not in robots.lower()


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _likely_owned_domain(url: str, soup: BeautifulSoup) -> bool:
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    hostname = (parsed.hostname or "").lower()
    path = parsed.path.lower()
    if not hostname:
        return False
    if any(hint in hostname or hint in path for hint in _NEWSROOM_HINTS):
        return True
    site_name = _NON_ALNUM.sub("", (meta_property(soup, "og:site_name") or "").lower())
    return bool(site_name) and site_name in hostname


def _quotable_ratio(sentences: list[str]) -> float:
    if not sentences:
        return 0.0
    count = 0
    for sentence in sentences:
        if 6 <= count_words(sentence) <= 20:
            count += 1
        if '"' in sentence or _SAID.search(sentence):
            count += 1
    return count / len(sentences)


def _topical_authority(text: str) -> float:
    tokens = _AUTHORITY_TOKEN.findall(text.lower())
    if not tokens:
        return 0.0
    unique = len(set(tokens))
    diversity = unique / len(tokens)
    return min(100.0, diversity * 70 + min(unique, 80) * 0.3 + 20)


def _parser_accessibility(text: str) -> float:
    bullets = len(_BULLET.findall(text))
    blocks = _BLANK_LINES.split(text)
    short = sum(1 for block in blocks if count_words(block) < 120)
    ratio = short / max(len(blocks), 1)
    return min(100.0, ratio * 100 + bullets * 2)


def _proprietary_signals(text: str) -> int:
    return len(_CURRENCY.findall(text)) + len(_PERCENT.findall(text)) + len(_DATA_KEYWORD.findall(text))


def _geo_signals(
    *,
    soup: BeautifulSoup,
    url: str,
    text: str,
    word_count: int,
    structured: StructuredData,
    heading_quality: HeadingQuality,
    summary: SummaryQuality,
    definition: DefinitionClarity,
    qa: QACoverage,
    avg_paragraph_length: float,
    internal_links: int,
    anchor_ratio: float | None,
    links: list[tuple[str, str]],
    vague_ratio: float,
    redundancy: float,
    site_signals: SiteSignals | None,
    status_code: int | None,
    now: datetime,
) -> dict[str, dict[str, bool | None]]:
    scoring = settings.scoring
    has_words = word_count > 0

    spa_shell = soup.select_one(_SPA_SHELL) is not None
    server_rendered = has_words and not (spa_shell and word_count < scoring.ssr_min_words)

    modified = _parse_timestamp(structured.date_modified)
    date_recent = None
    if modified is not None:
        date_recent = now - modified <= timedelta(days=scoring.freshness_window_days)

    return {
        "structuredData": {
            "validSchema": bool(structured.types),
            "articleSchema": structured.has_article_schema,
            "faqSchema": structured.has_faq_schema,
            "breadcrumbSchema": structured.has_breadcrumb,
            "entityRelations": structured.has_entity_relations,
        },
        "contentClarity": {
            "summaryIntro": summary is SummaryQuality.STRONG,
            "definitionFirst": definition is DefinitionClarity.CLEAR,
            "qaBlocks": qa is not QACoverage.NONE,
            "chunkedParagraphs": (
                avg_paragraph_length < scoring.chunked_paragraph_max_words if has_words else None
            ),
            "logicalHeadings": heading_quality is HeadingQuality.STRONG,
        },
        "entityArchitecture": {
            "internalLinks": internal_links >= scoring.internal_link_target,
            "naturalAnchors": (
                anchor_ratio >= scoring.natural_anchor_threshold if anchor_ratio is not None else None
            ),
            "entityHubLinks": _has_entity_hub_links(links),
            "cleanUrl": _is_clean_url(url),
        },
        "technicalGeo": {
            "llmsTxtPresent": site_signals.llms_txt_present if site_signals else None,
            "indexNowEndpointOk": site_signals.index_now_endpoint_ok if site_signals else None,
            "robotsAllowsAll": site_signals.robots_allows_all if site_signals else None,
            "serverRendered": server_rendered,
            "indexable": _is_indexable(soup),
            "statusOk": 200 <= status_code < 300 if status_code is not None else None,
        },
        "authoritySignals": {
            "authorSchema": structured.has_author,
            "authorBio": _has_author_bio(soup, text),
            "authoritativeCitations": _has_authoritative_citations(links),
            "firstPartyData": _FIRST_PARTY.search(text) is not None,
            "imageCitation": structured.has_image_citation,
        },
        "freshness": {
            "dateModifiedRecent": date_recent,
            "currentYearReferenced": re.search(rf"\b{now.year}\b", text) is not None,
            "sitemapLastmodRecent": site_signals.sitemap_lastmod_recent if site_signals else None,
        },
        "safety": {
            "disclaimerPresent": _DISCLAIMER.search(text) is not None,
            "lowVagueness": vague_ratio < scoring.vague_statement_threshold if has_words else None,
            "noDuplicateContent": redundancy >= scoring.redundancy_threshold if has_words else None,
        },
    }


def extract_metrics(
    html: str = "",
    url: str = "",
    *,
    site_signals: SiteSignals | None = None,
    status_code: int | None = None,
    now: datetime | None = None,
) -> MetricsRecord:
    """Measure one document.

    Args:
        html: Page or fragment markup; empty input is measured as an empty body
        url: Base URL used for internal-link and clean-URL checks
        site_signals: Site-wide facts; technical GEO signals are unknown without them
        status_code: HTTP status the page was served with, if fetched
        now: Reference time for freshness checks, defaults to the current UTC time

    Returns:
        MetricsRecord. Never raises for malformed markup.
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    soup = parse_html(html)
    raw_text = body_text(soup)
    text = normalize_whitespace(raw_text)

    word_count = count_words(text)
    sentences = split_sentences(text)
    sentence_count = len(sentences) or 1
    avg_sentence_length = word_count / sentence_count if word_count else 0.0

    paragraphs = _paragraphs(soup, raw_text)
    paragraph_counts = [count for count in (count_words(p) for p in paragraphs) if count]
    if paragraph_counts:
        avg_paragraph_length = sum(paragraph_counts) / len(paragraph_counts)
    else:
        avg_paragraph_length = float(word_count)

    intro = intro_sample(text)
    title = title_text(soup)
    meta_description = (meta_content(soup, "description") or "").strip()
    heading_list = headings(soup)
    heading_quality = _heading_quality(heading_list)
    structured = collect_structured_data(soup)

    keyword = dominant_keyword(text)
    occurrences = len(re.findall(rf"\b{re.escape(keyword)}\b", text, re.I)) if keyword else 0
    keyword_density = occurrences / word_count * 100 if word_count else 0.0

    anchors = soup.find_all("a", href=True)
    internal_links = sum(1 for anchor in anchors if is_internal_link(anchor.get("href"), url))
    links = _resolved_hosts(anchors, url)
    anchor_ratio = _natural_anchor_ratio(anchors)

    images = soup.find_all("img")
    with_alt = sum(1 for image in images if (image.get("alt") or "").strip())
    alt_coverage = with_alt / len(images) if images else 1.0
    list_count = len(soup.find_all(["ul", "ol"]))

    summary = _summary_quality(paragraphs[0] if paragraphs else "")
    definition = _definition_clarity(text, keyword, title)
    qa = _qa_coverage(text)
    factual_density = len(_FACTUAL.findall(text)) / word_count * 100 if word_count else 0.0
    redundancy = _redundancy(sentences)
    readability = flesch_reading_ease(word_count, sentence_count, total_syllables(text))
    hedged = sum(1 for s in sentences if _HEDGE.search(s))
    vague_ratio = hedged / len(sentences) if sentences else 0.0

    stats_text = raw_text.strip()
    has_data_table = soup.find("table") is not None
    topical_authority = _topical_authority(stats_text)
    if has_data_table:
        topical_authority = min(100.0, topical_authority + 10)
    proprietary = _proprietary_signals(stats_text)
    quotes = len(_QUOTE_MARK.findall(stats_text)) / 2
    scripts = len(soup.find_all("script"))

    record = MetricsRecord(
        word_count=word_count,
        sentence_count=sentence_count,
        avg_sentence_length=avg_sentence_length,
        avg_paragraph_length=avg_paragraph_length,
        title=title,
        title_length=len(title),
        meta_description_length=len(meta_description),
        list_count=list_count,
        h1_count=sum(1 for h in heading_list if h["level"] == 1),
        internal_link_count=internal_links,
        link_count=len(anchors),
        image_count=len(images),
        meta_description_present=bool(meta_description),
        canonical_present=bool(link_href(soup, "canonical")),
        keyword_in_intro=bool(keyword) and keyword in intro.lower(),
        heading_structure_quality=heading_quality,
        summary_quality=summary,
        definition_clarity=definition,
        snippet_formatting=_snippet_formatting(sentences, list_count),
        qa_coverage=qa,
        section_alignment=_section_alignment(heading_list, keyword),
        keyword_density=keyword_density,
        alt_coverage=alt_coverage,
        factual_density=factual_density,
        redundancy_score=redundancy,
        readability_score=readability,
        natural_anchor_ratio=anchor_ratio,
        vague_statement_ratio=vague_ratio,
        schema_types=tuple(structured.types),
        dominant_keyword=keyword,
        intro_sample=intro,
        geo_signals=_geo_signals(
            soup=soup,
            url=url,
            text=text,
            word_count=word_count,
            structured=structured,
            heading_quality=heading_quality,
            summary=summary,
            definition=definition,
            qa=qa,
            avg_paragraph_length=avg_paragraph_length,
            internal_links=internal_links,
            anchor_ratio=anchor_ratio,
            links=links,
            vague_ratio=vague_ratio,
            redundancy=redundancy,
            site_signals=site_signals,
            status_code=status_code,
            now=now,
        ),
        entity_definitions=len(_ENTITY_DEFINITION.findall(stats_text)),
        qa_count=stats_text.count("?") + len(_QUESTION_MARKER.findall(stats_text)),
        conversational_markers=len(_CONVERSATIONAL.findall(stats_text)),
        quotable_statements_ratio=_quotable_ratio(sentences),
        attribution_count=int(round_half_up(len(_ATTRIBUTION_VERB.findall(stats_text)) + quotes)),
        voice_pattern_score=(
            sum(1 for s in sentences if _VOICE_OPENER.search(s)) / len(sentences) * 100 if sentences else 0.0
        ),
        parser_accessibility_score=_parser_accessibility(stats_text),
        topical_authority_score=topical_authority,
        proprietary_signal_score=proprietary,
        has_data_table=has_data_table,
        has_proprietary_data=has_data_table or factual_density >= 8 or proprietary >= 5,
        likely_owned_domain=_likely_owned_domain(url, soup),
        page_speed_estimate=max(55, 95 - len(images) * 3 - scripts * 2),
    )

    logger.debug(
        "metrics_extracted",
        url=url or None,
        word_count=word_count,
        schema_types=len(structured.types),
        dominant_keyword=keyword or None,
    )
    return record
