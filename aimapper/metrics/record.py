"""Metrics record, quality grades and site-level signals."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from functools import total_ordering
from types import MappingProxyType
from typing import Any, Mapping


@total_ordering
class QualityLevel(Enum):
    """Closed set of grades. Members are declared worst first."""

    def __lt__(self, other):
        if self.__class__ is not other.__class__:
            return NotImplemented
        members = list(self.__class__)
        return members.index(self) < members.index(other)

    def __str__(self) -> str:
        return self.value


class HeadingQuality(QualityLevel):
    POOR = "poor"
    MINOR = "minor"
    STRONG = "strong"


class SummaryQuality(QualityLevel):
    NONE = "none"
    PARTIAL = "partial"
    STRONG = "strong"


class DefinitionClarity(QualityLevel):
    NONE = "none"
    PARTIAL = "partial"
    CLEAR = "clear"


class SnippetFormatting(QualityLevel):
    NONE = "none"
    PARTIAL = "partial"
    STRONG = "strong"


class QACoverage(QualityLevel):
    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"


class SectionAlignment(QualityLevel):
    WEAK = "weak"
    PARTIAL = "partial"
    STRONG = "strong"


GEO_SIGNAL_CATEGORIES = (
    "structuredData",
    "contentClarity",
    "entityArchitecture",
    "technicalGeo",
    "authoritySignals",
    "freshness",
    "safety",
)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass
class SiteSignals:
    """Site-wide facts gathered outside the page itself.

    ``None`` means the collector could not tell.
    """
    llms_txt_present: bool = False
    robots_allows_all: bool | None = None
    index_now_endpoint_ok: bool = False
    sitemap_lastmod_recent: bool | None = None
    bingbot_allowed: bool | None = None
    bingbot_disallow: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SiteSignals:
        """Build from camelCase or snake_case keys; unknown keys are ignored."""
        data = data or {}
        values = {}
        for f in fields(cls):
            if f.name in data:
                values[f.name] = data[f.name]
            elif _camel(f.name) in data:
                values[f.name] = data[_camel(f.name)]
        return cls(**values)

    def to_dict(self) -> dict:
        return {_camel(key): value for key, value in asdict(self).items()}


@dataclass(frozen=True)
class MetricsRecord:
    """Every measurement derived from one document.

    Built once per request by ``extract_metrics`` and read by the rule
    tables and the recommendation selector.
    """
    title: str = ""

    # Counts and lengths
    word_count: int = 0
    sentence_count: int = 1
    avg_sentence_length: float = 0.0
    avg_paragraph_length: float = 0.0
    title_length: int = 0
    meta_description_length: int = 0
    list_count: int = 0
    h1_count: int = 0
    internal_link_count: int = 0
    link_count: int = 0
    image_count: int = 0

    # Presence flags
    meta_description_present: bool = False
    canonical_present: bool = False
    keyword_in_intro: bool = False

    # Quality grades
    heading_structure_quality: HeadingQuality = HeadingQuality.POOR
    summary_quality: SummaryQuality = SummaryQuality.NONE
    definition_clarity: DefinitionClarity = DefinitionClarity.NONE
    snippet_formatting: SnippetFormatting = SnippetFormatting.NONE
    qa_coverage: QACoverage = QACoverage.NONE
    section_alignment: SectionAlignment = SectionAlignment.WEAK

    # Ratios
    keyword_density: float = 0.0
    alt_coverage: float = 1.0
    factual_density: float = 0.0
    redundancy_score: float = 1.0
    readability_score: float = 0.0
    natural_anchor_ratio: float | None = None
    vague_statement_ratio: float = 0.0

    schema_types: tuple[str, ...] = ()
    dominant_keyword: str = ""
    intro_sample: str = ""

    geo_signals: Mapping[str, Mapping[str, bool | None]] = field(default_factory=dict)

    # Text statistics used by recommendations
    entity_definitions: int = 0
    qa_count: int = 0
    conversational_markers: int = 0
    quotable_statements_ratio: float = 0.0
    attribution_count: int = 0
    voice_pattern_score: float = 0.0
    parser_accessibility_score: float = 0.0
    topical_authority_score: float = 0.0
    proprietary_signal_score: int = 0
    has_data_table: bool = False
    has_proprietary_data: bool = False
    likely_owned_domain: bool = False
    page_speed_estimate: int = 95

    def __post_init__(self):
        # Read-only views so a shared record cannot be edited by a consumer
        frozen = MappingProxyType({
            category: MappingProxyType(dict(signals))
            for category, signals in self.geo_signals.items()
        })
        object.__setattr__(self, "geo_signals", frozen)

    def signal(self, category: str, name: str) -> bool | None:
        """Look up one GEO signal; missing entries read as unknown."""
        return self.geo_signals.get(category, {}).get(name)

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dict with camelCase keys."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, Mapping):
                value = {key: dict(inner) for key, inner in value.items()}
            result[_camel(f.name)] = value
        return result
