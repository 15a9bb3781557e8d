"""Category pillars built from a score breakdown."""
from __future__ import annotations

from dataclasses import dataclass, field

from aimapper.scoring.base import ScoreResult, percentage

NO_CHECKS_NOTE = "No checks evaluated."


@dataclass(frozen=True)
class PillarMeta:
    id: str
    label: str
    description: str


@dataclass(frozen=True)
class Pillar:
    """Sub-score for one rule category."""
    id: str
    label: str
    description: str
    score: int
    points: int
    max_points: int
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "score": self.score,
            "points": self.points,
            "maxPoints": self.max_points,
            "notes": list(self.notes),
        }


# Keyed by rule category
SEO_PILLAR_META: dict[str, PillarMeta] = {
    "technical": PillarMeta(
        "technical",
        "Technical SEO",
        "Title/meta coverage, canonical hygiene, and baseline crawl signals.",
    ),
    "content": PillarMeta(
        "contentQuality",
        "Content Quality",
        "Keyword placement, internal linking, schema, and topical coverage.",
    ),
    "readability": PillarMeta(
        "readability",
        "Readability",
        "Sentence + paragraph length with scannable formatting.",
    ),
}

GEO_PILLAR_META: dict[str, PillarMeta] = {
    "structuredData": PillarMeta(
        "structuredData",
        "Structured Data",
        "Schema alignment, breadcrumbs, and entity relationships.",
    ),
    "contentClarity": PillarMeta(
        "contentClarity",
        "Content Structure & Clarity",
        "Headings, TL;DR coverage, Q&A blocks, and chunked paragraphs.",
    ),
    "entityArchitecture": PillarMeta(
        "entityArchitecture",
        "Entity Architecture",
        "Internal linking, anchors, and clean URL structures.",
    ),
    "technicalGeo": PillarMeta(
        "technicalGeo",
        "Technical GEO & Indexability",
        "llms.txt, IndexNow, robots directives, and SSR/lightweight HTML.",
    ),
    "authoritySignals": PillarMeta(
        "authoritySignals",
        "Authority & Source Signals",
        "Author schema, bios, citations, and first-party signals.",
    ),
    "freshness": PillarMeta(
        "freshness",
        "Freshness",
        "Recent updates and current content references.",
    ),
    "safety": PillarMeta(
        "safety",
        "Safety & Consistency",
        "Disclaimers, clarity, and absence of contradictions.",
    ),
}


def build_pillars(score: ScoreResult, meta: dict[str, PillarMeta]) -> list[Pillar]:
    """Group breakdown entries by category, one pillar per ``meta`` entry.

    Pillar scores use the same rounding as the overall total. Entries whose
    category has no metadata are left out; categories without entries score 0.
    """
    grouped: dict[str, list] = {key: [] for key in meta}
    for entry in score.breakdown.values():
        if entry.category in grouped:
            grouped[entry.category].append(entry)

    pillars = []
    for key, info in meta.items():
        entries = grouped[key]
        points = sum(entry.points for entry in entries)
        max_points = sum(entry.max_points for entry in entries)
        notes = [f"{entry.label}: {entry.points}/{entry.max_points}" for entry in entries]
        pillars.append(Pillar(
            id=info.id,
            label=info.label,
            description=info.description,
            score=percentage(points, max_points),
            points=points,
            max_points=max_points,
            notes=notes or [NO_CHECKS_NOTE],
        ))
    return pillars


def build_seo_pillars(score: ScoreResult) -> list[Pillar]:
    return build_pillars(score, SEO_PILLAR_META)


def build_geo_pillars(score: ScoreResult) -> list[Pillar]:
    return build_pillars(score, GEO_PILLAR_META)
