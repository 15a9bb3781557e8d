"""Rule tables and score aggregation for SEO and GEO."""
from aimapper.scoring.base import BreakdownEntry, Rule, ScoreResult, compute_score
from aimapper.scoring.geo_rules import GEO_RULES, compute_geo_score, geo_table
from aimapper.scoring.pillars import (
    GEO_PILLAR_META,
    SEO_PILLAR_META,
    Pillar,
    build_geo_pillars,
    build_pillars,
    build_seo_pillars,
)
from aimapper.scoring.registry import RuleTable
from aimapper.scoring.seo_rules import SEO_RULES, compute_seo_score, seo_table

__all__ = [
    "Rule",
    "BreakdownEntry",
    "ScoreResult",
    "RuleTable",
    "compute_score",
    "compute_seo_score",
    "compute_geo_score",
    "SEO_RULES",
    "GEO_RULES",
    "seo_table",
    "geo_table",
    "Pillar",
    "SEO_PILLAR_META",
    "GEO_PILLAR_META",
    "build_pillars",
    "build_seo_pillars",
    "build_geo_pillars",
]
