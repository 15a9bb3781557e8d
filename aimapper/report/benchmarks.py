"""Industry benchmark ranges for SEO and GEO scores."""
from __future__ import annotations

from dataclasses import dataclass

from aimapper.parser.text import round_half_up


@dataclass(frozen=True)
class ScoreRange:
    min: int
    max: int

    @property
    def average(self) -> int:
        return int(round_half_up((self.min + self.max) / 2))


@dataclass(frozen=True)
class IndustryBenchmark:
    name: str
    seo: ScoreRange
    geo: ScoreRange


INDUSTRY_BENCHMARKS: dict[str, IndustryBenchmark] = {
    "technology": IndustryBenchmark("Technology", ScoreRange(78, 85), ScoreRange(70, 78)),
    "financial": IndustryBenchmark("Financial Services", ScoreRange(75, 82), ScoreRange(58, 65)),
    "healthcare": IndustryBenchmark("Healthcare", ScoreRange(68, 75), ScoreRange(55, 62)),
    "retail": IndustryBenchmark("Retail & E-commerce", ScoreRange(72, 80), ScoreRange(65, 72)),
    "manufacturing": IndustryBenchmark("Manufacturing", ScoreRange(65, 73), ScoreRange(52, 60)),
    "media": IndustryBenchmark("Media & Publishing", ScoreRange(80, 88), ScoreRange(68, 76)),
    "professional": IndustryBenchmark("Professional Services", ScoreRange(70, 78), ScoreRange(60, 68)),
    "hospitality": IndustryBenchmark("Hospitality & Travel", ScoreRange(74, 82), ScoreRange(62, 70)),
    "education": IndustryBenchmark("Education", ScoreRange(66, 74), ScoreRange(58, 66)),
    "nonProfit": IndustryBenchmark("Non-Profit", ScoreRange(62, 70), ScoreRange(54, 62)),
}


def get_benchmark(industry: str | None) -> IndustryBenchmark | None:
    if not industry:
        return None
    return INDUSTRY_BENCHMARKS.get(industry)


def summarize_benchmark(score: int, industry_range: ScoreRange | None) -> dict:
    """Compare a score with the midpoint of an industry range.

    Returns:
        Dict with ``delta``, ``label``, ``status`` ("", "challenged" or "risk")
        and ``average``.
    """
    if industry_range is None:
        return {"delta": 0, "label": "No benchmark", "status": "", "average": 0}

    average = industry_range.average
    delta = score - average
    label = "Average"
    status = ""

    if delta >= 10:
        label = "Well above average"
    elif delta >= 5:
        label = "Above average"
    elif delta <= -11:
        label = "Well below average"
        status = "risk"
    elif delta <= -6:
        label = "Below average"
        status = "challenged"

    return {"delta": delta, "label": label, "status": status, "average": average}
