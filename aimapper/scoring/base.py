"""Rules, breakdown entries and the score aggregator."""
from __future__ import annotations

import numbers
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from aimapper.metrics.record import MetricsRecord
from aimapper.parser.text import round_half_up

Evaluator = Callable[[MetricsRecord, str], int]


@dataclass(frozen=True)
class Rule:
    """One scoring rule.

    Attributes:
        id: Unique identifier, also the breakdown key
        label: Human-readable name
        category: Pillar the rule rolls up into
        max_points: Point cap; evaluator output is clamped into [0, max_points]
        evaluate: Pure function of the metrics record (and raw HTML)
    """
    id: str
    label: str
    category: str
    max_points: int
    evaluate: Evaluator


@dataclass(frozen=True)
class BreakdownEntry:
    """Points earned by one rule. A rule passes only at its full cap."""
    id: str
    label: str
    category: str
    points: int
    max_points: int
    passed: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "category": self.category,
            "points": self.points,
            "maxPoints": self.max_points,
            "passed": self.passed,
        }


@dataclass(frozen=True)
class ScoreResult:
    """Aggregated outcome of a rule table."""
    total: int
    total_points: int
    max_points: int
    breakdown: dict[str, BreakdownEntry] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "totalPoints": self.total_points,
            "maxPoints": self.max_points,
            "breakdown": {key: entry.to_dict() for key, entry in self.breakdown.items()},
        }


def clamp_points(value: object, max_points: int) -> int:
    """Coerce an evaluator result into an integer within [0, max_points].

    Anything that is not a real number (including bools and NaN) counts as 0.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0
    if value != value:  # NaN
        return 0
    return int(max(0, min(max_points, value)))


def percentage(points: int, max_points: int) -> int:
    """``round(100 * points / max_points)`` rounded half up, 0 for an empty max."""
    if not max_points:
        return 0
    return int(round_half_up(points / max_points * 100))


def compute_score(rules: Iterable[Rule], metrics: MetricsRecord, html: str = "") -> ScoreResult:
    """Run every rule independently and aggregate the results."""
    total_points = 0
    max_points = 0
    breakdown: dict[str, BreakdownEntry] = {}

    for rule in rules:
        points = clamp_points(rule.evaluate(metrics, html), rule.max_points)
        total_points += points
        max_points += rule.max_points
        breakdown[rule.id] = BreakdownEntry(
            id=rule.id,
            label=rule.label,
            category=rule.category,
            points=points,
            max_points=rule.max_points,
            passed=points == rule.max_points,
        )

    return ScoreResult(
        total=percentage(total_points, max_points),
        total_points=total_points,
        max_points=max_points,
        breakdown=breakdown,
    )
