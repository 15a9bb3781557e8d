"""Rule table registry."""
from __future__ import annotations

from collections.abc import Iterator

from aimapper.metrics.record import MetricsRecord
from aimapper.scoring.base import Rule, ScoreResult, compute_score


class RuleTable:
    """Ordered collection of scoring rules.

    Rules keep their declaration order, which is also the breakdown order.

    Usage:
        table = RuleTable("seo")
        table.register(Rule("titleLength", "Title length", "technical", 8, evaluate))
        result = table.score(metrics)
    """

    def __init__(self, name: str, rules: list[Rule] | None = None):
        self.name = name
        self._rules: dict[str, Rule] = {}
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Register a rule.

        Raises:
            ValueError: If a rule with the same id is already registered
        """
        if rule.id in self._rules:
            raise ValueError(f"Rule '{rule.id}' already registered in {self.name} table")
        self._rules[rule.id] = rule

    def unregister(self, rule_id: str) -> None:
        self._rules.pop(rule_id, None)

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def get_by_category(self, category: str) -> list[Rule]:
        return [rule for rule in self._rules.values() if rule.category == category]

    def list_categories(self) -> list[str]:
        """Categories in order of first appearance."""
        return list(dict.fromkeys(rule.category for rule in self._rules.values()))

    @property
    def max_points(self) -> int:
        return sum(rule.max_points for rule in self._rules.values())

    def score(self, metrics: MetricsRecord, html: str = "") -> ScoreResult:
        return compute_score(self._rules.values(), metrics, html)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules
