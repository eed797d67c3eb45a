"""Rule-based scoring engine - sums matching rule contributions for a record."""

from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .operators import Operator, evaluate_condition


@dataclass(frozen=True)
class ScoringRule:
    """A single administrator-configured scoring rule."""

    field: str
    operator: Union[Operator, str]
    value: Any = None
    score: float = 0

    def matches(self, record: Mapping[str, Any]) -> bool:
        """Check whether the rule's predicate holds for the record."""
        return evaluate_condition(record, self.field, self.operator, self.value)

    def contribution(self, record: Mapping[str, Any]) -> float:
        """Score added by this rule (0 when it does not match)."""
        return self.score if self.matches(record) else 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        operator = self.operator.value if isinstance(self.operator, Operator) else self.operator
        return {
            "field": self.field,
            "operator": operator,
            "value": self.value,
            "score": self.score,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Total score plus the rules that produced it."""

    total_score: float
    matched_rules: Tuple[ScoringRule, ...] = field(default_factory=tuple)

    @property
    def summary(self) -> str:
        """Get a human-readable summary of the top contributions."""
        if not self.matched_rules:
            return "No scoring rules matched"

        parts = []
        for rule in sorted(self.matched_rules, key=lambda r: r.score, reverse=True)[:3]:
            sign = "+" if rule.score >= 0 else ""
            parts.append(f"{rule.field} ({sign}{rule.score})")

        return ", ".join(parts)


class RuleScorer:
    """Folds a list of scoring rules over a record."""

    def score(self, record: Mapping[str, Any], rules: Optional[Sequence[ScoringRule]]) -> float:
        """Sum the score of every rule whose predicate matches.

        Every rule is evaluated; there is no early exit.
        """
        return reduce(lambda total, rule: total + rule.contribution(record), rules or (), 0)

    def explain(self, record: Mapping[str, Any], rules: Optional[Sequence[ScoringRule]]) -> ScoreBreakdown:
        """Score a record and keep the matched rules for display."""
        matched = tuple(rule for rule in (rules or ()) if rule.matches(record))
        return ScoreBreakdown(
            total_score=sum((rule.score for rule in matched), 0),
            matched_rules=matched,
        )

    def explain_score(self, breakdown: ScoreBreakdown) -> str:
        """Get a detailed explanation of a scoring breakdown."""
        lines = [f"Total Score: {breakdown.total_score}", "", "Matched Rules:"]

        if not breakdown.matched_rules:
            lines.append("  (none)")
        else:
            for rule in sorted(breakdown.matched_rules, key=lambda r: r.score, reverse=True):
                sign = "+" if rule.score > 0 else ""
                operator = rule.operator.value if isinstance(rule.operator, Operator) else rule.operator
                lines.append(f"  {sign}{rule.score}: {rule.field} {operator} {rule.value!r}")

        return "\n".join(lines)


def score_record(record: Mapping[str, Any], rules: List[ScoringRule]) -> float:
    """Quick helper to score a record against a rule list."""
    return RuleScorer().score(record, rules)
