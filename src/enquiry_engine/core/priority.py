"""Priority tier classification for incoming enquiries."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .scorer import RuleScorer, ScoringRule

logger = logging.getLogger(__name__)


class DisplayLabel(Enum):
    """Priority labels shown to users."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class ScoreRange:
    """Inclusive score band that a tier claims."""

    min: float
    max: float

    def contains(self, score: float) -> bool:
        """Check if score lies within the band (both bounds inclusive)."""
        return self.min <= score <= self.max


@dataclass(frozen=True)
class PriorityTier:
    """An administrator-defined priority tier with its scoring rules."""

    id: str
    name: str
    score_range: ScoreRange
    display_label: DisplayLabel = DisplayLabel.MEDIUM
    scoring_rules: Tuple[ScoringRule, ...] = field(default_factory=tuple)
    is_active: bool = True
    description: str = ""
    color_code: str = "#808080"
    sla_hours: int = 24

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color_code": self.color_code,
            "is_active": self.is_active,
            "score_range": {"min": self.score_range.min, "max": self.score_range.max},
            "display_label": self.display_label.value,
            "sla_hours": self.sla_hours,
            "scoring_rules": [rule.to_dict() for rule in self.scoring_rules],
        }


@dataclass(frozen=True)
class TierMatch:
    """A tier whose score range contains the record's score for that tier."""

    tier: PriorityTier
    score: float

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as a calculate-score response item."""
        return {
            "priority_type": self.tier.id,
            "name": self.tier.name,
            "display_label": self.tier.display_label.value,
            "score": self.score,
            "color_code": self.tier.color_code,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """All matching tiers and the one selected for the record."""

    all_matches: Tuple[TierMatch, ...] = field(default_factory=tuple)
    selected: Optional[TierMatch] = None

    @property
    def total_score(self) -> float:
        """Score of the selected tier, or 0 when nothing matched."""
        return self.selected.score if self.selected else 0

    @property
    def display_label(self) -> Optional[DisplayLabel]:
        """Label of the selected tier, or None when nothing matched."""
        return self.selected.tier.display_label if self.selected else None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the calculate-score response field names."""
        return {
            "all_scores": [match.to_dict() for match in self.all_matches],
            "selected_priority": self.selected.to_dict() if self.selected else None,
            "total_score": self.total_score,
        }


def _prefer(best: Optional[TierMatch], candidate: TierMatch) -> TierMatch:
    # Ties keep the earlier tier; only a strictly higher score replaces it
    if best is None or candidate.score > best.score:
        return candidate
    return best


class PriorityClassifier:
    """Scores a record against every active tier and selects the best one."""

    def __init__(self, scorer: Optional[RuleScorer] = None):
        """Initialize with an optional custom rule scorer."""
        self.scorer = scorer or RuleScorer()

    def score_tiers(self, record: Mapping[str, Any], tiers: Sequence[PriorityTier]) -> List[TierMatch]:
        """Score every active tier in input order, matching or not."""
        if tiers is None:
            raise TypeError("A tier snapshot is required for classification")
        return [
            TierMatch(tier=tier, score=self.scorer.score(record, tier.scoring_rules))
            for tier in tiers
            if tier.is_active
        ]

    def classify(self, record: Mapping[str, Any], tiers: Sequence[PriorityTier]) -> ClassificationResult:
        """Classify a record into a priority tier.

        Tiers are processed in the order supplied. A tier matches when its
        inclusive score range contains the score computed from its own rules.
        The selected tier is the first one to reach the highest score.
        """
        matches = tuple(
            scored for scored in self.score_tiers(record, tiers)
            if scored.tier.score_range.contains(scored.score)
        )
        selected = reduce(_prefer, matches, None)

        if selected:
            logger.info(
                f"Classified record as '{selected.tier.name}' "
                f"({selected.tier.display_label.value}) with score {selected.score}"
            )
        else:
            logger.info("No active priority tier matched the record")

        return ClassificationResult(all_matches=matches, selected=selected)


def classify(record: Mapping[str, Any], tiers: Sequence[PriorityTier]) -> ClassificationResult:
    """Quick helper to classify a record with the default scorer."""
    return PriorityClassifier().classify(record, tiers)
