"""Core priority scoring and status transition engine."""

from .operators import Operator, SCORING_OPERATORS, TRANSITION_OPERATORS, evaluate_condition
from .scorer import RuleScorer, ScoringRule, ScoreBreakdown, score_record
from .priority import (
    ClassificationResult,
    DisplayLabel,
    PriorityClassifier,
    PriorityTier,
    ScoreRange,
    TierMatch,
    classify,
)
from .transitions import (
    AllowedTransition,
    DenialReason,
    StatusCategory,
    StatusDefinition,
    TransitionCondition,
    TransitionDecision,
    TransitionValidator,
    can_transition,
)
from .definitions import ConfigurationError, DefinitionStore, ProtectedStatusError
from .profiles import ProfileKind, PROFILE_TYPE_REFS, resolve_profile_ref

__all__ = [
    "Operator",
    "SCORING_OPERATORS",
    "TRANSITION_OPERATORS",
    "evaluate_condition",
    "RuleScorer",
    "ScoringRule",
    "ScoreBreakdown",
    "score_record",
    "ClassificationResult",
    "DisplayLabel",
    "PriorityClassifier",
    "PriorityTier",
    "ScoreRange",
    "TierMatch",
    "classify",
    "AllowedTransition",
    "DenialReason",
    "StatusCategory",
    "StatusDefinition",
    "TransitionCondition",
    "TransitionDecision",
    "TransitionValidator",
    "can_transition",
    "ConfigurationError",
    "DefinitionStore",
    "ProtectedStatusError",
    "ProfileKind",
    "PROFILE_TYPE_REFS",
    "resolve_profile_ref",
]
