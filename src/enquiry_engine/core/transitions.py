"""Status transition rules - decides whether a status change is permitted."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .operators import Operator, evaluate_condition

logger = logging.getLogger(__name__)


class StatusCategory(Enum):
    """Business entity a status definition applies to."""

    LEAD = "lead"
    ENQUIRY = "enquiry"
    CUSTOMER = "customer"
    PROJECT = "project"
    PRODUCT = "product"
    SERVICE = "service"
    GENERAL = "general"


class DenialReason(Enum):
    """Why a transition was refused."""

    NO_SUCH_TRANSITION = "no-such-transition"
    ROLE_NOT_PERMITTED = "role-not-permitted"
    CONDITIONS_NOT_MET = "conditions-not-met"


@dataclass(frozen=True)
class TransitionCondition:
    """A field condition that must hold before a transition is allowed."""

    field: str
    operator: Union[Operator, str]
    value: Any = None

    def is_met(self, record: Mapping[str, Any]) -> bool:
        """Check whether the record satisfies this condition."""
        return evaluate_condition(record, self.field, self.operator, self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        operator = self.operator.value if isinstance(self.operator, Operator) else self.operator
        return {"field": self.field, "operator": operator, "value": self.value}


@dataclass(frozen=True)
class AllowedTransition:
    """A permitted move to another status, gated by role and conditions."""

    to_status: str
    roles: Tuple[str, ...] = field(default_factory=tuple)
    conditions: Tuple[TransitionCondition, ...] = field(default_factory=tuple)

    def permits_role(self, actor_role: Optional[str]) -> bool:
        """An empty role list allows any role."""
        return not self.roles or actor_role in self.roles

    def unmet_conditions(self, record: Mapping[str, Any]) -> Tuple[TransitionCondition, ...]:
        """Return the conditions the record fails (all conditions are checked)."""
        return tuple(condition for condition in self.conditions if not condition.is_met(record))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        return {
            "to_status": self.to_status,
            "roles": list(self.roles),
            "conditions": [condition.to_dict() for condition in self.conditions],
        }


@dataclass(frozen=True)
class StatusDefinition:
    """A configured status and the transitions allowed out of it."""

    id: str
    name: str
    category: StatusCategory = StatusCategory.LEAD
    is_system: bool = False
    is_active: bool = True
    allowed_transitions: Tuple[AllowedTransition, ...] = field(default_factory=tuple)
    description: str = ""
    color_code: str = "#808080"

    def find_transition(self, to_status: str) -> Optional[AllowedTransition]:
        """Get the first declared transition to the given status."""
        return next(
            (entry for entry in self.allowed_transitions if entry.to_status == to_status),
            None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color_code": self.color_code,
            "is_active": self.is_active,
            "is_system": self.is_system,
            "category": self.category.value,
            "allowed_transitions": [entry.to_dict() for entry in self.allowed_transitions],
        }


@dataclass(frozen=True)
class TransitionDecision:
    """Outcome of a transition check."""

    allowed: bool
    matched_transition: Optional[AllowedTransition] = None
    reason: Optional[DenialReason] = None
    failed_conditions: Tuple[TransitionCondition, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        """Human-readable explanation for callers surfacing a denial."""
        if self.allowed:
            return "Transition permitted"
        if self.reason == DenialReason.NO_SUCH_TRANSITION:
            return "Transition is not defined for the current status"
        if self.reason == DenialReason.ROLE_NOT_PERMITTED:
            return "Your role is not permitted to perform this transition"
        fields = ", ".join(condition.field for condition in self.failed_conditions)
        return f"Transition conditions not met: {fields}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses."""
        return {
            "allowed": self.allowed,
            "to_status": self.matched_transition.to_status if self.matched_transition else None,
            "reason": self.reason.value if self.reason else None,
            "failed_conditions": [condition.to_dict() for condition in self.failed_conditions],
            "message": self.message,
        }


class TransitionValidator:
    """Answers whether a record may move from one status to another."""

    def can_transition(
        self,
        record: Mapping[str, Any],
        status: StatusDefinition,
        target_status: str,
        actor_role: Optional[str],
    ) -> TransitionDecision:
        """Check a requested transition without applying it.

        The role gate is checked before the condition gate, so a record that
        fails both is reported as a role denial.
        """
        if status is None:
            raise TypeError("A status definition is required to validate a transition")

        entry = status.find_transition(target_status)
        if entry is None:
            decision = TransitionDecision(allowed=False, reason=DenialReason.NO_SUCH_TRANSITION)
        elif not entry.permits_role(actor_role):
            decision = TransitionDecision(
                allowed=False,
                matched_transition=entry,
                reason=DenialReason.ROLE_NOT_PERMITTED,
            )
        else:
            failed = entry.unmet_conditions(record)
            if failed:
                decision = TransitionDecision(
                    allowed=False,
                    matched_transition=entry,
                    reason=DenialReason.CONDITIONS_NOT_MET,
                    failed_conditions=failed,
                )
            else:
                decision = TransitionDecision(allowed=True, matched_transition=entry)

        logger.info(
            f"Transition '{status.name}' -> '{target_status}' for role '{actor_role}': "
            f"{'allowed' if decision.allowed else decision.reason.value}"
        )
        return decision

    def available_transitions(
        self,
        record: Mapping[str, Any],
        status: StatusDefinition,
        actor_role: Optional[str],
    ) -> List[str]:
        """List the target statuses currently permitted, in declared order."""
        if status is None:
            raise TypeError("A status definition is required to list transitions")

        # Only the first entry per target counts, matching find_transition()
        seen = set()
        available = []
        for entry in status.allowed_transitions:
            if entry.to_status in seen:
                continue
            seen.add(entry.to_status)
            if entry.permits_role(actor_role) and not entry.unmet_conditions(record):
                available.append(entry.to_status)
        return available


def can_transition(
    record: Mapping[str, Any],
    status: StatusDefinition,
    target_status: str,
    actor_role: Optional[str],
) -> TransitionDecision:
    """Quick helper to validate a transition with the default validator."""
    return TransitionValidator().can_transition(record, status, target_status, actor_role)
