"""Priority tier and status definitions: validation gate and JSON-backed store."""

import json
import logging
import math
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from .operators import Operator, SCORING_OPERATORS, TRANSITION_OPERATORS
from .priority import DisplayLabel, PriorityTier, ScoreRange
from .scorer import ScoringRule
from .transitions import AllowedTransition, StatusCategory, StatusDefinition, TransitionCondition

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"


class ConfigurationError(ValueError):
    """A tier or status definition failed validation."""


class ProtectedStatusError(PermissionError):
    """A system status was targeted by a mutation the actor may not perform."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def _require_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _optional_id(data: Dict[str, Any]) -> str:
    raw = data.get("id")
    return "" if raw is None else str(raw)


def _require_name(data: Dict[str, Any], kind: str) -> str:
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"{kind} must have a name")
    return name


def _parse_operator(raw: Any, allowed: FrozenSet[Operator]) -> Operator:
    try:
        operator = Operator(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid operator: {raw}")
    if operator not in allowed:
        raise ConfigurationError(f"Invalid operator: {raw}")
    return operator


def parse_scoring_rule(data: Dict[str, Any]) -> ScoringRule:
    """Validate and build a scoring rule."""
    data = _require_mapping(data, "Scoring rule")
    score = data.get("score")
    if not data.get("field") or not data.get("operator") or not _is_number(score):
        raise ConfigurationError("Each scoring rule must have field, operator, and score")
    if not math.isfinite(score):
        raise ConfigurationError(f"Scoring rule score must be finite: {score}")

    return ScoringRule(
        field=data["field"],
        operator=_parse_operator(data["operator"], SCORING_OPERATORS),
        value=data.get("value"),
        score=score,
    )


def parse_tier(data: Dict[str, Any]) -> PriorityTier:
    """Validate a stored priority score type document and build a tier."""
    data = _require_mapping(data, "Priority score type")
    name = _require_name(data, "Priority score type")

    label = data.get("display_label") or DisplayLabel.MEDIUM.value
    try:
        display_label = DisplayLabel(label)
    except ValueError:
        raise ConfigurationError(f"Invalid display label: {label}")

    score_range = data.get("score_range")
    if not isinstance(score_range, dict):
        raise ConfigurationError("Score range is required")
    low, high = score_range.get("min"), score_range.get("max")
    if not _is_number(low) or not _is_number(high) or math.isnan(low) or math.isnan(high):
        raise ConfigurationError("Score range must have numeric min and max values")
    if low >= high:
        raise ConfigurationError("Score range min must be less than max")

    return PriorityTier(
        id=_optional_id(data),
        name=name,
        score_range=ScoreRange(min=low, max=high),
        display_label=display_label,
        scoring_rules=tuple(
            parse_scoring_rule(rule)
            for rule in _require_list(data.get("scoring_rules"), "scoring_rules")
        ),
        is_active=data.get("is_active", True),
        description=data.get("description", ""),
        color_code=data.get("color_code", "#808080"),
        sla_hours=data.get("sla_hours", 24),
    )


def parse_transition(data: Dict[str, Any]) -> AllowedTransition:
    """Validate and build an allowed transition."""
    data = _require_mapping(data, "Transition")
    to_status = data.get("to_status")
    if not isinstance(to_status, str) or not to_status:
        raise ConfigurationError("Each transition must have a to_status")

    roles = _require_list(data.get("roles"), "Transition roles")
    if not all(isinstance(role, str) for role in roles):
        raise ConfigurationError(f"Transition roles must be strings: {roles}")

    conditions = []
    for condition in _require_list(data.get("conditions"), "Transition conditions"):
        condition = _require_mapping(condition, "Transition condition")
        if not condition.get("field") or not condition.get("operator"):
            raise ConfigurationError("Each condition must have field and operator")
        conditions.append(TransitionCondition(
            field=condition["field"],
            operator=_parse_operator(condition["operator"], TRANSITION_OPERATORS),
            value=condition.get("value"),
        ))

    return AllowedTransition(to_status=to_status, roles=tuple(roles), conditions=tuple(conditions))


def parse_status(data: Dict[str, Any]) -> StatusDefinition:
    """Validate a stored status type document and build a status definition."""
    data = _require_mapping(data, "Status type")
    name = _require_name(data, "Status type")

    category = data.get("category") or StatusCategory.LEAD.value
    try:
        category = StatusCategory(category)
    except ValueError:
        raise ConfigurationError(f"Invalid category: {category}")

    return StatusDefinition(
        id=_optional_id(data),
        name=name,
        category=category,
        is_system=data.get("is_system", False),
        is_active=data.get("is_active", True),
        allowed_transitions=tuple(
            parse_transition(entry)
            for entry in _require_list(data.get("allowed_transitions"), "allowed_transitions")
        ),
        description=data.get("description", ""),
        color_code=data.get("color_code", "#808080"),
    )


def _check_unique(values: Iterable[str], kind: str):
    seen = set()
    for value in values:
        if value in seen:
            raise ConfigurationError(f"Duplicate {kind}: {value}")
        seen.add(value)


def _next_id(prefix: str, existing: Iterable[str], today: Optional[datetime] = None) -> str:
    """Generate PREFIX-YYYYMMDD-NNNN, sequential per day."""
    date_str = (today or datetime.now()).strftime("%Y%m%d")
    stem = f"{prefix}-{date_str}-"
    sequence = 0
    for existing_id in existing:
        if existing_id.startswith(stem):
            suffix = existing_id[len(stem):]
            if suffix.isdigit():
                sequence = max(sequence, int(suffix))
    return f"{stem}{sequence + 1:04d}"


class DefinitionStore:
    """Persist priority tiers and status definitions as one JSON document."""

    def __init__(self, data_path: Optional[Path] = None):
        """Initialize store and load any saved definitions."""
        self.data_path = Path(data_path) if data_path else Path.home() / ".enquiry-engine" / "definitions.json"
        self.tiers: List[PriorityTier] = []
        self.statuses: List[StatusDefinition] = []
        self._load_data()

    def _load_data(self):
        """Load definitions from file, validating every entry."""
        if not self.data_path.exists():
            return

        try:
            with open(self.data_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Definitions file {self.data_path} is not valid JSON: {e}")

        data = _require_mapping(data, "Definitions file")
        self.tiers = [
            parse_tier(item)
            for item in _require_list(data.get("priority_score_types"), "priority_score_types")
        ]
        self.statuses = [
            parse_status(item)
            for item in _require_list(data.get("status_types"), "status_types")
        ]
        _check_unique((tier.name for tier in self.tiers), "priority score type name")
        _check_unique((status.name for status in self.statuses), "status type name")

        assigned = self._assign_missing_ids()
        _check_unique((tier.id for tier in self.tiers), "priority score type id")
        _check_unique((status.id for status in self.statuses), "status type id")
        if assigned:
            self.save()
        logger.info(
            f"Loaded {len(self.tiers)} priority score types and "
            f"{len(self.statuses)} status types from {self.data_path}"
        )

    def _assign_missing_ids(self) -> int:
        """Give hand-written definitions without an id a generated one."""
        assigned = 0
        for index, tier in enumerate(self.tiers):
            if not tier.id:
                self.tiers[index] = replace(tier, id=_next_id("PRI", (t.id for t in self.tiers)))
                logger.info(f"Assigned id {self.tiers[index].id} to priority score type '{tier.name}'")
                assigned += 1
        for index, status in enumerate(self.statuses):
            if not status.id:
                self.statuses[index] = replace(status, id=_next_id("STS", (s.id for s in self.statuses)))
                logger.info(f"Assigned id {self.statuses[index].id} to status type '{status.name}'")
                assigned += 1
        return assigned

    def save(self):
        """Save definitions to file."""
        self.data_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "priority_score_types": [tier.to_dict() for tier in self.tiers],
            "status_types": [status.to_dict() for status in self.statuses],
        }
        with open(self.data_path, 'w') as f:
            json.dump(data, f, indent=2)

    # === Priority score types ===

    def active_tiers(self) -> List[PriorityTier]:
        """Snapshot of active tiers in stored order."""
        return [tier for tier in self.tiers if tier.is_active]

    def get_tier(self, tier_id: str) -> Optional[PriorityTier]:
        return next((tier for tier in self.tiers if tier.id == tier_id), None)

    def add_tier(self, data: Dict[str, Any]) -> PriorityTier:
        """Validate and store a new priority tier."""
        tier = parse_tier(data)
        if any(existing.name == tier.name for existing in self.tiers):
            raise ConfigurationError(f"Duplicate priority score type name: {tier.name}")
        if tier.id and self.get_tier(tier.id) is not None:
            raise ConfigurationError(f"Duplicate priority score type id: {tier.id}")
        if not tier.id:
            tier = replace(tier, id=_next_id("PRI", (t.id for t in self.tiers)))

        self.tiers.append(tier)
        self.save()
        logger.info(f"Created priority score type {tier.id} ({tier.name})")
        return tier

    def toggle_tier(self, tier_id: str) -> PriorityTier:
        """Flip a tier's active flag; tiers are deactivated rather than deleted."""
        tier = self.get_tier(tier_id)
        if tier is None:
            raise KeyError(f"Priority score type not found with id of {tier_id}")

        updated = replace(tier, is_active=not tier.is_active)
        self.tiers[self.tiers.index(tier)] = updated
        self.save()
        logger.info(f"{'Activated' if updated.is_active else 'Deactivated'} priority score type: {updated.name}")
        return updated

    # === Status types ===

    def active_statuses(self, category: Optional[StatusCategory] = None) -> List[StatusDefinition]:
        """Snapshot of active statuses in stored order, optionally for one category."""
        return [
            status for status in self.statuses
            if status.is_active and (category is None or status.category == category)
        ]

    def get_status(self, name: str) -> Optional[StatusDefinition]:
        """Look up a status by name (falls back to id)."""
        for status in self.statuses:
            if status.name == name:
                return status
        return next((status for status in self.statuses if status.id == name), None)

    def add_status(self, data: Dict[str, Any]) -> StatusDefinition:
        """Validate and store a new status definition."""
        status = parse_status(data)
        if any(existing.name == status.name for existing in self.statuses):
            raise ConfigurationError(f"Duplicate status type name: {status.name}")
        if status.id and any(existing.id == status.id for existing in self.statuses):
            raise ConfigurationError(f"Duplicate status type id: {status.id}")
        if not status.id:
            status = replace(status, id=_next_id("STS", (s.id for s in self.statuses)))

        self.statuses.append(status)
        self.save()
        logger.info(f"Created status type {status.id} ({status.name})")
        return status

    def ensure_mutable(self, status: StatusDefinition, actor_role: Optional[str]):
        """Refuse modification of system statuses by anyone but an Admin."""
        if status.is_system and actor_role != ADMIN_ROLE:
            raise ProtectedStatusError("Cannot modify system status types")

    def update_status(self, name: str, data: Dict[str, Any], actor_role: Optional[str]) -> StatusDefinition:
        """Replace a status definition with a validated revision."""
        current = self.get_status(name)
        if current is None:
            raise KeyError(f"Status type not found: {name}")
        self.ensure_mutable(current, actor_role)

        merged = {**current.to_dict(), **data, "id": current.id}
        updated = parse_status(merged)
        if updated.name != current.name and self.get_status(updated.name) is not None:
            raise ConfigurationError(f"Duplicate status type name: {updated.name}")

        self.statuses[self.statuses.index(current)] = updated
        self.save()
        logger.info(f"Updated status type: {updated.name}")
        return updated

    def toggle_status(self, name: str, actor_role: Optional[str]) -> StatusDefinition:
        """Flip a status's active flag."""
        current = self.get_status(name)
        if current is None:
            raise KeyError(f"Status type not found: {name}")
        self.ensure_mutable(current, actor_role)

        updated = replace(current, is_active=not current.is_active)
        self.statuses[self.statuses.index(current)] = updated
        self.save()
        return updated

    def delete_status(self, name: str):
        """Delete a status definition. System statuses can never be deleted."""
        current = self.get_status(name)
        if current is None:
            raise KeyError(f"Status type not found: {name}")
        if current.is_system:
            raise ProtectedStatusError("Cannot delete system status types")

        self.statuses.remove(current)
        self.save()
        logger.info(f"Deleted status type: {current.name}")
