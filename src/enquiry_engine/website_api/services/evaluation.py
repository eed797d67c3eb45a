"""Scoring and transition checks backed by the definition store."""

import logging
from typing import Any, Dict, List, Optional

from ...core.definitions import DefinitionStore
from ...core.priority import ClassificationResult, PriorityClassifier
from ...core.transitions import TransitionDecision, TransitionValidator
from ..config import settings

logger = logging.getLogger(__name__)

_store: Optional[DefinitionStore] = None

_classifier = PriorityClassifier()
_validator = TransitionValidator()


def get_definition_store() -> DefinitionStore:
    """Get the process-wide definition store (FastAPI dependency)."""
    global _store
    if _store is None:
        _store = DefinitionStore(settings.definitions_path)
    return _store


def calculate_priority(store: DefinitionStore, enquiry_data: Optional[Dict[str, Any]]) -> ClassificationResult:
    """Classify an enquiry against the active priority score types.

    Raises ValueError when no enquiry data is supplied.
    """
    if enquiry_data is None:
        raise ValueError("Enquiry data is required")
    return _classifier.classify(enquiry_data, store.active_tiers())


def check_transition(
    store: DefinitionStore,
    status_name: str,
    record: Dict[str, Any],
    target_status: str,
    actor_role: Optional[str],
) -> TransitionDecision:
    """Validate a status change for a record currently in status_name.

    Raises LookupError when the current status is not defined.
    """
    status = store.get_status(status_name)
    if status is None:
        raise LookupError(f"Status type not found: {status_name}")
    return _validator.can_transition(record, status, target_status, actor_role)


def list_available_transitions(
    store: DefinitionStore,
    status_name: str,
    record: Dict[str, Any],
    actor_role: Optional[str],
) -> List[str]:
    """List target statuses the actor may move the record to."""
    status = store.get_status(status_name)
    if status is None:
        raise LookupError(f"Status type not found: {status_name}")
    return _validator.available_transitions(record, status, actor_role)
