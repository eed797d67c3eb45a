"""Status type routes."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from ...core.definitions import DefinitionStore
from ...core.transitions import StatusCategory
from ..middleware.auth import require_client
from ..schemas.evaluation import (
    AvailableTransitionsRequest,
    DefinitionListResponse,
    ErrorResponse,
    TransitionCheckRequest,
)
from ..services.evaluation import check_transition, get_definition_store, list_available_transitions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/status-types", tags=["statuses"])


def _not_found(status_name: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": f"Status type not found: {status_name}"},
    )


@router.get("/active", response_model=DefinitionListResponse)
async def active_status_types(
    category: Optional[StatusCategory] = None,
    store: DefinitionStore = Depends(get_definition_store),
    _auth=Depends(require_client),
):
    """List active status types, optionally for a single category."""
    statuses = store.active_statuses(category)
    return {"success": True, "count": len(statuses), "data": [status.to_dict() for status in statuses]}


@router.post(
    "/{status_name}/can-transition",
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def can_transition(
    status_name: str,
    payload: TransitionCheckRequest,
    store: DefinitionStore = Depends(get_definition_store),
    _auth=Depends(require_client),
):
    """Check whether a record in status_name may move to the target status.

    A denied transition is reported as 403 so the caller does not persist it.
    """
    try:
        decision = check_transition(
            store, status_name, payload.record, payload.target_status, payload.actor_role
        )
    except LookupError:
        raise _not_found(status_name)

    if not decision.allowed:
        raise HTTPException(
            status_code=403,
            detail={"success": False, "error": decision.reason.value, "detail": decision.message},
        )
    return {"success": True, "data": decision.to_dict()}


@router.post("/{status_name}/available-transitions")
async def available_transitions(
    status_name: str,
    payload: AvailableTransitionsRequest,
    store: DefinitionStore = Depends(get_definition_store),
    _auth=Depends(require_client),
):
    """List the statuses the actor may move the record to right now."""
    try:
        targets = list_available_transitions(store, status_name, payload.record, payload.actor_role)
    except LookupError:
        raise _not_found(status_name)
    return {"success": True, "count": len(targets), "data": targets}
