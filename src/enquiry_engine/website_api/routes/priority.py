"""Priority score type routes."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from ...core.definitions import DefinitionStore
from ..middleware.auth import require_client
from ..schemas.evaluation import (
    CalculateScoreRequest,
    CalculateScoreResponse,
    DefinitionListResponse,
    ErrorResponse,
)
from ..services.evaluation import calculate_priority, get_definition_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/priority-score-types", tags=["priority"])


@router.get("/active", response_model=DefinitionListResponse)
async def active_priority_score_types(
    store: DefinitionStore = Depends(get_definition_store),
    _auth=Depends(require_client),
):
    """List active priority score types."""
    tiers = store.active_tiers()
    return {"success": True, "count": len(tiers), "data": [tier.to_dict() for tier in tiers]}


@router.post(
    "/calculate-score",
    response_model=CalculateScoreResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def calculate_score(
    payload: CalculateScoreRequest,
    store: DefinitionStore = Depends(get_definition_store),
    _auth=Depends(require_client),
):
    """Calculate the priority score for an enquiry.

    Every active priority score type is scored with its own rules; the
    response lists all matching types and the selected one.
    """
    try:
        result = calculate_priority(store, payload.enquiry_data)
        return {"success": True, "data": result.to_dict()}
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "validation_error", "detail": str(e)},
        )
    except Exception:
        logger.exception("Priority score calculation error")
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "server_error", "detail": "Internal processing error"},
        )
