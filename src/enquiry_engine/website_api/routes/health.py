"""Liveness and readiness routes (unauthenticated)."""

import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core.definitions import ConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "healthy", "service": "enquiry-engine-api", "version": "1.0.0"}


@router.get("/ready")
async def ready():
    """Ready once the definitions file loads and validates; 503 otherwise."""
    from ..services.evaluation import get_definition_store

    try:
        store = get_definition_store()
    except (ConfigurationError, RuntimeError) as e:
        logger.error(f"Not ready: {e}")
        return JSONResponse(status_code=503, content={"status": "not_ready", "detail": str(e)})

    return {
        "status": "ready",
        "priority_score_types": len(store.active_tiers()),
        "status_types": len(store.active_statuses()),
    }
