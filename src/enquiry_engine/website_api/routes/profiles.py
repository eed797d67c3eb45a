"""Profile type reference routes."""

from fastapi import APIRouter, Depends
from ...core.profiles import PROFILE_TYPE_REFS
from ..middleware.auth import require_client

router = APIRouter(prefix="/v1/profile-types", tags=["profiles"])


@router.get("")
async def profile_types(_auth=Depends(require_client)):
    """Map each linkable profile kind to its target collection."""
    return {
        "success": True,
        "data": {kind.value: ref for kind, ref in PROFILE_TYPE_REFS.items()},
    }
