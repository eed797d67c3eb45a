"""Pydantic models for scoring and transition request/response."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class CalculateScoreRequest(BaseModel):
    enquiry_data: Optional[Dict[str, Any]] = Field(
        None,
        description="Flat field -> value map of the enquiry being scored",
    )


class PriorityScoreItem(BaseModel):
    priority_type: str
    name: str
    display_label: str
    score: float
    color_code: str


class CalculateScoreData(BaseModel):
    all_scores: List[PriorityScoreItem]
    selected_priority: Optional[PriorityScoreItem] = None
    total_score: float


class CalculateScoreResponse(BaseModel):
    success: bool
    data: CalculateScoreData


class TransitionCheckRequest(BaseModel):
    record: Dict[str, Any] = Field(default_factory=dict)
    target_status: str = Field(..., min_length=1)
    actor_role: Optional[str] = None


class AvailableTransitionsRequest(BaseModel):
    record: Dict[str, Any] = Field(default_factory=dict)
    actor_role: Optional[str] = None


class DefinitionListResponse(BaseModel):
    success: bool
    count: int
    data: List[Dict[str, Any]]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str
