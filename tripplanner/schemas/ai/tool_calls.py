from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
import enum

from tripplanner.schemas.itineraries.schedule_item import AIItineraryDay
from tripplanner.schemas.trip.location import AISuggestedLocation


class AddTripLocationsInput(BaseModel):
    locations: List[AISuggestedLocation] = Field(..., min_length=1)


class CreateItineraryInput(BaseModel):
    days: List[AIItineraryDay] = Field(..., min_length=1)
    # falls back to the trip's default plan
    plan_id: Optional[str] = None


class UndoAction(BaseModel):
    kind: Literal["remove_locations", "delete_schedule_items"]
    ids: List[str]


class ToolCallResult(BaseModel):
    tool_name: str
    tool_use_id: Optional[str] = None
    success: bool
    message: str
    created_ids: List[str] = []
    undo_action: Optional[UndoAction] = None


class BatchStatus(str, enum.Enum):
    OK = "ok"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


class ToolBatchRequest(BaseModel):
    # raw content blocks as returned by the chat endpoint
    content: List[Dict[str, Any]]


class ToolBatchResponse(BaseModel):
    status: BatchStatus
    results: List[ToolCallResult]


class UndoRequest(BaseModel):
    undo_action: UndoAction
