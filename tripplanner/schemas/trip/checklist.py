from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from tripplanner.models.trips.trip_checklist import ChecklistType


class ChecklistItem(BaseModel):
    id: str
    text: str
    checked: bool = False


class ChecklistItemCreate(BaseModel):
    text: str = Field(..., max_length=200)


class ChecklistOut(BaseModel):
    type: ChecklistType
    items: List[ChecklistItem]
    # None while the checklist still shows the untouched defaults
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
