from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from tripplanner.schemas.itineraries.schedule_item import ScheduleItemOut


class PlanCreate(BaseModel):
    name: str
    color: str = Field("#10B981", max_length=16)
    description: Optional[str] = None
    icon: Optional[str] = None


class PlanUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = Field(None, max_length=16)
    description: Optional[str] = None
    icon: Optional[str] = None


class PlanOut(BaseModel):
    id: str
    trip_id: str
    name: str
    color: str
    description: Optional[str] = None
    icon: Optional[str] = None
    created_by: str
    order: int
    is_default: bool
    revision: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PlanWithItems(PlanOut):
    schedule_items: List[ScheduleItemOut] = []
