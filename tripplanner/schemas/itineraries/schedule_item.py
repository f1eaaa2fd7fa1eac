from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class ScheduleItemCreate(BaseModel):
    plan_id: str
    day_date: str
    title: str
    start_time: str
    end_time: str
    location_id: Optional[str] = None
    notes: Optional[str] = None
    is_flexible: bool = False


class ScheduleItemUpdate(BaseModel):
    title: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location_id: Optional[str] = None
    notes: Optional[str] = None
    is_flexible: Optional[bool] = None
    day_date: Optional[str] = None


class ScheduleReorderRequest(BaseModel):
    plan_id: str
    day_date: str
    ordered_ids: List[str]


class MoveItemRequest(BaseModel):
    target_plan_id: str
    target_day_date: Optional[str] = None


class ScheduleItemOut(BaseModel):
    id: str
    trip_id: str
    plan_id: str
    day_date: str
    location_id: Optional[str] = None
    title: str
    start_time: str
    end_time: str
    notes: Optional[str] = None
    is_flexible: bool
    order: int
    revision: int
    ai_generated: bool
    created_by: str
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PlanSummary(BaseModel):
    id: str
    name: str
    color: str
    order: int


class LocationSummary(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    category: Optional[str] = None


class ScheduleItemWithContext(ScheduleItemOut):
    plan: Optional[PlanSummary] = None
    location: Optional[LocationSummary] = None


class AIItineraryActivity(BaseModel):
    title: str
    start_time: str
    end_time: str
    location_name: Optional[str] = None
    notes: Optional[str] = None
    is_flexible: bool = False


class AIItineraryDay(BaseModel):
    day_date: str
    activities: List[AIItineraryActivity]


class AIItineraryCreate(BaseModel):
    plan_id: str
    days: List[AIItineraryDay]
