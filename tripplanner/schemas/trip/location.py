from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class LocationCreate(BaseModel):
    name: str
    lat: float
    lng: float
    category: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    catalog_location_id: Optional[str] = None


class LocationUpdate(BaseModel):
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class AISuggestedLocation(BaseModel):
    name: str
    lat: float
    lng: float
    category: Optional[str] = None
    description: Optional[str] = None
    toddler_rating: Optional[float] = None
    estimated_duration: Optional[str] = None
    tips: Optional[List[str]] = None
    ai_reason: Optional[str] = None


class AISuggestedLocationsCreate(BaseModel):
    locations: List[AISuggestedLocation]


class LocationOut(BaseModel):
    id: str
    trip_id: str
    catalog_location_id: Optional[str] = None
    name: str
    lat: float
    lng: float
    category: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    added_by: str
    added_at: datetime
    ai_suggested: bool
    ai_reason: Optional[str] = None
    toddler_rating: Optional[float] = None
    estimated_duration: Optional[str] = None
    tips: Optional[List[str]] = None

    model_config = {"from_attributes": True}
