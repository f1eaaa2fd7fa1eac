from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from tripplanner.models.trips.trip_destination import TravelMode


class DestinationCreate(BaseModel):
    name: str
    lat: float
    lng: float
    place_id: Optional[str] = None
    address: Optional[str] = None
    category: Optional[str] = None
    travel_mode: TravelMode = TravelMode.DRIVING


class DestinationUpdate(BaseModel):
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None
    category: Optional[str] = None
    travel_mode: Optional[TravelMode] = None


class DestinationOut(BaseModel):
    id: str
    trip_id: str
    name: str
    lat: float
    lng: float
    place_id: Optional[str] = None
    address: Optional[str] = None
    category: Optional[str] = None
    travel_mode: TravelMode
    order: int
    revision: int
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
