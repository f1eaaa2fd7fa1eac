from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from tripplanner.models.trips.trip_member import TripRole
from tripplanner.schemas.trip.plan import PlanOut
from tripplanner.schemas.trip.trip_member import MemberOut
from tripplanner.schemas.user.user import UserProfile


class HomeBase(BaseModel):
    name: str
    lat: float
    lng: float
    city: str


class TripBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: str
    end_date: str
    cover_image_url: Optional[str] = None
    home_base: Optional[HomeBase] = None
    destination: Optional[str] = None
    traveler_info: Optional[str] = None
    interests: Optional[str] = None
    timezone: Optional[str] = None


class TripCreate(TripBase):
    pass


class TripUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    cover_image_url: Optional[str] = None
    home_base: Optional[HomeBase] = None
    destination: Optional[str] = None
    traveler_info: Optional[str] = None
    interests: Optional[str] = None
    timezone: Optional[str] = None


class TripResponse(TripBase):
    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MyTripResponse(TripResponse):
    role: TripRole


class TripWithOwner(TripResponse):
    owner: Optional[UserProfile] = None
    role: TripRole


class TripDetailResponse(BaseModel):
    trip: TripResponse
    role: TripRole
    can_edit: bool
    plans: List[PlanOut]
    members: List[MemberOut]
