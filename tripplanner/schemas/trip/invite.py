from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from tripplanner.models.trips.trip_member import TripRole
from tripplanner.schemas.trip.trip_member import GrantableRole


class InviteLinkCreate(BaseModel):
    role: GrantableRole = "viewer"
    expires_in_days: Optional[int] = Field(None, gt=0)
    max_uses: Optional[int] = Field(None, gt=0)


class InviteLinkOut(BaseModel):
    id: str
    trip_id: str
    token: str
    role: TripRole
    created_by: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = None
    use_count: int

    model_config = {"from_attributes": True}


class JoinViaLink(BaseModel):
    token: str


class JoinResponse(BaseModel):
    trip_id: str
    role: TripRole
    already_member: bool = False
