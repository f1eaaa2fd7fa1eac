from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Literal, Optional

from tripplanner.models.trips.trip_member import MemberStatus, TripRole
from tripplanner.schemas.user.user import UserProfile

# owner is never granted through an invitation
GrantableRole = Literal["editor", "commenter", "viewer"]


class MemberInvite(BaseModel):
    email: EmailStr
    role: GrantableRole = "viewer"


class RoleUpdate(BaseModel):
    role: GrantableRole


class MemberOut(BaseModel):
    id: str
    trip_id: str
    user_id: Optional[str] = None
    invited_email: Optional[str] = None
    role: TripRole
    status: MemberStatus
    invited_by: Optional[str] = None
    invited_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    user: Optional[UserProfile] = None

    model_config = {"from_attributes": True}


class PendingInviteOut(BaseModel):
    membership_id: str
    trip_id: str
    trip_name: str
    role: TripRole
    invited_at: Optional[datetime] = None
    inviter: Optional[UserProfile] = None
