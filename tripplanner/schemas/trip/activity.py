from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime

from tripplanner.schemas.user.user import UserProfile


class ActivityOut(BaseModel):
    id: int
    trip_id: str
    user_id: str
    action: str
    kind: str
    target_id: Optional[str] = None
    target_type: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
    user: Optional[UserProfile] = None
    description: str


class ActivityFeed(BaseModel):
    activities: List[ActivityOut]
    has_more: bool
    next_cursor: Optional[int] = None
    total: int


class ActivityCount(BaseModel):
    count: int
