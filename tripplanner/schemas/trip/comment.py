from pydantic import BaseModel
from typing import Dict, Optional
from datetime import datetime

from tripplanner.schemas.user.user import UserProfile


class CommentCreate(BaseModel):
    content: str
    plan_id: Optional[str] = None
    schedule_item_id: Optional[str] = None
    day_date: Optional[str] = None


class CommentUpdate(BaseModel):
    content: str


class CommentOut(BaseModel):
    id: str
    trip_id: str
    plan_id: Optional[str] = None
    schedule_item_id: Optional[str] = None
    day_date: Optional[str] = None
    author_id: str
    content: str
    is_resolved: bool
    created_at: datetime
    updated_at: datetime
    author: Optional[UserProfile] = None

    model_config = {"from_attributes": True}


class CommentCounts(BaseModel):
    counts: Dict[str, int]
