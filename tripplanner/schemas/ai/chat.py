from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from tripplanner.models.ai.chat_message import ChatRole


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)


class ChatResponse(BaseModel):
    content: List[Dict[str, Any]]
    stop_reason: Optional[str] = None


class ChatMessageOut(BaseModel):
    id: str
    trip_id: str
    user_id: str
    role: ChatRole
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ClearedResponse(BaseModel):
    success: bool = True
    removed: int
