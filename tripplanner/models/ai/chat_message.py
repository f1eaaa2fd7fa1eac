from sqlalchemy import Column, ForeignKey, DateTime, Integer, String, Text
from tripplanner.core.database import Base, new_id, utcnow
import enum
import sqlalchemy as sa


class ChatRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TripChatMessage(Base):
    """One turn of a member's conversation with the trip assistant."""
    __tablename__ = "trip_chat_messages"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(
        sa.Enum(ChatRole, name="chatrole", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    # position within the (trip, user) conversation
    seq = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)
