from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, JSON
from tripplanner.core.database import Base, utcnow


class TripActivity(Base):
    """Append-only audit row. The integer key doubles as commit order."""
    __tablename__ = "trip_activity"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    # stored as text so new action kinds need no migration
    action = Column(String(64), nullable=False, index=True)
    target_id = Column(String(36), nullable=True)
    target_type = Column(String(32), nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)

