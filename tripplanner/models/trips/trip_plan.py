from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, Boolean, Text
from tripplanner.core.database import Base, new_id, utcnow


class TripPlan(Base):
    __tablename__ = "trip_plans"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String(16), nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)
    revision = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)
