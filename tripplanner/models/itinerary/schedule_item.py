from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, Boolean, Text, Index
from tripplanner.core.database import Base, new_id, utcnow


class TripScheduleItem(Base):
    __tablename__ = "trip_schedule_items"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("trip_plans.id"), nullable=False)
    day_date = Column(String(10), nullable=False)
    location_id = Column(String(36), ForeignKey("trip_locations.id"), nullable=True)
    title = Column(String, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    notes = Column(Text, nullable=True)
    is_flexible = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)
    revision = Column(Integer, nullable=False, default=0)
    ai_generated = Column(Boolean, nullable=False, default=False)

    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    updated_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("ix_schedule_plan_day", "plan_id", "day_date"),
    )

