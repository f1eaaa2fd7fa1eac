from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Text
from tripplanner.core.database import Base, new_id, utcnow


class TripComment(Base):
    __tablename__ = "trip_comments"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    # a comment hangs off a plan, a schedule item, or a bare day
    plan_id = Column(String(36), ForeignKey("trip_plans.id"), nullable=True, index=True)
    schedule_item_id = Column(String(36), ForeignKey("trip_schedule_items.id"), nullable=True, index=True)
    day_date = Column(String(10), nullable=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_resolved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

