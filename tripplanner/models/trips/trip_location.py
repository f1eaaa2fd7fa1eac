from sqlalchemy import Column, String, ForeignKey, DateTime, Float, Boolean, Text, JSON
from tripplanner.core.database import Base, new_id, utcnow


class TripLocation(Base):
    __tablename__ = "trip_locations"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    # reference into an external place catalog, when the location came from one
    catalog_location_id = Column(String, nullable=True)

    name = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    category = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    added_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    added_at = Column(DateTime, default=utcnow)

    ai_suggested = Column(Boolean, nullable=False, default=False)
    ai_reason = Column(Text, nullable=True)
    toddler_rating = Column(Float, nullable=True)
    estimated_duration = Column(String, nullable=True)
    tips = Column(JSON, nullable=True)
