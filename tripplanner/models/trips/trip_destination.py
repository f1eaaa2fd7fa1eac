from sqlalchemy import Column, String, ForeignKey, DateTime, Float, Integer
from tripplanner.core.database import Base, new_id, utcnow
import enum
import sqlalchemy as sa


class TravelMode(str, enum.Enum):
    DRIVING = "DRIVING"
    TRANSIT = "TRANSIT"
    BICYCLING = "BICYCLING"
    WALKING = "WALKING"


class TripDestination(Base):
    """Places the family commutes to from the home base, shown in drag order."""
    __tablename__ = "trip_destinations"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    place_id = Column(String, nullable=True)
    address = Column(String, nullable=True)
    category = Column(String, nullable=True)
    travel_mode = Column(
        sa.Enum(TravelMode, name="travelmode", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=TravelMode.DRIVING,
    )
    order = Column(Integer, nullable=False, default=0)
    revision = Column(Integer, nullable=False, default=0)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)
