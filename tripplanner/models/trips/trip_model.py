from sqlalchemy import Column, String, Float, ForeignKey, DateTime, Text
from tripplanner.core.database import Base, new_id, utcnow


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(String(10), nullable=False)
    end_date = Column(String(10), nullable=False)
    cover_image_url = Column(String, nullable=True)

    # optional home base
    home_base_name = Column(String, nullable=True)
    home_base_lat = Column(Float, nullable=True)
    home_base_lng = Column(Float, nullable=True)
    home_base_city = Column(String, nullable=True)

    destination = Column(String, nullable=True)
    traveler_info = Column(Text, nullable=True)
    interests = Column(Text, nullable=True)
    timezone = Column(String, nullable=True)

    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    @property
    def home_base(self):
        if self.home_base_name is None:
            return None
        return {
            "name": self.home_base_name,
            "lat": self.home_base_lat,
            "lng": self.home_base_lng,
            "city": self.home_base_city,
        }

    def to_dict(self):
        """Convert Trip instance to dictionary for caching"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "cover_image_url": self.cover_image_url,
            "home_base": self.home_base,
            "destination": self.destination,
            "traveler_info": self.traveler_info,
            "interests": self.interests,
            "timezone": self.timezone,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
