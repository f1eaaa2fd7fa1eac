from sqlalchemy import Column, String, DateTime, JSON
from tripplanner.core.database import Base, new_id, utcnow


class DestinationContext(Base):
    __tablename__ = "destination_contexts"

    id = Column(String(36), primary_key=True, default=new_id)
    country_code = Column(String(8), unique=True, index=True, nullable=False)
    context = Column(JSON, nullable=False)
    generated_at = Column(DateTime, default=utcnow)
