from sqlalchemy import Column, String, ForeignKey, DateTime, Integer
from tripplanner.core.database import Base, new_id, utcnow
from tripplanner.models.trips.trip_member import TripMember


class TripInviteLink(Base):
    __tablename__ = "trip_invite_links"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    token = Column(String, unique=True, index=True, nullable=False)
    role = Column(TripMember.triprole_enum, nullable=False)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime, nullable=True)
    max_uses = Column(Integer, nullable=True)
    use_count = Column(Integer, nullable=False, default=0)

    def is_expired(self, now) -> bool:
        return self.expires_at is not None and self.expires_at < now

    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.use_count >= self.max_uses
