from sqlalchemy import Column, String, Boolean, DateTime
from tripplanner.core.database import Base, new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    def to_profile(self):
        return {"id": self.id, "name": self.name, "email": self.email, "avatar_url": self.avatar_url}
