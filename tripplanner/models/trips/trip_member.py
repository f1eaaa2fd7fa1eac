from sqlalchemy import Column, ForeignKey, DateTime, String, UniqueConstraint
from tripplanner.core.database import Base, new_id, utcnow
import enum
import sqlalchemy as sa


class TripRole(str, enum.Enum):
    OWNER = "owner"
    EDITOR = "editor"
    COMMENTER = "commenter"
    VIEWER = "viewer"


class MemberStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


# roles that may change trip content
EDIT_ROLES = (TripRole.OWNER, TripRole.EDITOR)
COMMENT_ROLES = (TripRole.OWNER, TripRole.EDITOR, TripRole.COMMENTER)


class TripMember(Base):
    __tablename__ = "trip_members"

    id = Column(String(36), primary_key=True, default=new_id)

    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    # null until an email invitation is claimed by a registered user
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    invited_email = Column(String, nullable=True, index=True)

    triprole_enum = sa.Enum(
        TripRole,
        name="triprole",
        values_callable=lambda obj: [e.value for e in obj]
    )
    memberstatus_enum = sa.Enum(
        MemberStatus,
        name="memberstatus",
        values_callable=lambda obj: [e.value for e in obj]
    )
    role = Column(triprole_enum, nullable=False)
    status = Column(memberstatus_enum, nullable=False, default=MemberStatus.PENDING)

    invited_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    invited_at = Column(DateTime, default=utcnow)
    accepted_at = Column(DateTime, nullable=True)

    # To ensure no duplicate members in a trip
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_user"),
    )

