from sqlalchemy import Column, ForeignKey, DateTime, String, JSON, UniqueConstraint
from tripplanner.core.database import Base, new_id, utcnow
import enum
import sqlalchemy as sa


class ChecklistType(str, enum.Enum):
    VISA = "visa"
    HEALTH = "health"
    DOCUMENTS = "documents"
    PACKING = "packing"


class TripChecklist(Base):
    __tablename__ = "trip_checklists"

    id = Column(String(36), primary_key=True, default=new_id)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    type = Column(
        sa.Enum(ChecklistType, name="checklisttype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    # [{"id", "text", "checked"}], replaced whole on every write
    items = Column(JSON, nullable=False)
    updated_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    updated_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("trip_id", "type", name="uq_trip_checklist_type"),
    )
