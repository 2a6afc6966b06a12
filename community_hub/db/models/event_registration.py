import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base
from community_hub.db.enums import TeamPreference, CommitmentLevel

class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "profile_id", name="event_registrations_event_id_profile_id_unique"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("events.id"), nullable=False)
    profile_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    team_preference: Mapped[TeamPreference] = mapped_column(SAEnum(TeamPreference, name="team_preference"), nullable=False)
    commitment_level: Mapped[Optional[CommitmentLevel]] = mapped_column(
        SAEnum(CommitmentLevel, name="commitment_level"), nullable=True
    )
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    event = relationship("Event", back_populates="registrations")
