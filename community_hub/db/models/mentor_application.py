import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, JSON, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base
from community_hub.db.enums import MentorApplicationStatus

class MentorApplication(Base):
    __tablename__ = "mentor_applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    discord_handle: Mapped[str] = mapped_column(String(64), nullable=False)
    mentor_types: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    background: Mapped[str] = mapped_column(Text, nullable=False)
    availability: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[MentorApplicationStatus] = mapped_column(
        SAEnum(MentorApplicationStatus, name="mentor_application_status"),
        nullable=False,
        default=MentorApplicationStatus.PENDING,
    )
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    reviewer = relationship("Profile")
