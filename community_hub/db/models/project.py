import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base
from community_hub.db.enums import StartingPoint

class Project(Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    starting_point: Mapped[Optional[StartingPoint]] = mapped_column(SAEnum(StartingPoint, name="starting_point"), nullable=True)
    github_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    live_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    owner = relationship("Profile")
    members: Mapped[List["ProjectMember"]] = relationship(back_populates="project")
    invites: Mapped[List["TeamInvite"]] = relationship(back_populates="project")
