import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base

class ProjectMember(Base):
    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "profile_id", name="project_members_project_id_profile_id_unique"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id"), nullable=False)
    profile_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    invite_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("team_invites.id"), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    project = relationship("Project", back_populates="members")
    profile = relationship("Profile")
    invite = relationship("TeamInvite")
