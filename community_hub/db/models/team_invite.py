import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base
from community_hub.db.enums import InviteStatus, InviteType

class TeamInvite(Base):
    __tablename__ = "team_invites"
    __table_args__ = (
        Index("idx_team_invites_recipient_status", "recipient_id", "type", "status"),
        Index("idx_team_invites_sender_status", "sender_id", "status"),
        Index("idx_team_invites_project_status", "project_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id"), nullable=False)
    sender_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    recipient_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    type: Mapped[InviteType] = mapped_column(SAEnum(InviteType, name="invite_type"), nullable=False)
    status: Mapped[InviteStatus] = mapped_column(SAEnum(InviteStatus, name="invite_status"), nullable=False, default=InviteStatus.PENDING)
    token: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    project = relationship("Project", back_populates="invites")
    sender = relationship("Profile", foreign_keys=[sender_id])
    recipient = relationship("Profile", foreign_keys=[recipient_id])
