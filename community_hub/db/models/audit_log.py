import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base

class AdminAuditLog(Base):
    __tablename__ = "admin_audit_log"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_profile_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    target_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    # "metadata" is reserved on declarative classes
    details: Mapped[Optional[str]] = mapped_column("metadata", Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    actor = relationship("Profile", foreign_keys=[actor_profile_id])
    target = relationship("Profile", foreign_keys=[target_profile_id])
