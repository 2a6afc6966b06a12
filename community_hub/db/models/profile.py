import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column
from community_hub.db.models._base import Base
from community_hub.db.enums import UserRole, ExperienceLevel

class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (
        UniqueConstraint("clerk_id", name="profiles_clerk_id_unique"),
        UniqueConstraint("username", name="profiles_username_unique"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    clerk_id: Mapped[str] = mapped_column(String(128), nullable=False)
    username: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    display_name: Mapped[str] = mapped_column(String(256), nullable=False)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    github_handle: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    twitter_handle: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    experience_level: Mapped[Optional[ExperienceLevel]] = mapped_column(
        SAEnum(ExperienceLevel, name="experience_level"), nullable=True
    )
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole, name="user_role"), nullable=False, default=UserRole.USER)

    banned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    banned_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    ban_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hidden_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    hidden_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, server_default=func.now(), onupdate=func.now()
    )
