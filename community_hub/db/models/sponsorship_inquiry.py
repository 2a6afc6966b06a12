import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Enum as SAEnum, DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base
from community_hub.db.enums import SponsorshipInquiryStatus

class SponsorshipInquiry(Base):
    __tablename__ = "sponsorship_inquiries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_name: Mapped[str] = mapped_column(String(256), nullable=False)
    contact_name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    website_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    offer_description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[SponsorshipInquiryStatus] = mapped_column(
        SAEnum(SponsorshipInquiryStatus, name="sponsorship_inquiry_status"),
        nullable=False,
        default=SponsorshipInquiryStatus.PENDING,
    )
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    reviewer = relationship("Profile")
