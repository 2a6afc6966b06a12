import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Enum as SAEnum, DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from community_hub.db.models._base import Base
from community_hub.db.enums import EventStatus

class Event(Base):
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    registration_opens_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    registration_closes_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    status: Mapped[EventStatus] = mapped_column(SAEnum(EventStatus, name="event_status"), nullable=False, default=EventStatus.DRAFT)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    registrations: Mapped[List["EventRegistration"]] = relationship(back_populates="event")
