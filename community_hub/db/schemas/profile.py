import uuid
from datetime import datetime
from typing import Optional
from community_hub.db.schemas._base import OrmModel
from community_hub.db.enums import UserRole
from community_hub.utils.sentinels import Missing

class ProfileBase(OrmModel):
    clerk_id: str
    username: Optional[str] = None
    display_name: str
    avatar_url: Optional[str] = None
    role: UserRole = UserRole.USER

class ProfileCreate(ProfileBase): ...

class ProfileUpdate(OrmModel):
    id: uuid.UUID
    username: str | Missing | None = Missing()
    display_name: str | Missing = Missing()
    avatar_url: str | Missing | None = Missing()
    role: UserRole | Missing = Missing()
    banned_at: datetime | Missing | None = Missing()
    banned_by: uuid.UUID | Missing | None = Missing()
    ban_reason: str | Missing | None = Missing()
    hidden_at: datetime | Missing | None = Missing()
    hidden_by: uuid.UUID | Missing | None = Missing()

class ProfileRead(ProfileBase):
    id: uuid.UUID
    banned_at: Optional[datetime] = None
    banned_by: Optional[uuid.UUID] = None
    ban_reason: Optional[str] = None
    hidden_at: Optional[datetime] = None
    hidden_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_banned(self) -> bool:
        return self.banned_at is not None

    @property
    def is_hidden(self) -> bool:
        return self.hidden_at is not None
