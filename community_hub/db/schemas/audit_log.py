# db/schemas/audit_log.py
import uuid
from datetime import datetime
from typing import Optional
from ._base import OrmModel

class AuditLogBase(OrmModel):
    actor_profile_id: uuid.UUID
    action: str
    target_profile_id: Optional[uuid.UUID] = None
    details: Optional[str] = None

class AuditLogCreate(AuditLogBase): ...
class AuditLogRead(AuditLogBase):
    id: uuid.UUID
    created_at: datetime
