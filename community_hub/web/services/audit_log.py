# web/services/audit_log.py
from __future__ import annotations

import json
import logging
import uuid
from contextvars import ContextVar, Token
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from typing import Any, ClassVar, Mapping, Optional, Sequence

from community_hub.db.database import DataBase
from community_hub.db.schemas.audit_log import AuditLogCreate, AuditLogRead
from community_hub.db.schemas.profile import ProfileRead


class AuditLogService:
    """
    Records admin actions in the ``admin_audit_log`` table.

    Every entry has an actor (the admin who acted) and usually a target profile.
    Free-form details are normalised into a JSON document before they are stored.
    The actor may be passed explicitly or taken from the per-request context bound
    by :class:`community_hub.web.middlewares.profile.ProfileMiddleware`. The context
    holds the identity-provider user id from the upstream auth layer; it is resolved
    to a stored profile when an entry is written.
    """

    _instance: ClassVar[Optional["AuditLogService"]] = None

    def __new__(cls) -> "AuditLogService":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return

        self._logger = logging.getLogger("community_hub.audit")
        # per-request actor context (clerk id of the signed-in user)
        self._actor_ctx: ContextVar[Optional[str]] = ContextVar("audit_actor", default=None)
        self._initialized = True

    @property
    def _database(self) -> DataBase:
        return DataBase()

    async def log(
        self,
        *,
        action: str,
        target: ProfileRead | uuid.UUID | None = None,
        actor: ProfileRead | uuid.UUID | None = None,
        metadata: Any | None = None,
    ) -> AuditLogRead:
        """
        Persist an audit entry.

        :param action: short machine-readable label (``ban_user``, ``hide_user``…)
        :param target: profile the action was applied to, if any
        :param actor: profile that performed the action; defaults to the profile of the bound actor
        :param metadata: arbitrary structure with details (serialised to JSON)
        :raises ValueError: if neither an explicit actor nor a stored profile for the bound one is available
        """
        actor_id = self._profile_id(actor)
        if actor_id is None:
            bound = await self._database.get_profile_by_clerk_id(self.current_actor())
            actor_id = bound.id if bound is not None else None
        if actor_id is None:
            raise ValueError(f"Audit entry '{action}' has no actor.")

        details = None
        if metadata is not None:
            details = json.dumps(self._serialize(metadata), sort_keys=True)

        target_id = self._profile_id(target)
        entry = await self._database.create_audit_log(
            AuditLogCreate(
                actor_profile_id=actor_id,
                action=action,
                target_profile_id=target_id,
                details=details,
            )
        )
        self._logger.info(
            "AUDIT action=%s actor=%s target=%s entry=%s",
            action,
            actor_id,
            target_id or "-",
            entry.id,
        )
        return entry

    async def list_entries(
        self,
        *,
        limit: int = 100,
        offset: int = 0,
        actor_id: uuid.UUID | None = None,
        target_id: uuid.UUID | None = None,
        action: str | None = None,
    ) -> tuple[list[AuditLogRead], int]:
        """Return recent audit entries."""
        return await self._database.list_audit_logs(
            limit=limit,
            offset=offset,
            actor_profile_id=actor_id,
            target_profile_id=target_id,
            action=action,
        )

    # --------------
    # Actor context
    # --------------
    def bind_actor(self, clerk_id: Optional[str]) -> Token:
        return self._actor_ctx.set(clerk_id)

    def unbind_actor(self, token: Token) -> None:
        self._actor_ctx.reset(token)

    def current_actor(self) -> Optional[str]:
        return self._actor_ctx.get()

    def _profile_id(self, profile: ProfileRead | uuid.UUID | None) -> uuid.UUID | None:
        if isinstance(profile, uuid.UUID):
            return profile
        if isinstance(profile, ProfileRead):
            return profile.id
        return None

    def _serialize(self, value: Any) -> Any:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if is_dataclass(value):
            return {k: self._serialize(v) for k, v in asdict(value).items()}
        if isinstance(value, Mapping):
            return {str(k): self._serialize(v) for k, v in value.items()}
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            return [self._serialize(v) for v in value]
        if hasattr(value, "model_dump"):
            return self._serialize(value.model_dump())
        return str(value)


audit_logger = AuditLogService()

__all__ = [
    "AuditLogService",
    "audit_logger",
]
