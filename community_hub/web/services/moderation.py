# web/services/moderation.py
import logging
import uuid
from datetime import datetime, timezone
from typing import ClassVar, Optional, Protocol, Self

from community_hub.config import Settings
from community_hub.db.database import DataBase
from community_hub.db.enums import UserRole
from community_hub.db.schemas._base import ActionResult
from community_hub.db.schemas.profile import ProfileRead, ProfileUpdate
from community_hub.web.services.audit_log import audit_logger
from community_hub.web.services.identity import ClerkClient

logger = logging.getLogger("community_hub.moderation")


class IdentityModeration(Protocol):
    async def ban_user(self, user_id: str) -> None: ...
    async def unban_user(self, user_id: str) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_super_admin(clerk_id: Optional[str]) -> bool:
    return bool(clerk_id) and clerk_id in Settings().admin_user_ids


def is_admin(profile: Optional[ProfileRead]) -> bool:
    if profile is None:
        return False
    return is_super_admin(profile.clerk_id) or profile.role == UserRole.ADMIN


def is_moderator(profile: Optional[ProfileRead]) -> bool:
    if profile is None:
        return False
    return is_admin(profile) or profile.role == UserRole.MODERATOR


class ModerationService:
    """Hide/ban actions taken by moderators and admins on other profiles."""

    _instance: ClassVar[Optional["ModerationService"]] = None

    def __new__(cls, *args, **kwargs) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, identity: Optional[IdentityModeration] = None) -> None:
        if getattr(self, "_initialized", False):
            return

        self._identity = identity
        self._initialized = True

    @property
    def _database(self) -> DataBase:
        return DataBase()

    @property
    def identity(self) -> IdentityModeration:
        if self._identity is None:
            self._identity = ClerkClient()
        return self._identity

    async def hide_user(self, actor_clerk_id: Optional[str], profile_id: uuid.UUID) -> ActionResult:
        try:
            actor = await self._database.get_profile_by_clerk_id(actor_clerk_id)
            if not is_moderator(actor):
                return ActionResult.fail("Unauthorized")

            target = await self._database.get_profile_by_id(profile_id)
            if target is None:
                return ActionResult.fail("User not found")
            if target.is_hidden:
                return ActionResult.fail("User is already hidden")
            if is_super_admin(target.clerk_id):
                return ActionResult.fail("Cannot hide a super-admin")

            await self._database.update_profile(ProfileUpdate(id=target.id, hidden_at=_utcnow(), hidden_by=actor.id))
            await audit_logger.log(action="hide_user", actor=actor, target=target)
            return ActionResult.ok()
        except Exception:
            logger.exception("hideUser failed for profile %s", profile_id)
            return ActionResult.fail("Failed to hide user")

    async def unhide_user(self, actor_clerk_id: Optional[str], profile_id: uuid.UUID) -> ActionResult:
        try:
            actor = await self._database.get_profile_by_clerk_id(actor_clerk_id)
            if not is_moderator(actor):
                return ActionResult.fail("Unauthorized")

            target = await self._database.get_profile_by_id(profile_id)
            if target is None:
                return ActionResult.fail("User not found")
            if not target.is_hidden:
                return ActionResult.fail("User is not hidden")

            await self._database.update_profile(ProfileUpdate(id=target.id, hidden_at=None, hidden_by=None))
            await audit_logger.log(action="unhide_user", actor=actor, target=target)
            return ActionResult.ok()
        except Exception:
            logger.exception("unhideUser failed for profile %s", profile_id)
            return ActionResult.fail("Failed to unhide user")

    async def ban_user(self, actor_clerk_id: Optional[str], profile_id: uuid.UUID, reason: Optional[str] = None) -> ActionResult:
        try:
            actor = await self._database.get_profile_by_clerk_id(actor_clerk_id)
            if not is_moderator(actor):
                return ActionResult.fail("Unauthorized")

            target = await self._database.get_profile_by_id(profile_id)
            if target is None:
                return ActionResult.fail("User not found")
            if target.is_banned:
                return ActionResult.fail("User is already banned")
            if is_super_admin(target.clerk_id):
                return ActionResult.fail("Cannot ban a super-admin")
            if not is_admin(actor) and target.role == UserRole.ADMIN:
                return ActionResult.fail("Moderators cannot ban admins")
            if actor.id == target.id:
                return ActionResult.fail("Cannot ban yourself")

            reason = (reason or "").strip() or None
            await self._database.update_profile(
                ProfileUpdate(id=target.id, banned_at=_utcnow(), banned_by=actor.id, ban_reason=reason)
            )
            # disable login at the identity provider
            await self.identity.ban_user(target.clerk_id)
            await audit_logger.log(action="ban_user", actor=actor, target=target, metadata={"reason": reason})
            return ActionResult.ok()
        except Exception:
            logger.exception("banUser failed for profile %s", profile_id)
            return ActionResult.fail("Failed to ban user")

    async def unban_user(self, actor_clerk_id: Optional[str], profile_id: uuid.UUID) -> ActionResult:
        try:
            actor = await self._database.get_profile_by_clerk_id(actor_clerk_id)
            if not is_admin(actor):
                return ActionResult.fail("Only admins can unban users")

            target = await self._database.get_profile_by_id(profile_id)
            if target is None:
                return ActionResult.fail("User not found")
            if not target.is_banned:
                return ActionResult.fail("User is not banned")

            # unbanning also lifts the hide
            await self._database.update_profile(
                ProfileUpdate(
                    id=target.id,
                    banned_at=None,
                    banned_by=None,
                    ban_reason=None,
                    hidden_at=None,
                    hidden_by=None,
                )
            )
            await self.identity.unban_user(target.clerk_id)
            await audit_logger.log(action="unban_user", actor=actor, target=target)
            return ActionResult.ok()
        except Exception:
            logger.exception("unbanUser failed for profile %s", profile_id)
            return ActionResult.fail("Failed to unban user")
