# web/services/profile.py
import logging
import re
from typing import ClassVar, Optional, Protocol, Self

from sqlalchemy.exc import IntegrityError

from community_hub.config import Settings
from community_hub.db.database import DataBase
from community_hub.db.errors import is_unique_violation
from community_hub.db.schemas._base import ActionResult
from community_hub.db.schemas.identity import IdentityUser
from community_hub.db.schemas.profile import ProfileCreate, ProfileRead
from community_hub.web.services.identity import ClerkClient

logger = logging.getLogger("community_hub.profile")

USERNAME_REGEX = re.compile(r"^[a-z0-9][a-z0-9_-]{1,28}[a-z0-9]$")


class ProvisioningRefused(RuntimeError):
    pass


class IdentityLookup(Protocol):
    async def get_user(self, user_id: str) -> IdentityUser: ...


class ProfileService:
    _instance: ClassVar[Optional["ProfileService"]] = None

    def __new__(cls, *args, **kwargs) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, identity: Optional[IdentityLookup] = None) -> None:
        if getattr(self, "_initialized", False):
            return

        self._identity = identity
        self._initialized = True

    @property
    def _database(self) -> DataBase:
        return DataBase()

    @property
    def identity(self) -> IdentityLookup:
        if self._identity is None:
            self._identity = ClerkClient()
        return self._identity

    async def get_profile(self, clerk_id: Optional[str]) -> Optional[ProfileRead]:
        return await self._database.get_profile_by_clerk_id(clerk_id)

    async def ensure_profile(self, clerk_id: Optional[str], identity: Optional[IdentityUser] = None) -> Optional[ProfileRead]:
        """
        Return the profile for ``clerk_id``, creating it on first contact.

        Safe to call concurrently for the same identity: the insert is guarded by the
        unique ``clerk_id`` constraint, and a caller whose insert loses the race reads
        back the winner's row. No profile is ever cached between calls.

        :param clerk_id: identity-provider user id; falsy means "not signed in"
        :param identity: provider user data, fetched from the provider when omitted
        :returns: the profile, or None for an anonymous caller
        :raises ProvisioningRefused: test identity keys used in production
        """
        if not clerk_id:
            return None

        existing = await self._database.get_profile_by_clerk_id(clerk_id)
        if existing is not None:
            return existing

        self._guard_environment(clerk_id)

        if identity is None:
            identity = await self.identity.get_user(clerk_id)

        created = await self._database.insert_profile_if_absent(
            ProfileCreate(
                clerk_id=clerk_id,
                display_name=identity.display_name,
                avatar_url=identity.avatar_url,
            )
        )
        if created is not None:
            logger.info("Provisioned profile %s for %s", created.id, clerk_id)
            return created

        # another request inserted it first
        return await self._database.get_profile_by_clerk_id(clerk_id)

    def _guard_environment(self, clerk_id: str) -> None:
        settings = Settings()
        if settings.is_production and (settings.clerk_secret_key or "").startswith("sk_test_"):
            logger.error("Refusing to create profile for %s: test Clerk key detected in production environment", clerk_id)
            raise ProvisioningRefused("Refusing to create profile: test Clerk key detected in production environment")

    async def claim_username(self, clerk_id: Optional[str], username: str) -> ActionResult:
        """Set the username chosen right after sign-up; never overwrites an existing one."""
        if not clerk_id:
            return ActionResult.fail("Not authenticated")

        try:
            profile = await self.ensure_profile(clerk_id)
            if profile is None:
                return ActionResult.fail("Profile creation failed")

            normalized = username.strip().lower()
            if not USERNAME_REGEX.match(normalized):
                return ActionResult.fail("Invalid username format")

            updated = await self._database.set_username_if_unset(profile.id, normalized)
            if updated is None:
                return ActionResult.fail("Username already set")
            return ActionResult.ok()
        except IntegrityError as exc:
            if is_unique_violation(exc, "profiles_username_unique"):
                return ActionResult.fail("Username is already taken")
            logger.exception("Failed to set username for %s", clerk_id)
            return ActionResult.fail("Failed to set username")
        except Exception:
            logger.exception("Failed to set username for %s", clerk_id)
            return ActionResult.fail("Failed to set username")
