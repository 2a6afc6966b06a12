# db/database.py
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, ClassVar, Self, Any, Tuple

from sqlalchemy import event, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from community_hub.db.models._base import Base
from community_hub.db.models.profile import Profile
from community_hub.db.models.event import Event  # noqa: F401
from community_hub.db.models.event_registration import EventRegistration  # noqa: F401
from community_hub.db.models.project import Project  # noqa: F401
from community_hub.db.models.event_project import EventProject  # noqa: F401
from community_hub.db.models.team_invite import TeamInvite  # noqa: F401
from community_hub.db.models.project_member import ProjectMember  # noqa: F401
from community_hub.db.models.mentor_application import MentorApplication  # noqa: F401
from community_hub.db.models.sponsorship_inquiry import SponsorshipInquiry  # noqa: F401
from community_hub.db.models.audit_log import AdminAuditLog
from community_hub.db.schemas.profile import ProfileCreate, ProfileRead, ProfileUpdate
from community_hub.db.schemas.audit_log import AuditLogCreate, AuditLogRead
from community_hub.db.cascade import run_cascade
from community_hub.config import Settings
from community_hub.utils.sentinels import provided


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DataBase():
    """
    Async SQLAlchemy database singleton.
    Usage:
        db = DataBase()  # same instance everywhere
        async with db.session() as s:
            ...
    """
    _instance: ClassVar[Optional["DataBase"]] = None

    def __new__(cls, *args: Any, **kwargs: Any) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)

        return cls._instance

    def __init__(self, echo: bool = False, url: Optional[str] = None) -> None:
        if getattr(self, "_initialized", False):
            return

        url = url or Settings().database_url
        self._engine: AsyncEngine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        if self._engine.dialect.name == "sqlite":
            # SQLite ignores REFERENCES unless asked per connection
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

        self._initialized = True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provides an AsyncSession with safe commit/rollback semantics.

        Everything executed inside one ``async with`` block is a single transaction:
        it is committed when the block exits normally and rolled back if anything raises.
        """
        session: AsyncSession = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    # --- schema management helpers (optional) ---

    async def create_all(self) -> None:
        """
        Create tables based on Base metadata. Use only in dev/tests; prefer proper migrations in prod.
        """
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def _insert(self, model):
        """Dialect-specific INSERT (both variants support ON CONFLICT DO NOTHING)."""
        if self._engine.dialect.name == "sqlite":
            return sqlite.insert(model)
        return postgresql.insert(model)

    # --- profiles ---

    async def get_profile_by_id(self, uid: Optional[uuid.UUID] = None) -> Optional[ProfileRead]:
        if uid is None:
            return None

        async with self.session() as s:
            row = (await s.execute(select(Profile).where(Profile.id == uid))).scalar_one_or_none()

        return ProfileRead.model_validate(row) if row is not None else None

    async def get_profile_by_clerk_id(self, clerk_id: Optional[str] = None) -> Optional[ProfileRead]:
        """
        Fetch a profile by the identity provider's user id.

        Notes:
            - Relies on the unique constraint ``profiles_clerk_id_unique``.
        """
        if not clerk_id:
            return None

        async with self.session() as s:
            row = (await s.execute(select(Profile).where(Profile.clerk_id == clerk_id))).scalar_one_or_none()

        return ProfileRead.model_validate(row) if row is not None else None

    async def insert_profile_if_absent(self, data: ProfileCreate) -> Optional[ProfileRead]:
        """
        ``INSERT ... ON CONFLICT (clerk_id) DO NOTHING RETURNING *``.

        Returns:
            Optional[ProfileRead]: the created row, or None when a row for the same
            ``clerk_id`` already existed (typically another request won the race).

        Raises:
            IntegrityError: on any other constraint violation (e.g. a taken username).
        """
        stmt = (
            self._insert(Profile)
            .values(
                id=uuid.uuid4(),
                clerk_id=data.clerk_id,
                username=data.username,
                display_name=data.display_name,
                avatar_url=data.avatar_url,
                role=data.role,
            )
            .on_conflict_do_nothing(index_elements=[Profile.clerk_id])
            .returning(Profile)
        )
        async with self.session() as s:
            row = (await s.execute(stmt)).scalar_one_or_none()

        return ProfileRead.model_validate(row) if row is not None else None

    async def update_profile(self, data: ProfileUpdate) -> ProfileRead:
        """
        Partially update a profile by id.
        Only fields explicitly provided (i.e., not MISSING) are updated.
        Passing None for a provided field will NULL it in DB.

        Raises:
            LookupError: if the profile with given id does not exist.
            IntegrityError: on unique constraint violation (username).
        """
        async with self.session() as s:
            db_profile = await s.get(Profile, data.id)
            if db_profile is None:
                raise LookupError("Profile not found.")

            for field in ProfileUpdate.model_fields:
                if field == "id":
                    continue
                value = getattr(data, field)
                if provided(value):
                    setattr(db_profile, field, value)

            await s.flush()
            await s.refresh(db_profile)

        return ProfileRead.model_validate(db_profile)

    async def set_username_if_unset(self, profile_id: uuid.UUID, username: str) -> Optional[ProfileRead]:
        """
        Claim ``username`` for a profile that has none yet.

        Returns None if the profile already has a username (nothing is changed).
        A username taken by someone else surfaces as IntegrityError.
        """
        stmt = (
            update(Profile)
            .where(Profile.id == profile_id, Profile.username.is_(None))
            .values(username=username)
            .returning(Profile)
            .execution_options(synchronize_session=False)
        )
        async with self.session() as s:
            row = (await s.execute(stmt)).scalar_one_or_none()

        return ProfileRead.model_validate(row) if row is not None else None

    async def delete_profile_cascade(self, profile_id: uuid.UUID) -> None:
        """
        Delete a profile and detach or delete everything that references it.

        All steps of :func:`community_hub.db.cascade.run_cascade` share one transaction:
        either every change lands or, if any statement fails, none does and the error
        propagates. An unknown id matches no rows and still commits.

        The identity-provider user and any audit trail are the caller's concern.
        """
        async with self.session() as s:
            await run_cascade(s, profile_id)

    # ---------------------------------
    # Audit log helpers
    # ---------------------------------

    async def create_audit_log(self, payload: AuditLogCreate) -> AuditLogRead:
        """Persist a new audit log entry."""
        async with self.session() as s:
            record = AdminAuditLog(
                actor_profile_id=payload.actor_profile_id,
                action=payload.action,
                target_profile_id=payload.target_profile_id,
                details=payload.details,
            )
            s.add(record)
            await s.flush()
            await s.refresh(record)
            return AuditLogRead.model_validate(record)

    async def list_audit_logs(
        self,
        *,
        limit: int = 100,
        offset: int = 0,
        actor_profile_id: uuid.UUID | None = None,
        target_profile_id: uuid.UUID | None = None,
        action: str | None = None,
    ) -> Tuple[list[AuditLogRead], int]:
        """Return paginated audit log entries filtered by actor/target/action."""
        limit = max(0, int(limit))
        offset = max(0, int(offset))

        async with self.session() as s:
            stmt = select(AdminAuditLog).order_by(AdminAuditLog.created_at.desc())
            count_stmt = select(func.count(AdminAuditLog.id))
            if actor_profile_id:
                stmt = stmt.where(AdminAuditLog.actor_profile_id == actor_profile_id)
                count_stmt = count_stmt.where(AdminAuditLog.actor_profile_id == actor_profile_id)
            if target_profile_id:
                stmt = stmt.where(AdminAuditLog.target_profile_id == target_profile_id)
                count_stmt = count_stmt.where(AdminAuditLog.target_profile_id == target_profile_id)
            if action:
                stmt = stmt.where(AdminAuditLog.action == action)
                count_stmt = count_stmt.where(AdminAuditLog.action == action)

            if limit:
                stmt = stmt.limit(limit)
            if offset:
                stmt = stmt.offset(offset)

            rows = (await s.execute(stmt)).scalars().all()
            total = int((await s.execute(count_stmt)).scalar_one())

        return [AuditLogRead.model_validate(row) for row in rows], total
