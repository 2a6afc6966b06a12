# db/cascade.py
"""
FK-safe removal of a profile and everything hanging off it.

The schema declares no ``ON DELETE`` actions: some references must survive the
profile (nulled), others must go with it. :data:`PROFILE_REFERENCES` lists every
column that points at ``profiles.id`` and what happens to it; :data:`CASCADE_STEPS`
is the order in which those rows are detached or deleted. Each step clears the
rows that reference something before that something is deleted.

The steps only issue statements on the session they are given. Committing (or
rolling back) is the caller's job, see :meth:`community_hub.db.database.DataBase.delete_profile_cascade`.
"""
import enum
import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from community_hub.db.models.profile import Profile
from community_hub.db.models.project import Project
from community_hub.db.models.project_member import ProjectMember
from community_hub.db.models.team_invite import TeamInvite
from community_hub.db.models.event_project import EventProject
from community_hub.db.models.event_registration import EventRegistration
from community_hub.db.models.mentor_application import MentorApplication
from community_hub.db.models.sponsorship_inquiry import SponsorshipInquiry
from community_hub.db.models.audit_log import AdminAuditLog

logger = logging.getLogger("community_hub.cascade")


class Policy(enum.StrEnum):
    DELETE = "delete"
    NULLIFY = "nullify"


@dataclass(frozen=True)
class ProfileReference:
    column: InstrumentedAttribute
    policy: Policy

    @property
    def label(self) -> str:
        return f"{self.column.class_.__tablename__}.{self.column.key}"


# An audit entry without an actor is meaningless and goes; one without a target
# still records that the action happened.
PROFILE_REFERENCES: tuple[ProfileReference, ...] = (
    ProfileReference(Project.profile_id, Policy.DELETE),
    ProfileReference(ProjectMember.profile_id, Policy.DELETE),
    ProfileReference(TeamInvite.sender_id, Policy.DELETE),
    ProfileReference(TeamInvite.recipient_id, Policy.DELETE),
    ProfileReference(EventRegistration.profile_id, Policy.DELETE),
    ProfileReference(MentorApplication.reviewed_by, Policy.NULLIFY),
    ProfileReference(SponsorshipInquiry.reviewed_by, Policy.NULLIFY),
    ProfileReference(AdminAuditLog.actor_profile_id, Policy.DELETE),
    ProfileReference(AdminAuditLog.target_profile_id, Policy.NULLIFY),
    ProfileReference(Profile.banned_by, Policy.NULLIFY),
    ProfileReference(Profile.hidden_by, Policy.NULLIFY),
)


StepFn = Callable[[AsyncSession, uuid.UUID], Awaitable[None]]


@dataclass(frozen=True)
class CascadeStep:
    name: str
    apply: StepFn


async def _delete_owned_projects(s: AsyncSession, profile_id: uuid.UUID) -> None:
    owned_ids = list((await s.execute(select(Project.id).where(Project.profile_id == profile_id))).scalars().all())
    if not owned_ids:
        return

    # members must let go of the invites before the invites disappear
    project_invites = select(TeamInvite.id).where(TeamInvite.project_id.in_(owned_ids))
    await s.execute(
        update(ProjectMember)
        .where(ProjectMember.invite_id.in_(project_invites))
        .values(invite_id=None)
        .execution_options(synchronize_session=False)
    )
    await s.execute(delete(ProjectMember).where(ProjectMember.project_id.in_(owned_ids)).execution_options(synchronize_session=False))
    await s.execute(delete(TeamInvite).where(TeamInvite.project_id.in_(owned_ids)).execution_options(synchronize_session=False))
    await s.execute(delete(EventProject).where(EventProject.project_id.in_(owned_ids)).execution_options(synchronize_session=False))
    await s.execute(delete(Project).where(Project.id.in_(owned_ids)).execution_options(synchronize_session=False))
    logger.debug("cascade profile=%s removed %d owned project(s)", profile_id, len(owned_ids))


async def _delete_memberships(s: AsyncSession, profile_id: uuid.UUID) -> None:
    await s.execute(delete(ProjectMember).where(ProjectMember.profile_id == profile_id).execution_options(synchronize_session=False))


async def _delete_invites(s: AsyncSession, profile_id: uuid.UUID) -> None:
    involved = or_(TeamInvite.sender_id == profile_id, TeamInvite.recipient_id == profile_id)
    invite_ids = list((await s.execute(select(TeamInvite.id).where(involved))).scalars().all())
    if invite_ids:
        await s.execute(
            update(ProjectMember)
            .where(ProjectMember.invite_id.in_(invite_ids))
            .values(invite_id=None)
            .execution_options(synchronize_session=False)
        )
    await s.execute(delete(TeamInvite).where(involved).execution_options(synchronize_session=False))


async def _delete_event_registrations(s: AsyncSession, profile_id: uuid.UUID) -> None:
    await s.execute(
        delete(EventRegistration).where(EventRegistration.profile_id == profile_id).execution_options(synchronize_session=False)
    )


async def _detach_reviews(s: AsyncSession, profile_id: uuid.UUID) -> None:
    for model in (MentorApplication, SponsorshipInquiry):
        await s.execute(
            update(model)
            .where(model.reviewed_by == profile_id)
            .values(reviewed_by=None)
            .execution_options(synchronize_session=False)
        )


async def _clean_audit_log(s: AsyncSession, profile_id: uuid.UUID) -> None:
    await s.execute(
        update(AdminAuditLog)
        .where(AdminAuditLog.target_profile_id == profile_id)
        .values(target_profile_id=None)
        .execution_options(synchronize_session=False)
    )
    await s.execute(
        delete(AdminAuditLog).where(AdminAuditLog.actor_profile_id == profile_id).execution_options(synchronize_session=False)
    )


async def _detach_moderation_refs(s: AsyncSession, profile_id: uuid.UUID) -> None:
    await s.execute(
        update(Profile).where(Profile.banned_by == profile_id).values(banned_by=None).execution_options(synchronize_session=False)
    )
    await s.execute(
        update(Profile).where(Profile.hidden_by == profile_id).values(hidden_by=None).execution_options(synchronize_session=False)
    )


async def _delete_profile(s: AsyncSession, profile_id: uuid.UUID) -> None:
    await s.execute(delete(Profile).where(Profile.id == profile_id).execution_options(synchronize_session=False))


CASCADE_STEPS: tuple[CascadeStep, ...] = (
    CascadeStep("owned_projects", _delete_owned_projects),
    CascadeStep("memberships", _delete_memberships),
    CascadeStep("invites", _delete_invites),
    CascadeStep("event_registrations", _delete_event_registrations),
    CascadeStep("reviews", _detach_reviews),
    CascadeStep("audit_log", _clean_audit_log),
    CascadeStep("moderation_refs", _detach_moderation_refs),
    CascadeStep("profile", _delete_profile),
)


async def run_cascade(s: AsyncSession, profile_id: uuid.UUID) -> None:
    for step in CASCADE_STEPS:
        logger.debug("cascade profile=%s step=%s", profile_id, step.name)
        await step.apply(s, profile_id)
