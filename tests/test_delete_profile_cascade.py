import uuid
from dataclasses import dataclass
from datetime import datetime

import pytest

from community_hub.db import cascade
from community_hub.db.enums import (
    InviteType,
    TeamPreference,
    UserRole,
)
from community_hub.db.models._base import Base
from community_hub.db.models.audit_log import AdminAuditLog
from community_hub.db.models.event import Event
from community_hub.db.models.event_project import EventProject
from community_hub.db.models.event_registration import EventRegistration
from community_hub.db.models.mentor_application import MentorApplication
from community_hub.db.models.profile import Profile
from community_hub.db.models.project import Project
from community_hub.db.models.project_member import ProjectMember
from community_hub.db.models.sponsorship_inquiry import SponsorshipInquiry
from community_hub.db.models.team_invite import TeamInvite

from factories import add_rows, count, fetch, make_profile

ALL_MODELS = (
    Profile,
    Event,
    EventRegistration,
    Project,
    EventProject,
    TeamInvite,
    ProjectMember,
    MentorApplication,
    SponsorshipInquiry,
    AdminAuditLog,
)


def _event(slug: str) -> Event:
    return Event(
        id=uuid.uuid4(),
        name=slug.title(),
        slug=slug,
        description="",
        starts_at=datetime(2026, 3, 1),
        ends_at=datetime(2026, 3, 8),
    )


@dataclass
class World:
    owner: Profile
    member: Profile
    admin: Profile
    moderated: Profile
    outsider: Profile
    event: Event
    owned: Project
    foreign: Project
    owned_invite: TeamInvite
    incoming_invite: TeamInvite
    outgoing_invite: TeamInvite
    member_on_owned: ProjectMember
    owner_on_foreign: ProjectMember
    outsider_on_foreign: ProjectMember
    event_project: EventProject
    registration: EventRegistration
    other_registration: EventRegistration
    mentor: MentorApplication
    sponsor: SponsorshipInquiry
    audit_by_owner: AdminAuditLog
    audit_on_owner: AdminAuditLog


async def build_world(db) -> World:
    """
    ``owner`` owns project ``owned`` (member ``member`` joined through ``owned_invite``),
    is a member of ``admin``'s project ``foreign`` through ``incoming_invite`` and invited
    ``outsider`` to ``foreign`` as well (``outgoing_invite``). ``owner`` also registered
    for the event, reviewed a mentor application and a sponsorship inquiry, banned and hid
    ``moderated``, and shows up in the audit log both as actor and as target.
    """
    owner = await make_profile(db, "Owner", role=UserRole.MODERATOR)
    member = await make_profile(db, "Member")
    admin = await make_profile(db, "Admin", role=UserRole.ADMIN)
    outsider = await make_profile(db, "Outsider")
    moderated = await make_profile(
        db,
        "Moderated",
        banned_at=datetime(2026, 1, 1),
        banned_by=owner.id,
        hidden_at=datetime(2026, 1, 1),
        hidden_by=owner.id,
    )
    event = _event("spring-jam")
    owned = Project(id=uuid.uuid4(), profile_id=owner.id, name="Owned", slug="owned")
    foreign = Project(id=uuid.uuid4(), profile_id=admin.id, name="Foreign", slug="foreign")
    await add_rows(db, event, owned, foreign)

    owned_invite = TeamInvite(id=uuid.uuid4(), project_id=owned.id, sender_id=owner.id, recipient_id=member.id, type=InviteType.DIRECT)
    incoming_invite = TeamInvite(id=uuid.uuid4(), project_id=foreign.id, sender_id=admin.id, recipient_id=owner.id, type=InviteType.DIRECT)
    outgoing_invite = TeamInvite(id=uuid.uuid4(), project_id=foreign.id, sender_id=owner.id, recipient_id=outsider.id, type=InviteType.DIRECT)
    await add_rows(db, owned_invite, incoming_invite, outgoing_invite)

    member_on_owned = ProjectMember(id=uuid.uuid4(), project_id=owned.id, profile_id=member.id, invite_id=owned_invite.id)
    owner_on_foreign = ProjectMember(id=uuid.uuid4(), project_id=foreign.id, profile_id=owner.id, invite_id=incoming_invite.id)
    outsider_on_foreign = ProjectMember(id=uuid.uuid4(), project_id=foreign.id, profile_id=outsider.id, invite_id=outgoing_invite.id)
    event_project = EventProject(id=uuid.uuid4(), event_id=event.id, project_id=owned.id)
    registration = EventRegistration(id=uuid.uuid4(), event_id=event.id, profile_id=owner.id, team_preference=TeamPreference.SOLO)
    other_registration = EventRegistration(id=uuid.uuid4(), event_id=event.id, profile_id=member.id, team_preference=TeamPreference.LOOKING_FOR_TEAM)
    mentor = MentorApplication(
        id=uuid.uuid4(),
        name="Mentor",
        email="mentor@example.com",
        discord_handle="mentor",
        mentor_types=["design"],
        background="b",
        availability="a",
        reviewed_by=owner.id,
    )
    sponsor = SponsorshipInquiry(
        id=uuid.uuid4(),
        company_name="Acme",
        contact_name="Wile",
        email="wile@acme.test",
        offer_description="rockets",
        reviewed_by=owner.id,
    )
    audit_by_owner = AdminAuditLog(id=uuid.uuid4(), actor_profile_id=owner.id, action="ban_user", target_profile_id=moderated.id)
    audit_on_owner = AdminAuditLog(id=uuid.uuid4(), actor_profile_id=admin.id, action="hide_user", target_profile_id=owner.id)
    await add_rows(
        db,
        member_on_owned,
        owner_on_foreign,
        outsider_on_foreign,
        event_project,
        registration,
        other_registration,
        mentor,
        sponsor,
        audit_by_owner,
        audit_on_owner,
    )

    return World(
        owner=owner,
        member=member,
        admin=admin,
        moderated=moderated,
        outsider=outsider,
        event=event,
        owned=owned,
        foreign=foreign,
        owned_invite=owned_invite,
        incoming_invite=incoming_invite,
        outgoing_invite=outgoing_invite,
        member_on_owned=member_on_owned,
        owner_on_foreign=owner_on_foreign,
        outsider_on_foreign=outsider_on_foreign,
        event_project=event_project,
        registration=registration,
        other_registration=other_registration,
        mentor=mentor,
        sponsor=sponsor,
        audit_by_owner=audit_by_owner,
        audit_on_owner=audit_on_owner,
    )


async def snapshot(db) -> dict[str, int]:
    return {model.__tablename__: await count(db, model) for model in ALL_MODELS}


async def test_removes_owner_and_everything_it_owns(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)

    assert await fetch(db, Profile, w.owner.id) is None
    assert await fetch(db, Project, w.owned.id) is None
    assert await count(db, ProjectMember, ProjectMember.project_id == w.owned.id) == 0
    assert await count(db, TeamInvite, TeamInvite.project_id == w.owned.id) == 0
    assert await count(db, EventProject, EventProject.project_id == w.owned.id) == 0
    assert await count(db, EventRegistration, EventRegistration.profile_id == w.owner.id) == 0


async def test_leaves_other_projects_but_drops_own_membership_and_invites(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)

    assert await fetch(db, Project, w.foreign.id) is not None
    assert await fetch(db, ProjectMember, w.owner_on_foreign.id) is None
    assert await fetch(db, TeamInvite, w.incoming_invite.id) is None
    assert await fetch(db, TeamInvite, w.outgoing_invite.id) is None
    # joined through an invite the deleted profile sent: membership stays, invite link is cut
    outsider_membership = await fetch(db, ProjectMember, w.outsider_on_foreign.id)
    assert outsider_membership is not None
    assert outsider_membership.invite_id is None


async def test_nullifies_references_that_outlive_the_profile(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)

    assert (await fetch(db, MentorApplication, w.mentor.id)).reviewed_by is None
    assert (await fetch(db, SponsorshipInquiry, w.sponsor.id)).reviewed_by is None
    moderated = await fetch(db, Profile, w.moderated.id)
    assert moderated.banned_by is None
    assert moderated.hidden_by is None
    # the ban itself is not lifted
    assert moderated.banned_at is not None


async def test_audit_log_keeps_target_entries_and_drops_actor_entries(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)

    assert await fetch(db, AdminAuditLog, w.audit_by_owner.id) is None
    on_owner = await fetch(db, AdminAuditLog, w.audit_on_owner.id)
    assert on_owner is not None
    assert on_owner.target_profile_id is None
    assert on_owner.actor_profile_id == w.admin.id


async def test_unrelated_rows_survive(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)

    for profile in (w.member, w.admin, w.moderated, w.outsider):
        assert await fetch(db, Profile, profile.id) is not None
    assert await fetch(db, Event, w.event.id) is not None
    assert await fetch(db, EventRegistration, w.other_registration.id) is not None


async def test_no_row_references_the_deleted_profile(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)

    for ref in cascade.PROFILE_REFERENCES:
        assert await count(db, ref.column.class_, ref.column == w.owner.id) == 0, ref.label


def test_every_foreign_key_to_profiles_has_a_policy():
    declared = {ref.label for ref in cascade.PROFILE_REFERENCES}
    found = set()
    for table in Base.metadata.tables.values():
        for fk in table.foreign_keys:
            if fk.column.table.name == "profiles":
                found.add(f"{table.name}.{fk.parent.name}")
    assert found == declared


async def test_failure_midway_rolls_everything_back(db, monkeypatch):
    w = await build_world(db)
    before = await snapshot(db)

    async def explode(_s, _profile_id):
        raise RuntimeError("forced failure")

    steps = list(cascade.CASCADE_STEPS)
    after_invites = [step.name for step in steps].index("invites") + 1
    steps.insert(after_invites, cascade.CascadeStep("explode", explode))
    monkeypatch.setattr(cascade, "CASCADE_STEPS", tuple(steps))

    with pytest.raises(RuntimeError, match="forced failure"):
        await db.delete_profile_cascade(w.owner.id)

    assert await snapshot(db) == before
    assert await fetch(db, Profile, w.owner.id) is not None
    assert await fetch(db, Project, w.owned.id) is not None
    assert (await fetch(db, ProjectMember, w.member_on_owned.id)).invite_id == w.owned_invite.id
    assert (await fetch(db, ProjectMember, w.outsider_on_foreign.id)).invite_id == w.outgoing_invite.id
    assert await fetch(db, TeamInvite, w.incoming_invite.id) is not None


async def test_unknown_profile_is_a_no_op(db):
    await build_world(db)
    before = await snapshot(db)

    await db.delete_profile_cascade(uuid.uuid4())

    assert await snapshot(db) == before


async def test_running_twice_is_harmless(db):
    w = await build_world(db)

    await db.delete_profile_cascade(w.owner.id)
    after_first = await snapshot(db)
    await db.delete_profile_cascade(w.owner.id)

    assert await snapshot(db) == after_first


async def test_deleting_the_owner_takes_the_invited_members_row(db):
    a = await make_profile(db, "A")
    b = await make_profile(db, "B")
    p = Project(id=uuid.uuid4(), profile_id=a.id, name="P")
    await add_rows(db, p)
    i = TeamInvite(id=uuid.uuid4(), project_id=p.id, sender_id=a.id, recipient_id=b.id, type=InviteType.DIRECT)
    await add_rows(db, i)
    membership = ProjectMember(id=uuid.uuid4(), project_id=p.id, profile_id=b.id, invite_id=i.id)
    await add_rows(db, membership)

    await db.delete_profile_cascade(a.id)

    assert await fetch(db, Project, p.id) is None
    assert await fetch(db, TeamInvite, i.id) is None
    assert await fetch(db, ProjectMember, membership.id) is None
    assert await fetch(db, Profile, a.id) is None
    assert await fetch(db, Profile, b.id) is not None


async def test_deleting_the_invited_member_leaves_owner_and_project(db):
    a = await make_profile(db, "A")
    b = await make_profile(db, "B")
    p = Project(id=uuid.uuid4(), profile_id=a.id, name="P")
    await add_rows(db, p)
    i = TeamInvite(id=uuid.uuid4(), project_id=p.id, sender_id=a.id, recipient_id=b.id, type=InviteType.DIRECT)
    await add_rows(db, i)
    membership = ProjectMember(id=uuid.uuid4(), project_id=p.id, profile_id=b.id, invite_id=i.id)
    await add_rows(db, membership)

    await db.delete_profile_cascade(b.id)

    assert await fetch(db, ProjectMember, membership.id) is None
    assert await fetch(db, Profile, b.id) is None
    assert await fetch(db, Profile, a.id) is not None
    assert await fetch(db, Project, p.id) is not None
    # an invite addressed to the deleted profile cannot outlive it
    assert await fetch(db, TeamInvite, i.id) is None


def test_foreign_keys_declare_no_database_cascade():
    for table in Base.metadata.tables.values():
        for fk in table.foreign_keys:
            assert fk.ondelete is None, f"{table.name}.{fk.parent.name}"
