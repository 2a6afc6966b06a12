import enum

class UserRole(enum.StrEnum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"

class ExperienceLevel(enum.StrEnum):
    GETTING_STARTED = "getting_started"
    BUILT_A_FEW = "built_a_few"
    SHIPS_CONSTANTLY = "ships_constantly"

class EventStatus(enum.StrEnum):
    DRAFT = "draft"
    OPEN = "open"
    ACTIVE = "active"
    JUDGING = "judging"
    COMPLETE = "complete"

class TeamPreference(enum.StrEnum):
    SOLO = "solo"
    HAS_TEAM = "has_team"
    HAS_TEAM_OPEN = "has_team_open"
    LOOKING_FOR_TEAM = "looking_for_team"

class CommitmentLevel(enum.StrEnum):
    ALL_IN = "all_in"
    DAILY = "daily"
    NIGHTS_WEEKENDS = "nights_weekends"
    NOT_SURE = "not_sure"

class StartingPoint(enum.StrEnum):
    NEW = "new"
    EXISTING = "existing"

class InviteStatus(enum.StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    REVOKED = "revoked"

class InviteType(enum.StrEnum):
    DIRECT = "direct"
    LINK = "link"

class MentorApplicationStatus(enum.StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"

class SponsorshipInquiryStatus(enum.StrEnum):
    PENDING = "pending"
    CONTACTED = "contacted"
    ACCEPTED = "accepted"
    DECLINED = "declined"
