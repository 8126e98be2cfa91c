from roster.domain.models import (  # noqa: F401
    AuditLog,
    Availability,
    FinalizedRoster,
    Member,
    NameFormat,
    RosterAssignment,
    RosterSettings,
    ServiceRole,
    SpecialDay,
    Verse,
)
