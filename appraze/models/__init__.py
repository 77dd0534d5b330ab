# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    organization, profile, employee,
    review, review_template,
    team, subscription, audit_log
)

# Explicit class exports for cleaner imports
from .organization import Organization
from .profile import Profile, ProfileRole
from .employee import Employee, EmployeeStatus
from .review import Review, ReviewStatus, TonePreference
from .review_template import ReviewTemplate, ReviewField, ReviewFieldValue
from .team import Team, TeamMember, TeamInvitation, MemberRole, MemberStatus, InvitationStatus
from .subscription import SubscriptionPlan, Subscription, UsageLog
from .audit_log import AuditLog

# Record-store table registry: table name -> mapped class
TABLES = {
    model.__tablename__: model
    for model in (
        Organization, Profile, Employee,
        Review, ReviewTemplate, ReviewField, ReviewFieldValue,
        Team, TeamMember, TeamInvitation,
        SubscriptionPlan, Subscription, UsageLog, AuditLog,
    )
}

__all__ = [
    "Organization",
    "Profile",
    "ProfileRole",
    "Employee",
    "EmployeeStatus",
    "Review",
    "ReviewStatus",
    "TonePreference",
    "ReviewTemplate",
    "ReviewField",
    "ReviewFieldValue",
    "Team",
    "TeamMember",
    "TeamInvitation",
    "MemberRole",
    "MemberStatus",
    "InvitationStatus",
    "SubscriptionPlan",
    "Subscription",
    "UsageLog",
    "AuditLog",
    "TABLES",
]
