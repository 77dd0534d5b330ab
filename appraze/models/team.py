from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from appraze.database import Base
from appraze.models._common import new_id


class MemberRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MemberStatus(str, enum.Enum):
    ACTIVE = "active"
    INVITED = "invited"
    INACTIVE = "inactive"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class Team(Base):
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), index=True, nullable=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)

    stripe_customer_id = Column(String, nullable=True)
    subscription_status = Column(String, nullable=True)
    subscription_period_end = Column(DateTime(timezone=True), nullable=True)
    plan_id = Column(String, ForeignKey("subscription_plans.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    members = relationship("TeamMember", back_populates="team")
    plan = relationship("SubscriptionPlan")


class TeamMember(Base):
    """
    Organization-scoped membership. Invited members carry a single-use
    invite token until they accept.
    """
    __tablename__ = "team_members"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), index=True, nullable=True)
    team_id = Column(String(36), ForeignKey("teams.id"), index=True, nullable=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    email = Column(String, nullable=True, index=True)
    name = Column(String, nullable=True)
    role = Column(String, default=MemberRole.MEMBER.value, nullable=False)
    status = Column(String, default=MemberStatus.ACTIVE.value, nullable=False)
    invite_token = Column(String, unique=True, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    team = relationship("Team", back_populates="members")
    user = relationship("Profile")


class TeamInvitation(Base):
    __tablename__ = "team_invitations"
    __table_args__ = (UniqueConstraint("team_id", "email", name="uq_team_invitation_email"),)

    id = Column(String(36), primary_key=True, default=new_id)
    team_id = Column(String(36), ForeignKey("teams.id"), index=True, nullable=False)
    email = Column(String, nullable=False)
    role = Column(String, default=MemberRole.MEMBER.value, nullable=False)
    status = Column(String, default=InvitationStatus.PENDING.value, nullable=False)
    invite_token = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    team = relationship("Team")
