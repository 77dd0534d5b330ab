"""
Profile Model.
The authenticated user's durable record: organization, role and billing identity.
"""
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from appraze.database import Base
from appraze.models._common import new_id


class ProfileRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    company_name = Column(String, nullable=True)

    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True, index=True)
    role = Column(String, default=ProfileRole.MEMBER.value, nullable=False)

    # Billing identity mirrored from the payment processor
    stripe_customer_id = Column(String, nullable=True, index=True)
    subscription_status = Column(String, nullable=True)  # active | canceled | past_due | ...
    subscription_plan = Column(String, nullable=True)
    subscription_period_end = Column(DateTime(timezone=True), nullable=True)
    last_payment_status = Column(String, nullable=True)  # succeeded | failed
    last_payment_date = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="profiles")

    def __repr__(self):
        return f"<Profile {self.email} ({self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN.value
