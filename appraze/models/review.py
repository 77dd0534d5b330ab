from sqlalchemy import Column, Integer, String, Date, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from appraze.database import Base
from appraze.models._common import new_id


class ReviewStatus(str, enum.Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TonePreference(str, enum.Enum):
    PROFESSIONAL = "professional"
    CONSTRUCTIVE = "constructive"
    ENCOURAGING = "encouraging"
    DIRECT = "direct"


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), index=True, nullable=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    # Non-owning reference: deleting a review never touches the employee
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="SET NULL"), index=True, nullable=True)
    template_id = Column(String(36), ForeignKey("review_templates.id", ondelete="SET NULL"), nullable=True)

    title = Column(String, nullable=True)
    review_type = Column(String, default="Annual Review")
    review_period = Column(String, nullable=True)
    reviewer_name = Column(String, nullable=True)
    due_date = Column(Date, nullable=True)

    strengths = Column(Text, nullable=True)
    improvements = Column(Text, nullable=True)
    additional_comments = Column(Text, nullable=True)
    tone_preference = Column(String, default=TonePreference.PROFESSIONAL.value)
    overall_rating = Column(Integer, nullable=True)  # 1-5

    status = Column(String, default=ReviewStatus.DRAFT.value, nullable=False, index=True)
    progress = Column(Integer, default=0)  # advisory only
    content = Column(Text, nullable=True)  # generated markdown

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
    template = relationship("ReviewTemplate")
    field_values = relationship("ReviewFieldValue", back_populates="review", cascade="all, delete-orphan")
