from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from appraze.database import Base
from appraze.models._common import new_id


class ReviewTemplate(Base):
    __tablename__ = "review_templates"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), index=True, nullable=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    fields = relationship(
        "ReviewField",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="ReviewField.position",
    )


class ReviewField(Base):
    __tablename__ = "review_fields"

    id = Column(String(36), primary_key=True, default=new_id)
    template_id = Column(String(36), ForeignKey("review_templates.id", ondelete="CASCADE"), index=True, nullable=False)
    label = Column(String, nullable=False)
    field_type = Column(String, default="text")  # text | textarea | rating
    is_required = Column(Boolean, default=False)
    position = Column(Integer, default=0)

    template = relationship("ReviewTemplate", back_populates="fields")


class ReviewFieldValue(Base):
    __tablename__ = "review_field_values"
    __table_args__ = (UniqueConstraint("review_id", "field_id", name="uq_review_field_value"),)

    id = Column(String(36), primary_key=True, default=new_id)
    review_id = Column(String(36), ForeignKey("reviews.id", ondelete="CASCADE"), index=True, nullable=False)
    field_id = Column(String(36), ForeignKey("review_fields.id", ondelete="CASCADE"), nullable=False)
    value = Column(Text, nullable=True)

    review = relationship("Review", back_populates="field_values")
    field = relationship("ReviewField")
