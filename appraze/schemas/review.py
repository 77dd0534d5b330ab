from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import List, Optional
from appraze.models.review import ReviewStatus, TonePreference


class ReviewCreate(BaseModel):
    employee_id: str
    review_period: str = Field(..., min_length=1)
    reviewer_name: str = Field(..., min_length=1)
    strengths: str
    improvements: str
    tone_preference: TonePreference = TonePreference.PROFESSIONAL
    overall_rating: Optional[int] = Field(default=None, ge=1, le=5)
    additional_comments: Optional[str] = None
    template_id: Optional[str] = None
    title: Optional[str] = None
    review_type: str = "Annual Review"
    due_date: Optional[date] = None

    @field_validator("strengths", "improvements")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v


class ReviewFieldValueInput(BaseModel):
    field_id: str
    value: Optional[str] = None


class ReviewUpdate(BaseModel):
    employee_id: Optional[str] = None
    template_id: Optional[str] = None
    title: Optional[str] = None
    review_type: Optional[str] = None
    review_period: Optional[str] = None
    reviewer_name: Optional[str] = None
    due_date: Optional[date] = None
    strengths: Optional[str] = None
    improvements: Optional[str] = None
    additional_comments: Optional[str] = None
    tone_preference: Optional[TonePreference] = None
    overall_rating: Optional[int] = Field(default=None, ge=1, le=5)
    # Accepted only so it can be refused explicitly
    content: Optional[str] = None
    field_values: Optional[List[ReviewFieldValueInput]] = None


class ReviewStatusUpdate(BaseModel):
    status: ReviewStatus


class ReviewContentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class EmployeeSummary(BaseModel):
    id: str
    name: str
    position: Optional[str] = None
    department: Optional[str] = None


class TemplateSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class FieldSummary(BaseModel):
    id: str
    label: str
    field_type: Optional[str] = None
    position: Optional[int] = None


class ReviewFieldValueResponse(BaseModel):
    id: str
    field_id: str
    value: Optional[str] = None
    field: Optional[FieldSummary] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: Optional[str] = None
    user_id: Optional[str] = None
    employee_id: Optional[str] = None
    template_id: Optional[str] = None
    title: Optional[str] = None
    review_type: Optional[str] = None
    review_period: Optional[str] = None
    reviewer_name: Optional[str] = None
    due_date: Optional[date] = None
    strengths: Optional[str] = None
    improvements: Optional[str] = None
    additional_comments: Optional[str] = None
    tone_preference: Optional[str] = None
    overall_rating: Optional[int] = None
    status: str
    progress: Optional[int] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    employee: Optional[EmployeeSummary] = None


class ReviewDetailResponse(ReviewResponse):
    template: Optional[TemplateSummary] = None
    field_values: List[ReviewFieldValueResponse] = []


class ReviewOutcomeResponse(BaseModel):
    review: ReviewResponse
    notified: bool
