"""
Performance Review Router
Submission runs the generation workflow inline: draft -> generate -> complete -> notify.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List

from appraze.core.config import settings
from appraze.core.limiter import limiter
from appraze.database import get_db
from appraze.models.profile import Profile
from appraze.routers.auth_deps import require_org_context
from appraze.schemas.review import (
    ReviewCreate, ReviewUpdate, ReviewStatusUpdate, ReviewContentUpdate,
    ReviewResponse, ReviewDetailResponse, ReviewOutcomeResponse,
)
from appraze.services.audit import AuditService
from appraze.services.email import EmailClient
from appraze.services.generation import GenerationClient
from appraze.services.record_store import RecordStore
from appraze.services.review_workflow import ReviewWorkflow
from appraze.services.reviews import ReviewService

router = APIRouter(
    prefix="/reviews",
    tags=["reviews"]
)


def get_review_workflow(db: Session = Depends(get_db)) -> ReviewWorkflow:
    return ReviewWorkflow(
        RecordStore(db),
        GenerationClient(),
        EmailClient(),
        audit=AuditService(db),
    )


@router.post("", response_model=ReviewOutcomeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.review_generation_rate)
def submit_review(
    request: Request,
    data: ReviewCreate,
    workflow: ReviewWorkflow = Depends(get_review_workflow),
    current_user: Profile = Depends(require_org_context)
):
    """
    Create a review and generate its content.
    A generation failure returns 502 with `review_id` of the draft left behind;
    POST /reviews/{id}/regenerate resumes that draft.
    """
    outcome = workflow.submit_review(current_user, data)
    return {"review": outcome.review, "notified": outcome.notified}


@router.get("", response_model=List[ReviewResponse])
def list_reviews(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return ReviewService(db, current_user.organization_id).list_reviews()


@router.get("/{review_id}", response_model=ReviewDetailResponse)
def get_review(review_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return ReviewService(db, current_user.organization_id).get_review(review_id)


@router.patch("/{review_id}", response_model=ReviewDetailResponse)
def update_review(
    review_id: str,
    data: ReviewUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    values = data.model_dump(mode="json", exclude_unset=True, exclude={"field_values"})
    field_values = [item.model_dump() for item in data.field_values] if data.field_values else None
    if data.due_date is not None:
        values["due_date"] = data.due_date
    return ReviewService(db, current_user.organization_id).update_review(review_id, values, field_values)


@router.patch("/{review_id}/status", response_model=ReviewResponse)
def update_review_status(
    review_id: str,
    data: ReviewStatusUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    return ReviewService(db, current_user.organization_id).update_status(review_id, data.status)


@router.post("/{review_id}/archive", response_model=ReviewResponse)
def archive_review(review_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return ReviewService(db, current_user.organization_id).archive_review(review_id)


@router.post("/{review_id}/regenerate", response_model=ReviewOutcomeResponse)
@limiter.limit(settings.review_generation_rate)
def regenerate_review(
    request: Request,
    review_id: str,
    workflow: ReviewWorkflow = Depends(get_review_workflow),
    current_user: Profile = Depends(require_org_context)
):
    outcome = workflow.regenerate_review(current_user, review_id)
    return {"review": outcome.review, "notified": outcome.notified}


@router.put("/{review_id}/content", response_model=ReviewOutcomeResponse)
def save_review_content(
    review_id: str,
    data: ReviewContentUpdate,
    workflow: ReviewWorkflow = Depends(get_review_workflow),
    current_user: Profile = Depends(require_org_context)
):
    outcome = workflow.save_generated_review(current_user, review_id, data.content)
    return {"review": outcome.review, "notified": outcome.notified}


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(review_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    ReviewService(db, current_user.organization_id).delete_review(review_id, user_id=current_user.id)
