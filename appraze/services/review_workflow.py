"""
Review Workflow.

Turns a submitted review form into a persisted, generated review:

    insert draft (in_progress/50) -> generate -> completed/100 -> notify

Each step is its own record-store call. There is no enclosing transaction:
the `status`/`progress` pair is the only record of how far a submission got,
and a failed generation leaves the row behind as a `draft` with progress 10.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from appraze.core.exceptions import (
    NotFoundError,
    RecordStoreError,
    ReviewCreationError,
    ReviewGenerationError,
    ValidationFailedError,
)
from appraze.models.review import ReviewStatus
from appraze.services.generation import EmployeeSnapshot, ReviewGenerationParams

logger = logging.getLogger(__name__)

DRAFT_PROGRESS = 50
FAILED_PROGRESS = 10
COMPLETED_PROGRESS = 100


@dataclass
class ReviewOutcome:
    review: Dict[str, Any]
    notified: bool


class ReviewWorkflow:
    """
    Orchestrates the record store, the generation client and the email client.

    Collaborators are injected so the HTTP layer passes the real ones and tests
    pass fakes:
        workflow = ReviewWorkflow(RecordStore(db), GenerationClient(), EmailClient())
        outcome = workflow.submit_review(profile, submission)
    """

    def __init__(self, store, generator, mailer, audit=None):
        self.store = store
        self.generator = generator
        self.mailer = mailer
        self.audit = audit

    def submit_review(self, profile, submission) -> ReviewOutcome:
        employee = self.store.maybe_single(
            "employees",
            {"id": submission.employee_id, "organization_id": profile.organization_id},
        )
        if employee is None:
            raise NotFoundError("Employee not found")
        if submission.template_id and self.store.maybe_single(
            "review_templates",
            {"id": submission.template_id, "organization_id": profile.organization_id},
        ) is None:
            raise NotFoundError("Template not found")

        rating = submission.overall_rating
        try:
            review = self.store.insert("reviews", [{
                "organization_id": profile.organization_id,
                "user_id": profile.id,
                "employee_id": employee["id"],
                "template_id": submission.template_id,
                "title": submission.title or f"{submission.review_type} - {employee['name']}",
                "review_type": submission.review_type,
                "review_period": submission.review_period,
                "reviewer_name": submission.reviewer_name,
                "due_date": submission.due_date,
                "strengths": submission.strengths,
                "improvements": submission.improvements,
                "additional_comments": submission.additional_comments,
                "tone_preference": _enum_value(submission.tone_preference),
                "overall_rating": int(rating) if rating is not None else None,
                "status": ReviewStatus.IN_PROGRESS.value,
                "progress": DRAFT_PROGRESS,
            }])[0]
        except RecordStoreError as e:
            logger.error(f"Error creating review draft: {e.message}")
            raise ReviewCreationError() from e

        if self.audit is not None:
            self.audit.log_action(
                action="create_review",
                entity_type="review",
                entity_id=review["id"],
                user_id=profile.id,
                details={"employee_id": employee["id"], "review_period": submission.review_period},
                organization_id=profile.organization_id,
            )

        return self._generate_and_complete(profile, review, employee)

    def regenerate_review(self, profile, review_id: str) -> ReviewOutcome:
        """Re-run generation against an existing row instead of inserting a new one."""
        review = self._get_review(profile, review_id)
        employee = review.get("employee")
        if employee is None:
            raise ValidationFailedError("Review has no employee to generate content for")

        # Content only ever sits on a completed row
        try:
            review = self.store.update(
                "reviews",
                {"content": None, "status": ReviewStatus.IN_PROGRESS.value, "progress": DRAFT_PROGRESS},
                {"id": review_id},
            )[0]
        except RecordStoreError as e:
            logger.error(f"Error resetting review {review_id} for regeneration: {e.message}")
            raise ReviewCreationError() from e

        return self._generate_and_complete(profile, review, employee)

    def save_generated_review(self, profile, review_id: str, content: str) -> ReviewOutcome:
        """Persist edited review text; content and `completed` are always written together."""
        review = self._get_review(profile, review_id)
        employee = review.get("employee") or {}
        try:
            saved = self.store.update(
                "reviews",
                {"content": content, "status": ReviewStatus.COMPLETED.value, "progress": COMPLETED_PROGRESS},
                {"id": review_id},
            )[0]
        except RecordStoreError as e:
            logger.error(f"Error saving review {review_id}: {e.message}")
            raise ReviewCreationError("Failed to save review. Please try again.") from e

        notified = self._notify(profile, saved, employee.get("name", ""))
        return ReviewOutcome(review=saved, notified=notified)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _generate_and_complete(self, profile, review: Dict[str, Any], employee: Dict[str, Any]) -> ReviewOutcome:
        review_id = review["id"]
        params = ReviewGenerationParams(
            employee=EmployeeSnapshot(
                name=employee["name"],
                position=employee.get("position"),
                department=employee.get("department"),
            ),
            review_period=review["review_period"] or "",
            reviewer_name=review["reviewer_name"] or "",
            strengths=review["strengths"] or "",
            improvements=review["improvements"] or "",
            tone_preference=review["tone_preference"] or "",
            overall_rating=str(review["overall_rating"]) if review["overall_rating"] is not None else None,
            additional_comments=review["additional_comments"],
        )

        try:
            content = self.generator.generate_review(params)
        except Exception as e:
            logger.error(f"Error generating review {review_id}: {e}")
            self._mark_failed(review_id)
            raise ReviewGenerationError(review_id) from e

        try:
            completed = self.store.update(
                "reviews",
                {"content": content, "status": ReviewStatus.COMPLETED.value, "progress": COMPLETED_PROGRESS},
                {"id": review_id},
            )[0]
        except RecordStoreError as e:
            logger.error(f"Error storing generated content for review {review_id}: {e.message}")
            raise ReviewCreationError() from e

        notified = self._notify(profile, completed, employee["name"])
        return ReviewOutcome(review=completed, notified=notified)

    def _mark_failed(self, review_id: str) -> None:
        try:
            self.store.update(
                "reviews",
                {"status": ReviewStatus.DRAFT.value, "progress": FAILED_PROGRESS},
                {"id": review_id},
            )
        except RecordStoreError as e:
            logger.error(f"Could not move review {review_id} back to draft: {e.message}")

    def _notify(self, profile, review: Dict[str, Any], employee_name: str) -> bool:
        # Best-effort: nothing here may change the outcome of the review
        try:
            result = self.mailer.send_review_completion_email(
                profile.email,
                employee_name,
                review.get("review_period") or "",
                review["id"],
            )
            return bool(result.success)
        except Exception as e:
            logger.error(f"Failed to send review completion email for review {review['id']}: {e}")
            return False

    def _get_review(self, profile, review_id: str) -> Dict[str, Any]:
        review = self.store.maybe_single(
            "reviews",
            {"id": review_id, "organization_id": profile.organization_id},
            expand=("employee",),
        )
        if review is None:
            raise NotFoundError("Review not found")
        return review


def _enum_value(value: Optional[Any]) -> Optional[str]:
    return getattr(value, "value", value)
