from typing import Any, Dict, List, Optional

from appraze.core.exceptions import NotFoundError, ValidationFailedError
from appraze.models.review import ReviewStatus
from appraze.services.audit import AuditService
from appraze.services.base import BaseService

EMPLOYEE_SUMMARY_FIELDS = ("id", "name", "position")


class ReviewService(BaseService):
    """
    Review reads and edits outside the generation workflow.

    Content is never written here: it is only stored together with the
    `completed` status by the workflow's generate/save operations.
    """

    def list_reviews(self) -> List[Dict[str, Any]]:
        reviews = self.store.select(
            "reviews",
            {"organization_id": self.org_id},
            order_by="created_at",
            ascending=False,
            expand=("employee",),
        )
        for review in reviews:
            employee = review.get("employee")
            if employee is not None:
                review["employee"] = {key: employee.get(key) for key in EMPLOYEE_SUMMARY_FIELDS}
        return reviews

    def get_review(self, review_id: str) -> Dict[str, Any]:
        review = self.store.maybe_single(
            "reviews",
            {"id": review_id, "organization_id": self.org_id},
            expand=("employee", "template"),
        )
        if review is None:
            raise NotFoundError("Review not found")
        review["field_values"] = self.store.select(
            "review_field_values", {"review_id": review_id}, expand=("field",)
        )
        return review

    def update_review(
        self,
        review_id: str,
        values: Dict[str, Any],
        field_values: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        if "content" in values:
            raise ValidationFailedError("Review content can only be saved through the generate or save actions")
        review = self._ensure_exists(review_id)

        if values.get("employee_id"):
            self._ensure_in_org("employees", values["employee_id"], "Employee not found")
        if values.get("template_id"):
            self._ensure_in_org("review_templates", values["template_id"], "Template not found")

        template_id = values["template_id"] if "template_id" in values else review.get("template_id")
        for item in field_values or []:
            # Fields are only accepted from the review's own template
            if not template_id or self.store.maybe_single(
                "review_fields", {"id": item["field_id"], "template_id": template_id}
            ) is None:
                raise NotFoundError("Review field not found")

        if values:
            self.store.update("reviews", values, {"id": review_id})

        # One upsert per field; earlier writes stay if a later one fails
        for item in field_values or []:
            self.store.upsert(
                "review_field_values",
                {"review_id": review_id, "field_id": item["field_id"], "value": item.get("value")},
                on_conflict=("review_id", "field_id"),
            )
        return self.get_review(review_id)

    def update_status(self, review_id: str, status: ReviewStatus) -> Dict[str, Any]:
        """
        Move a review between statuses. Archiving is allowed from anywhere and
        keeps the content; a review that has content cannot go back to draft
        or in_progress.
        """
        review = self._ensure_exists(review_id)
        has_content = bool(review.get("content"))
        if status == ReviewStatus.COMPLETED and not has_content:
            raise ValidationFailedError("A review can only be completed once it has content")
        if has_content and status in (ReviewStatus.DRAFT, ReviewStatus.IN_PROGRESS):
            raise ValidationFailedError("A generated review can only be completed or archived")
        values = {"status": status.value}
        if status == ReviewStatus.COMPLETED:
            values["progress"] = 100
        return self.store.update("reviews", values, {"id": review_id})[0]

    def archive_review(self, review_id: str) -> Dict[str, Any]:
        return self.update_status(review_id, ReviewStatus.ARCHIVED)

    def delete_review(self, review_id: str, user_id: str) -> None:
        self._ensure_exists(review_id)
        # Field values go with the review (ORM cascade)
        self.store.delete("reviews", {"id": review_id, "organization_id": self.org_id})
        AuditService(self.db, self.org_id).log_action(
            action="delete_review",
            entity_type="review",
            entity_id=review_id,
            user_id=user_id,
        )

    def _ensure_exists(self, review_id: str) -> Dict[str, Any]:
        review = self.store.maybe_single("reviews", {"id": review_id, "organization_id": self.org_id})
        if review is None:
            raise NotFoundError("Review not found")
        return review

    def _ensure_in_org(self, table: str, record_id: str, message: str) -> None:
        if self.store.maybe_single(table, {"id": record_id, "organization_id": self.org_id}) is None:
            raise NotFoundError(message)
