from typing import Any, Dict, List, Optional

from appraze.core.exceptions import NotFoundError
from appraze.services.base import BaseService


class TemplateService(BaseService):
    def list_templates(self) -> List[Dict[str, Any]]:
        return self.store.select("review_templates", {"organization_id": self.org_id}, order_by="name")

    def get_template(self, template_id: str) -> Dict[str, Any]:
        # `fields` comes back ordered by position
        template = self.store.maybe_single(
            "review_templates",
            {"id": template_id, "organization_id": self.org_id},
            expand=("fields",),
        )
        if template is None:
            raise NotFoundError("Template not found")
        return template

    def create_template(
        self,
        name: str,
        description: Optional[str] = None,
        fields: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Template row first, then its fields in a second call.
        A failure on the second call leaves a template without fields.
        """
        template = self.store.insert("review_templates", [{
            "organization_id": self.org_id,
            "name": name,
            "description": description,
        }])[0]
        if fields:
            self._insert_fields(template["id"], fields)
        return self.get_template(template["id"])

    def update_template(
        self,
        template_id: str,
        values: Dict[str, Any],
        fields: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        self.get_template(template_id)
        if values:
            self.store.update("review_templates", values, {"id": template_id})
        if fields is not None:
            self.store.delete("review_fields", {"template_id": template_id})
            if fields:
                self._insert_fields(template_id, fields)
        return self.get_template(template_id)

    def delete_template(self, template_id: str) -> None:
        self.get_template(template_id)
        self.store.delete("review_templates", {"id": template_id, "organization_id": self.org_id})
        self.log_info(f"Template {template_id} deleted")

    def _insert_fields(self, template_id: str, fields: List[Dict[str, Any]]) -> None:
        rows = []
        for index, field in enumerate(fields):
            position = field.get("position")
            rows.append({
                "template_id": template_id,
                "label": field["label"],
                "field_type": field.get("field_type") or "text",
                "is_required": bool(field.get("is_required")),
                "position": index if position is None else position,
            })
        self.store.insert("review_fields", rows)
