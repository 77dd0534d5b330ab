from typing import Any, Dict, List

from appraze.core.exceptions import NotFoundError
from appraze.services.base import BaseService


class EmployeeService(BaseService):
    """Organization-scoped employee records."""

    def list_employees(self) -> List[Dict[str, Any]]:
        return self.store.select("employees", {"organization_id": self.org_id}, order_by="name")

    def get_employee(self, employee_id: str) -> Dict[str, Any]:
        employee = self.store.maybe_single("employees", {"id": employee_id, "organization_id": self.org_id})
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    def create_employee(self, values: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        employee = self.store.insert("employees", [{
            **values,
            "organization_id": self.org_id,
            "user_id": user_id,
        }])[0]
        self.log_info(f"Employee {employee['id']} created in organization {self.org_id}")
        return employee

    def update_employee(self, employee_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        employee = self.get_employee(employee_id)
        if not values:
            return employee
        return self.store.update("employees", values, {"id": employee_id, "organization_id": self.org_id})[0]

    def update_employee_image(self, employee_id: str, image_url: str) -> Dict[str, Any]:
        return self.update_employee(employee_id, {"image_url": image_url})

    def delete_employee(self, employee_id: str) -> None:
        self.get_employee(employee_id)
        self.store.delete("employees", {"id": employee_id, "organization_id": self.org_id})
        self.log_info(f"Employee {employee_id} deleted")
