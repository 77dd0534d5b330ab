from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from appraze.database import get_db
from appraze.models.profile import Profile
from appraze.routers.auth_deps import require_org_context
from appraze.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeImageUpdate, EmployeeResponse
from appraze.services.employees import EmployeeService

router = APIRouter(
    prefix="/employees",
    tags=["employees"]
)


@router.get("", response_model=List[EmployeeResponse])
def list_employees(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    """List the organization's employees ordered by name."""
    return EmployeeService(db, current_user.organization_id).list_employees()


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    data: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    service = EmployeeService(db, current_user.organization_id)
    return service.create_employee(data.model_dump(mode="json"), user_id=current_user.id)


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return EmployeeService(db, current_user.organization_id).get_employee(employee_id)


@router.patch("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: str,
    data: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    service = EmployeeService(db, current_user.organization_id)
    return service.update_employee(employee_id, data.model_dump(mode="json", exclude_unset=True))


@router.put("/{employee_id}/image", response_model=EmployeeResponse)
def update_employee_image(
    employee_id: str,
    data: EmployeeImageUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    return EmployeeService(db, current_user.organization_id).update_employee_image(employee_id, data.image_url)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(employee_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    EmployeeService(db, current_user.organization_id).delete_employee(employee_id)
