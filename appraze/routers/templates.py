from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from appraze.database import get_db
from appraze.models.profile import Profile
from appraze.routers.auth_deps import require_org_context
from appraze.schemas.template import TemplateCreate, TemplateUpdate, TemplateResponse
from appraze.services.templates import TemplateService

router = APIRouter(
    prefix="/templates",
    tags=["templates"]
)


@router.get("", response_model=List[TemplateResponse])
def list_templates(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return TemplateService(db, current_user.organization_id).list_templates()


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(
    data: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    service = TemplateService(db, current_user.organization_id)
    return service.create_template(
        data.name,
        data.description,
        [field.model_dump() for field in data.fields],
    )


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(template_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return TemplateService(db, current_user.organization_id).get_template(template_id)


@router.patch("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: str,
    data: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    values = data.model_dump(exclude_unset=True, exclude={"fields"})
    fields = [field.model_dump() for field in data.fields] if data.fields is not None else None
    return TemplateService(db, current_user.organization_id).update_template(template_id, values, fields)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(template_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    TemplateService(db, current_user.organization_id).delete_template(template_id)
