from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class ReviewFieldInput(BaseModel):
    label: str = Field(..., min_length=1)
    field_type: str = "text"
    is_required: bool = False
    position: Optional[int] = None


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    fields: List[ReviewFieldInput] = []


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    # None keeps the current fields; a list replaces them
    fields: Optional[List[ReviewFieldInput]] = None


class ReviewFieldResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_id: str
    label: str
    field_type: Optional[str] = None
    is_required: bool = False
    position: Optional[int] = None


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    fields: List[ReviewFieldResponse] = []
