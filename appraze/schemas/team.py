from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import List, Optional
from appraze.models.team import MemberRole


class TeamMemberInvite(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    role: MemberRole = MemberRole.MEMBER


class TeamMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: Optional[str] = None
    team_id: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None


class InvitationAcceptResponse(BaseModel):
    success: bool
    message: str


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1)


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)


class TeamInvite(BaseModel):
    email: EmailStr
    role: MemberRole = MemberRole.MEMBER


class TeamInvitationResponse(BaseModel):
    id: str
    team_id: str
    email: str
    role: str
    status: str
    created_at: Optional[datetime] = None


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: Optional[str] = None
    name: str
    slug: str
    subscription_status: Optional[str] = None
    subscription_period_end: Optional[datetime] = None
    plan_id: Optional[str] = None
    created_at: Optional[datetime] = None
    members: List[TeamMemberResponse] = []
