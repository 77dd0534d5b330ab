from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from appraze.database import get_db
from appraze.models.profile import Profile
from appraze.routers.auth_deps import get_current_user, get_mailer, require_admin, require_org_context
from appraze.schemas.team import (
    TeamMemberInvite, TeamMemberResponse, InvitationAcceptResponse,
    TeamCreate, TeamUpdate, TeamInvite, TeamInvitationResponse, TeamResponse,
)
from appraze.services.email import EmailClient
from appraze.services.team import TeamMemberService, TeamService

router = APIRouter(
    prefix="/team",
    tags=["team"]
)

teams_router = APIRouter(
    prefix="/teams",
    tags=["teams"]
)


# --- Organization members ---

@router.get("/members", response_model=List[TeamMemberResponse])
def fetch_team_members(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return TeamMemberService(db, current_user.organization_id).fetch_team_members()


@router.post("/invite", response_model=TeamMemberResponse, status_code=status.HTTP_201_CREATED)
def invite_team_member(
    data: TeamMemberInvite,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin),
    mailer: EmailClient = Depends(get_mailer),
):
    service = TeamMemberService(db, current_user.organization_id, mailer=mailer)
    return service.invite_team_member(current_user, data.email, data.name, data.role)


@router.post("/members/{member_id}/resend", response_model=TeamMemberResponse)
def resend_invitation(
    member_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin),
    mailer: EmailClient = Depends(get_mailer),
):
    service = TeamMemberService(db, current_user.organization_id, mailer=mailer)
    return service.resend_invitation(current_user, member_id)


@router.delete("/members/{member_id}/invitation", status_code=status.HTTP_204_NO_CONTENT)
def cancel_invitation(member_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_admin)):
    TeamMemberService(db, current_user.organization_id).cancel_invitation(member_id)


@router.post("/members/{member_id}/remove", response_model=TeamMemberResponse)
def remove_team_member(member_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    """Admin only; the role check lives in the service."""
    return TeamMemberService(db, current_user.organization_id).remove_team_member(current_user, member_id)


@router.post("/accept/{token}", response_model=InvitationAcceptResponse)
def accept_invitation(token: str, db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return TeamMemberService(db, current_user.organization_id).accept_invitation(current_user, token)


# --- Teams ---

@teams_router.get("", response_model=List[TeamResponse])
def list_teams(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return TeamService(db, current_user.organization_id).list_teams()


@teams_router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(data: TeamCreate, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return TeamService(db, current_user.organization_id).create_team(current_user, data.name)


@teams_router.get("/{team_id}", response_model=TeamResponse)
def get_team(team_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return TeamService(db, current_user.organization_id).get_team(team_id)


@teams_router.patch("/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: str,
    data: TeamUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    return TeamService(db, current_user.organization_id).update_team(team_id, data.model_dump(exclude_unset=True))


@teams_router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(team_id: str, db: Session = Depends(get_db), current_user: Profile = Depends(require_admin)):
    TeamService(db, current_user.organization_id).delete_team(team_id)


@teams_router.post("/{team_id}/invitations", response_model=TeamInvitationResponse, status_code=status.HTTP_201_CREATED)
def invite_to_team(
    team_id: str,
    data: TeamInvite,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context),
    mailer: EmailClient = Depends(get_mailer),
):
    service = TeamService(db, current_user.organization_id, mailer=mailer)
    return service.invite_to_team(current_user, team_id, data.email, data.role)


@teams_router.post("/invitations/{invitation_id}/accept", response_model=TeamMemberResponse)
def accept_team_invitation(
    invitation_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    return TeamService(db, current_user.organization_id).accept_team_invitation(current_user, invitation_id)
