"""
Team membership and invitations.

`TeamMemberService` covers the organization's member list (invite, resend,
cancel, remove, accept). `TeamService` covers named teams with their own
invitation table and billing plan. Both issue one store call per step; the
multi-step operations (create with owner, accept, delete with teardown) are
not atomic.
"""
from typing import Any, Dict, List, Optional

from appraze.core.config import settings
from appraze.core.exceptions import AccessDeniedError, NotFoundError, RecordStoreError, ValidationFailedError
from appraze.core.security import generate_invite_token, generate_slug
from appraze.models.profile import ProfileRole
from appraze.models.team import InvitationStatus, MemberRole, MemberStatus
from appraze.services.audit import AuditService
from appraze.services.base import BaseService


def invite_url(token: str) -> str:
    return f"{settings.email.app_url}/invite/{token}"


class TeamMemberService(BaseService):
    def __init__(self, db, org_id: Optional[str] = None, mailer=None):
        super().__init__(db, org_id)
        self.mailer = mailer

    def fetch_team_members(self) -> List[Dict[str, Any]]:
        return self.store.select(
            "team_members",
            {"organization_id": self.org_id},
            order_by="created_at",
            ascending=False,
        )

    def invite_team_member(self, profile, email: str, name: Optional[str], role: MemberRole) -> Dict[str, Any]:
        email = email.lower()
        existing = self.store.select(
            "team_members",
            {"organization_id": self.org_id, "email": email, "status__in": [MemberStatus.ACTIVE.value, MemberStatus.INVITED.value]},
        )
        for member in existing:
            if member["status"] == MemberStatus.ACTIVE.value:
                raise ValidationFailedError("This user is already a team member")
            raise ValidationFailedError("This email has already been invited")

        token = generate_invite_token()
        member = self.store.insert("team_members", [{
            "organization_id": self.org_id,
            "email": email,
            "name": name,
            "role": role.value,
            "status": MemberStatus.INVITED.value,
            "invite_token": token,
        }])[0]
        self._send_invite(profile, member)
        return member

    def resend_invitation(self, profile, member_id: str) -> Dict[str, Any]:
        member = self._get_member(member_id)
        if member["status"] != MemberStatus.INVITED.value:
            raise ValidationFailedError("Only pending invitations can be resent")
        member = self.store.update(
            "team_members",
            {"invite_token": generate_invite_token()},
            {"id": member_id, "status": MemberStatus.INVITED.value},
        )[0]
        self._send_invite(profile, member)
        return member

    def cancel_invitation(self, member_id: str) -> None:
        removed = self.store.delete(
            "team_members",
            {"id": member_id, "organization_id": self.org_id, "status": MemberStatus.INVITED.value},
        )
        if not removed:
            raise NotFoundError("Invitation not found")

    def remove_team_member(self, profile, member_id: str) -> Dict[str, Any]:
        if not profile.is_admin:
            raise AccessDeniedError("Only admins can remove team members")
        self._get_member(member_id)
        member = self.store.update(
            "team_members",
            {"status": MemberStatus.INACTIVE.value},
            {"id": member_id, "organization_id": self.org_id},
        )[0]
        AuditService(self.db, self.org_id).log_action(
            action="remove_team_member",
            entity_type="team_member",
            entity_id=member_id,
            user_id=profile.id,
            details={"email": member["email"]},
        )
        return member

    def accept_invitation(self, profile, token: str) -> Dict[str, Any]:
        """
        Bind the invited row to the accepting profile and move the profile
        into the inviting organization. The token is cleared so it works once.
        """
        member = self.store.maybe_single(
            "team_members",
            {"invite_token": token, "status": MemberStatus.INVITED.value},
        )
        if member is None:
            return {"success": False, "message": "Invalid or expired invitation"}

        self.store.update(
            "team_members",
            {"status": MemberStatus.ACTIVE.value, "user_id": profile.id, "invite_token": None},
            {"id": member["id"]},
        )
        role = ProfileRole.MEMBER.value if member["role"] == MemberRole.MEMBER.value else ProfileRole.ADMIN.value
        self.store.update(
            "profiles",
            {"organization_id": member["organization_id"], "role": role},
            {"id": profile.id},
        )
        AuditService(self.db, member["organization_id"]).log_action(
            action="accept_invitation",
            entity_type="team_member",
            entity_id=member["id"],
            user_id=profile.id,
        )
        return {"success": True, "message": "Invitation accepted"}

    def _get_member(self, member_id: str) -> Dict[str, Any]:
        member = self.store.maybe_single("team_members", {"id": member_id, "organization_id": self.org_id})
        if member is None:
            raise NotFoundError("Team member not found")
        return member

    def _send_invite(self, profile, member: Dict[str, Any]) -> None:
        try:
            self.mailer.send_team_invite_email(
                member["email"],
                member.get("name") or "",
                profile.email,
                profile.full_name or "",
                invite_url(member["invite_token"]),
            )
        except Exception as e:
            self.log_error(f"Failed to send invitation email to {member['email']}: {e}")


class TeamService(BaseService):
    def __init__(self, db, org_id: Optional[str] = None, mailer=None):
        super().__init__(db, org_id)
        self.mailer = mailer

    def list_teams(self) -> List[Dict[str, Any]]:
        return self.store.select("teams", {"organization_id": self.org_id}, order_by="name")

    def create_team(self, profile, name: str) -> Dict[str, Any]:
        team = self.store.insert("teams", [{
            "organization_id": self.org_id,
            "name": name,
            "slug": generate_slug(name),
        }])[0]
        # Second call: a failure here leaves a team without an owner
        self.store.insert("team_members", [{
            "organization_id": self.org_id,
            "team_id": team["id"],
            "user_id": profile.id,
            "email": profile.email,
            "name": profile.full_name,
            "role": MemberRole.OWNER.value,
            "status": MemberStatus.ACTIVE.value,
        }])
        return self.get_team(team["id"])

    def get_team(self, team_id: str) -> Dict[str, Any]:
        team = self.store.maybe_single(
            "teams",
            {"id": team_id, "organization_id": self.org_id},
            expand=("members",),
        )
        if team is None:
            raise NotFoundError("Team not found")
        return team

    def update_team(self, team_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        self.get_team(team_id)
        if values:
            self.store.update("teams", values, {"id": team_id})
        return self.get_team(team_id)

    def invite_to_team(self, profile, team_id: str, email: str, role: MemberRole) -> Dict[str, Any]:
        self.get_team(team_id)
        email = email.lower()
        try:
            invitation = self.store.insert("team_invitations", [{
                "team_id": team_id,
                "email": email,
                "role": role.value,
                "status": InvitationStatus.PENDING.value,
                "invite_token": generate_invite_token(),
            }])[0]
        except RecordStoreError as e:
            if e.code == RecordStoreError.UNIQUE_VIOLATION:
                raise ValidationFailedError("This email has already been invited to the team") from e
            raise

        try:
            self.mailer.send_team_invite_email(
                email, "", profile.email, profile.full_name or "", invite_url(invitation["invite_token"])
            )
        except Exception as e:
            self.log_error(f"Failed to send team invitation email to {email}: {e}")
        return invitation

    def accept_team_invitation(self, profile, invitation_id: str) -> Dict[str, Any]:
        invitation = self.store.maybe_single("team_invitations", {"id": invitation_id}, expand=("team",))
        if invitation is None or invitation["status"] != InvitationStatus.PENDING.value:
            raise NotFoundError("Invitation not found")
        if invitation["email"] != profile.email.lower():
            raise AccessDeniedError("This invitation was sent to a different email address")

        team = invitation["team"]
        member = self.store.insert("team_members", [{
            "organization_id": team["organization_id"],
            "team_id": team["id"],
            "user_id": profile.id,
            "email": profile.email,
            "name": profile.full_name,
            "role": invitation["role"],
            "status": MemberStatus.ACTIVE.value,
        }])[0]
        self.store.update(
            "team_invitations",
            {"status": InvitationStatus.ACCEPTED.value},
            {"id": invitation_id},
        )
        AuditService(self.db, team["organization_id"]).log_action(
            action="accept_team_invitation",
            entity_type="team",
            entity_id=team["id"],
            user_id=profile.id,
        )
        return member

    def delete_team(self, team_id: str) -> None:
        """Manual teardown: invitations, members, usage logs, then the team."""
        self.get_team(team_id)
        self.store.delete("team_invitations", {"team_id": team_id})
        self.store.delete("team_members", {"team_id": team_id})
        self.store.delete("usage_logs", {"team_id": team_id})
        self.store.delete("teams", {"id": team_id})
        self.log_info(f"Team {team_id} deleted")
