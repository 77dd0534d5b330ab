from fastapi import status
from appraze.models.team import TeamInvitation, TeamMember, Team
from appraze.models.subscription import UsageLog


def _invite(client, headers, email="newhire@alphacorp.com", **extra):
    return client.post("/api/team/invite", json={"email": email, "name": "New Hire", **extra}, headers=headers)


def test_invite_team_member_sends_email(client, auth_headers, fake_mailer, admin_user):
    response = _invite(client, auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    member = response.json()
    assert member["status"] == "invited"
    assert member["role"] == "member"

    (recipient, name, inviter_email, inviter_name, url), = fake_mailer.of_kind("team_invite")
    assert recipient == "newhire@alphacorp.com"
    assert inviter_email == admin_user.email
    assert inviter_name == "Avery Admin"
    assert "/invite/" in url


def test_invite_requires_admin(client, member_user, get_token):
    headers = {"Authorization": f"Bearer {get_token(member_user)}"}
    assert _invite(client, headers).status_code == status.HTTP_403_FORBIDDEN


def test_duplicate_invitations_are_refused(client, db_session, auth_headers):
    _invite(client, auth_headers)
    response = _invite(client, auth_headers, email="NewHire@alphacorp.com")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["msg"] == "This email has already been invited"

    db_session.query(TeamMember).update({"status": "active"})
    db_session.commit()
    response = _invite(client, auth_headers)
    assert response.json()["errors"][0]["msg"] == "This user is already a team member"


def test_resend_rotates_token(client, db_session, auth_headers, fake_mailer):
    member = _invite(client, auth_headers).json()
    first_url = fake_mailer.of_kind("team_invite")[0][4]

    response = client.post(f"/api/team/members/{member['id']}/resend", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    second_url = fake_mailer.of_kind("team_invite")[1][4]
    assert first_url != second_url


def test_cancel_invitation(client, auth_headers):
    member = _invite(client, auth_headers).json()
    response = client.delete(f"/api/team/members/{member['id']}/invitation", headers=auth_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/team/members", headers=auth_headers).json() == []

    response = client.delete(f"/api/team/members/{member['id']}/invitation", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_remove_team_member_is_admin_only(client, auth_headers, member_user, get_token):
    member = _invite(client, auth_headers).json()

    headers = {"Authorization": f"Bearer {get_token(member_user)}"}
    response = client.post(f"/api/team/members/{member['id']}/remove", headers=headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post(f"/api/team/members/{member['id']}/remove", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "inactive"


def test_accept_invitation_moves_profile_into_organization(client, db_session, auth_headers, org, get_token):
    from appraze.models.profile import Profile
    _invite(client, auth_headers, email="joiner@elsewhere.com", role="admin")
    token = db_session.query(TeamMember).filter(TeamMember.email == "joiner@elsewhere.com").first().invite_token

    joiner = Profile(email="joiner@elsewhere.com", hashed_password="x")
    db_session.add(joiner)
    db_session.commit()
    headers = {"Authorization": f"Bearer {get_token(joiner)}"}

    response = client.post(f"/api/team/accept/{token}", headers=headers)
    assert response.json() == {"success": True, "message": "Invitation accepted"}
    db_session.refresh(joiner)
    assert joiner.organization_id == org.id
    assert joiner.role == "admin"

    # Single use
    response = client.post(f"/api/team/accept/{token}", headers=headers)
    assert response.json()["success"] is False


def test_create_team_adds_owner(client, auth_headers, admin_user):
    response = client.post("/api/teams", json={"name": "Platform"}, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    team = response.json()
    assert team["slug"].startswith("platform")
    assert [(m["user_id"], m["role"]) for m in team["members"]] == [(admin_user.id, "owner")]


def test_team_invitation_flow(client, db_session, auth_headers, member_user, get_token, fake_mailer):
    team = client.post("/api/teams", json={"name": "Platform"}, headers=auth_headers).json()

    response = client.post(f"/api/teams/{team['id']}/invitations", json={"email": member_user.email}, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    invitation = response.json()
    assert invitation["status"] == "pending"
    assert len(fake_mailer.of_kind("team_invite")) == 1

    response = client.post(f"/api/teams/{team['id']}/invitations", json={"email": member_user.email}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    # Only the invited address may accept
    response = client.post(f"/api/teams/invitations/{invitation['id']}/accept", headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    headers = {"Authorization": f"Bearer {get_token(member_user)}"}
    response = client.post(f"/api/teams/invitations/{invitation['id']}/accept", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["team_id"] == team["id"]
    assert db_session.query(TeamInvitation).filter(TeamInvitation.id == invitation["id"]).first().status == "accepted"


def test_delete_team_tears_down_dependents(client, db_session, auth_headers):
    team = client.post("/api/teams", json={"name": "Platform"}, headers=auth_headers).json()
    client.post(f"/api/teams/{team['id']}/invitations", json={"email": "x@alphacorp.com"}, headers=auth_headers)
    db_session.add(UsageLog(team_id=team["id"], feature="review_generation", quantity=1))
    db_session.commit()

    response = client.delete(f"/api/teams/{team['id']}", headers=auth_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert db_session.query(Team).count() == 0
    assert db_session.query(TeamMember).filter(TeamMember.team_id == team["id"]).count() == 0
    assert db_session.query(TeamInvitation).count() == 0
    assert db_session.query(UsageLog).count() == 0
