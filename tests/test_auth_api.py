import pytest
from fastapi import status
from tests.fakes import ADMIN_PASSWORD


def test_signup_then_login(client, fake_mailer):
    response = client.post("/api/auth/signup", json={
        "email": "owner@newco.com",
        "password": "secret1",
        "full_name": "Olive Owner",
        "company_name": "NewCo",
    })
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["role"] == "admin"
    assert data["organization_id"]

    response = client.post("/api/auth/login", json={"email": "owner@newco.com", "password": "secret1"})
    assert response.status_code == status.HTTP_200_OK
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["user"]["organization_id"] == data["organization_id"]


def test_signup_short_password(client):
    response = client.post("/api/auth/signup", json={"email": "x@newco.com", "password": "123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "VALIDATION_FAILED"


def test_login_success(client, admin_user):
    """Test successful login with valid credentials."""
    response = client.post("/api/auth/login", json={"email": admin_user.email, "password": ADMIN_PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data


def test_login_invalid_credentials(client):
    """Test login failure with wrong password."""
    response = client.post("/api/auth/login", json={"email": "nonexistent@alphacorp.com", "password": "wrong"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == status.HTTP_401_UNAUTHORIZED


def test_me_returns_profile_without_creating_organization(client, db_session, auth_headers, admin_user):
    from appraze.models.organization import Organization
    before = db_session.query(Organization).count()
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == admin_user.email
    assert db_session.query(Organization).count() == before


def test_profile_without_organization_is_refused(client, db_session, get_token):
    from appraze.models.profile import Profile
    from appraze.models.organization import Organization
    from appraze.services import auth as auth_service
    orphan = Profile(email="orphan@nowhere.com", hashed_password=auth_service.get_password_hash("secret1"))
    db_session.add(orphan)
    db_session.commit()

    response = client.get("/api/employees", headers={"Authorization": f"Bearer {get_token(orphan)}"})
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert db_session.query(Organization).count() == 0


def test_refresh_issues_new_tokens(client, admin_user):
    login = client.post("/api/auth/login", json={"email": admin_user.email, "password": ADMIN_PASSWORD}).json()
    response = client.post("/api/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["access_token"]

    # An access token is not a refresh token
    response = client.post("/api/auth/refresh", json={"refresh_token": login["access_token"]})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_update_profile(client, auth_headers):
    response = client.patch("/api/auth/profile", json={"full_name": "Avery A."}, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["full_name"] == "Avery A."


def test_change_password(client, auth_headers, admin_user, fake_mailer):
    response = client.post("/api/auth/change-password", json={
        "current_password": ADMIN_PASSWORD,
        "new_password": "fresh-pass",
        "confirm_password": "fresh-pass",
    }, headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert fake_mailer.of_kind("password_changed") == [(admin_user.email,)]

    response = client.post("/api/auth/login", json={"email": admin_user.email, "password": "fresh-pass"})
    assert response.status_code == status.HTTP_200_OK


def test_change_password_wrong_current(client, auth_headers):
    response = client.post("/api/auth/change-password", json={
        "current_password": "nope",
        "new_password": "fresh-pass",
        "confirm_password": "fresh-pass",
    }, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_forgot_password_same_response_for_unknown_email(client, admin_user, fake_mailer):
    known = client.post("/api/auth/forgot-password", json={"email": admin_user.email})
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@alphacorp.com"})
    assert known.status_code == unknown.status_code == status.HTTP_200_OK
    assert known.json() == unknown.json()
    assert len(fake_mailer.of_kind("password_reset")) == 1
