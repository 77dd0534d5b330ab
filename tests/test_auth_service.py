import pytest
from datetime import timedelta
from appraze.core.exceptions import ValidationFailedError
from appraze.models.organization import Organization
from appraze.models.profile import Profile
from appraze.services import auth as auth_service
from tests.fakes import FakeMailer


def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)


def test_access_token_round_trip():
    token = auth_service.create_access_token(data={"sub": "a@example.com", "org_id": "org-1"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "a@example.com"
    assert payload["org_id"] == "org-1"
    assert payload["type"] == "access"


def test_expired_token_is_flagged():
    token = auth_service.create_access_token(data={"sub": "a@example.com"}, expires_delta=timedelta(seconds=-5))
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}


def test_garbage_token_is_rejected():
    assert auth_service.decode_access_token("not-a-jwt") is None


def test_sign_up_creates_organization_with_admin_profile(db_session):
    mailer = FakeMailer()
    profile = auth_service.sign_up(db_session, "Founder@Example.com", "secret1", "Fran Founder", "Acme", mailer)

    assert profile["email"] == "founder@example.com"
    assert profile["role"] == "admin"
    org = db_session.query(Organization).filter(Organization.id == profile["organization_id"]).first()
    assert org is not None
    assert org.name == "Acme"
    assert mailer.of_kind("welcome") == [("founder@example.com", "Fran Founder")]


def test_sign_up_rejects_short_password_before_any_write(db_session):
    with pytest.raises(ValidationFailedError) as exc:
        auth_service.sign_up(db_session, "a@example.com", "12345", None, None, FakeMailer())
    assert "at least 6" in exc.value.message
    assert db_session.query(Organization).count() == 0


def test_sign_up_rejects_duplicate_email(db_session, admin_user):
    with pytest.raises(ValidationFailedError):
        auth_service.sign_up(db_session, admin_user.email, "secret1", None, None, FakeMailer())


def test_sign_up_survives_welcome_email_failure(db_session):
    profile = auth_service.sign_up(
        db_session, "b@example.com", "secret1", None, None, FakeMailer(error=RuntimeError("mail down"))
    )
    assert db_session.query(Profile).filter(Profile.id == profile["id"]).count() == 1


def test_change_password_requires_matching_confirmation(db_session, admin_user):
    with pytest.raises(ValidationFailedError) as exc:
        auth_service.change_password(db_session, admin_user, "AdminPassword123!", "newpass1", "newpass2", FakeMailer())
    assert exc.value.message == "Passwords do not match"


def test_reset_password_with_token(db_session, admin_user):
    mailer = FakeMailer()
    auth_service.request_password_reset(db_session, admin_user.email, mailer)
    (email, link), = mailer.of_kind("password_reset")
    token = link.split("token=")[1]

    auth_service.reset_password(db_session, token, "brandnew1", "brandnew1", mailer)
    db_session.refresh(admin_user)
    assert auth_service.verify_password("brandnew1", admin_user.hashed_password)
    assert mailer.of_kind("password_changed") == [(admin_user.email,)]


def test_reset_password_rejects_access_token(db_session, admin_user):
    token = auth_service.create_access_token(data={"sub": admin_user.email})
    with pytest.raises(ValidationFailedError):
        auth_service.reset_password(db_session, token, "brandnew1", "brandnew1", FakeMailer())


def test_password_reset_for_unknown_email_sends_nothing(db_session):
    mailer = FakeMailer()
    auth_service.request_password_reset(db_session, "ghost@example.com", mailer)
    assert mailer.sent == []
