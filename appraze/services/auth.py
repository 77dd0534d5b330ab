"""
Authentication and account lifecycle.

Password hashing (passlib/bcrypt), JWT issue/verify (PyJWT, HS256) and the
account operations built on them. The organization is created here, at
sign-up, and nowhere else.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from appraze.core.config import settings
from appraze.core.exceptions import AuthenticationError, RecordStoreError, ValidationFailedError
from appraze.core.security import generate_slug
from appraze.models.profile import Profile, ProfileRole
from appraze.services.record_store import RecordStore

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days
PASSWORD_RESET_EXPIRE_MINUTES = settings.password_reset_expire_minutes

PROFILE_FIELDS = ("full_name", "avatar_url", "company_name")


# ----------------------------------------------------------------------
# Passwords and tokens
# ----------------------------------------------------------------------
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + expires_delta, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, "access", expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(data: dict) -> str:
    return _encode(data, "refresh", timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


def create_password_reset_token(email: str) -> str:
    return _encode({"sub": email}, "reset", timedelta(minutes=PASSWORD_RESET_EXPIRE_MINUTES))


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Returns the payload, None for an invalid token, or
    {"error": "TOKEN_EXPIRED"} when the signature is valid but expired.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except jwt.InvalidTokenError as e:
        logger.info(f"Token rejected: {type(e).__name__}")
        return None


def token_claims(profile) -> Dict[str, Any]:
    return {
        "sub": profile.email,
        "user_id": profile.id,
        "org_id": profile.organization_id,
        "role": profile.role,
    }


def issue_tokens(profile) -> Dict[str, Any]:
    return {
        "access_token": create_access_token(data=token_claims(profile)),
        "refresh_token": create_refresh_token(data={"sub": profile.email}),
        "token_type": "bearer",
    }


def _check_password(password: str, confirm: Optional[str] = None) -> None:
    if confirm is not None and password != confirm:
        raise ValidationFailedError("Passwords do not match")
    if len(password) < settings.min_password_length:
        raise ValidationFailedError(
            f"Password must be at least {settings.min_password_length} characters"
        )


# ----------------------------------------------------------------------
# Account operations
# ----------------------------------------------------------------------
def sign_up(
    db: Session,
    email: str,
    password: str,
    full_name: Optional[str],
    company_name: Optional[str],
    mailer,
) -> Dict[str, Any]:
    """
    Create the organization, then the admin profile that owns it.
    Two store calls; a failure on the second leaves an empty organization.
    """
    _check_password(password)
    store = RecordStore(db)
    email = email.lower()
    if store.maybe_single("profiles", {"email": email}) is not None:
        raise ValidationFailedError("An account with this email already exists")

    org_name = company_name or f"{full_name or email}'s Organization"
    organization = store.insert("organizations", [{"name": org_name, "slug": generate_slug(org_name)}])[0]
    try:
        profile = store.insert("profiles", [{
            "email": email,
            "hashed_password": get_password_hash(password),
            "full_name": full_name,
            "company_name": company_name,
            "organization_id": organization["id"],
            "role": ProfileRole.ADMIN.value,
        }])[0]
    except RecordStoreError as e:
        if e.code == RecordStoreError.UNIQUE_VIOLATION:
            raise ValidationFailedError("An account with this email already exists") from e
        raise

    logger.info(f"Account created for {email} in organization {organization['id']}")
    try:
        mailer.send_welcome_email(email, full_name or "")
    except Exception as e:
        logger.error(f"Failed to send welcome email to {email}: {e}")
    return profile


def authenticate(db: Session, email: str, password: str) -> Profile:
    profile = db.query(Profile).filter(Profile.email == email.lower()).first()
    if not profile or not verify_password(password, profile.hashed_password):
        raise AuthenticationError("Incorrect email or password")
    if not profile.is_active:
        raise AuthenticationError("User is inactive")
    return profile


def request_password_reset(db: Session, email: str, mailer) -> None:
    """Sends a reset link when the account exists; silent otherwise."""
    profile = RecordStore(db).maybe_single("profiles", {"email": email.lower()})
    if profile is None:
        logger.info("Password reset requested for unknown email")
        return
    token = create_password_reset_token(profile["email"])
    reset_link = f"{settings.email.app_url}/reset-password?token={token}"
    try:
        mailer.send_password_reset_email(profile["email"], reset_link)
    except Exception as e:
        logger.error(f"Failed to send password reset email: {e}")


def reset_password(db: Session, token: str, password: str, confirm: str, mailer) -> None:
    payload = decode_access_token(token)
    if not payload or payload.get("type") != "reset" or "sub" not in payload:
        raise ValidationFailedError("Invalid or expired reset token")
    _check_password(password, confirm)

    updated = RecordStore(db).update(
        "profiles",
        {"hashed_password": get_password_hash(password)},
        {"email": payload["sub"]},
    )
    if not updated:
        raise ValidationFailedError("Invalid or expired reset token")
    _notify_password_changed(mailer, payload["sub"])


def change_password(db: Session, profile, current_password: str, new_password: str, confirm: str, mailer) -> None:
    if not verify_password(current_password, profile.hashed_password):
        raise ValidationFailedError("Current password is incorrect")
    _check_password(new_password, confirm)
    RecordStore(db).update(
        "profiles",
        {"hashed_password": get_password_hash(new_password)},
        {"id": profile.id},
    )
    _notify_password_changed(mailer, profile.email)


def update_profile(db: Session, profile, values: Dict[str, Any]) -> Dict[str, Any]:
    changes = {key: value for key, value in values.items() if key in PROFILE_FIELDS}
    store = RecordStore(db)
    if changes:
        return store.update("profiles", changes, {"id": profile.id})[0]
    return store.single("profiles", {"id": profile.id})


def _notify_password_changed(mailer, email: str) -> None:
    try:
        mailer.send_password_changed_email(email)
    except Exception as e:
        logger.error(f"Failed to send password changed email: {e}")
