from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging
from appraze.core.exceptions import AuthenticationError
from appraze.database import get_db
from appraze.models.profile import Profile
from appraze.routers.auth_deps import get_current_user, get_mailer
from appraze.schemas.auth import (
    SignUpRequest, LoginRequest, RefreshRequest, Token, ProfileResponse, ProfileUpdate,
    PasswordChange, ForgotPasswordRequest, ResetPasswordRequest,
)
from appraze.services import auth as auth_service
from appraze.services.audit import AuditService
from appraze.services.email import EmailClient

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/signup", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignUpRequest, db: Session = Depends(get_db), mailer: EmailClient = Depends(get_mailer)):
    profile = auth_service.sign_up(db, data.email, data.password, data.full_name, data.company_name, mailer)
    AuditService.log(
        db,
        action="signup",
        entity_type="profile",
        entity_id=profile["id"],
        user_id=profile["id"],
        organization_id=profile["organization_id"],
    )
    return profile


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    try:
        profile = auth_service.authenticate(db, login_data.email, login_data.password)
    except AuthenticationError:
        AuditService.log(
            db,
            action="failed_login",
            entity_type="profile",
            entity_id=None,
            user_id=None,
            details={"email": login_data.email},
        )
        raise

    tokens = auth_service.issue_tokens(profile)
    tokens["user"] = {
        "id": profile.id,
        "email": profile.email,
        "role": profile.role,
        "organization_id": profile.organization_id,
    }
    return tokens


@router.post("/refresh", response_model=Token)
def refresh_token(data: RefreshRequest, db: Session = Depends(get_db)):
    payload = auth_service.decode_access_token(data.refresh_token)
    if payload is None or payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    profile = db.query(Profile).filter(Profile.email == payload.get("sub")).first()
    if not profile or not profile.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User inactive or not found")
    return auth_service.issue_tokens(profile)


@router.get("/me", response_model=ProfileResponse)
def get_me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    update_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    """Update current user's profile information."""
    return auth_service.update_profile(db, current_user, update_data.model_dump(exclude_unset=True))


@router.post("/change-password")
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    mailer: EmailClient = Depends(get_mailer),
):
    auth_service.change_password(
        db, current_user, data.current_password, data.new_password, data.confirm_password, mailer
    )
    AuditService.log(
        db,
        action="change_password",
        entity_type="profile",
        entity_id=current_user.id,
        user_id=current_user.id,
        organization_id=current_user.organization_id,
    )
    return {"success": True, "message": "Password updated successfully"}


@router.post("/forgot-password")
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db), mailer: EmailClient = Depends(get_mailer)):
    auth_service.request_password_reset(db, data.email, mailer)
    return {"success": True, "message": "If an account exists for this email, a reset link has been sent"}


@router.post("/reset-password")
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db), mailer: EmailClient = Depends(get_mailer)):
    auth_service.reset_password(db, data.token, data.password, data.confirm_password, mailer)
    return {"success": True, "message": "Password has been reset"}
