import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.dependencies import COOKIE_NAME, get_current_user
from app.models import User
from app.schemas import (
    ChangePasswordRequest,
    EmailDispatchResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpdate,
    ResetPasswordRequest,
    SignupResponse,
    TokenResponse,
    UserCreate,
    UserSummary,
)
from app.services import identity

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


def _set_session_cookie(response: Response, token: str) -> None:
    # httpOnly cookie - secure only in production (HTTPS)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=60 * 60 * settings.jwt_expire_hours,
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user. Students also get their profile record."""
    user, token = identity.register(
        db,
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
        name=user_data.name,
        course=user_data.course,
    )
    return SignupResponse(
        message="User registered successfully",
        access_token=token,
        user=UserSummary.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
def login(login_data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Login and receive JWT token (also set as httpOnly cookie)."""
    user, token = identity.authenticate(db, login_data.email, login_data.password)
    _set_session_cookie(response, token)
    return TokenResponse(access_token=token, user=UserSummary.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    """Logout by clearing the auth cookie."""
    response.delete_cookie(key=COOKIE_NAME)
    return MessageResponse(message="Successfully logged out")


@router.get("/profile", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the current user's profile, including student details for students."""
    return identity.get_profile(db, user)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    profile_data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the current user's email, and name/course for students."""
    user = identity.update_profile(
        db,
        user,
        name=profile_data.name,
        email=profile_data.email,
        course=profile_data.course,
    )
    return identity.get_profile(db, user)


@router.put("/change-password", response_model=TokenResponse)
def change_password(
    password_data: ChangePasswordRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change password. Other sessions are revoked; a new token is returned."""
    token = identity.change_password(
        db, user, password_data.current_password, password_data.new_password
    )
    _set_session_cookie(response, token)
    return TokenResponse(access_token=token, user=UserSummary.model_validate(user))


@router.post("/send-verification", response_model=EmailDispatchResponse)
def send_verification(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Email a verification link for the current student. Also used to resend."""
    email_sent = identity.request_verification(db, user)
    if not email_sent:
        return EmailDispatchResponse(
            message="Verification link created, but we couldn't send the email. "
                    "Please try again shortly.",
            email_sent=False,
        )
    return EmailDispatchResponse(message="Verification email sent successfully", email_sent=True)


@router.get("/verify-student/{token}", response_model=MessageResponse)
def verify_student(token: str, db: Session = Depends(get_db)):
    """Verify a student account using the token sent via email."""
    identity.confirm_verification(db, token)
    return MessageResponse(message="Student account verified successfully")


@router.post("/forgot-password", response_model=EmailDispatchResponse)
def forgot_password(request_data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Email a password reset link."""
    email_sent = identity.request_password_reset(db, request_data.email)

    if not settings.reveal_unknown_reset_email:
        # Same answer whether or not the account exists
        return EmailDispatchResponse(
            message="If an account exists with this email, a password reset link has been sent."
        )

    if not email_sent:
        return EmailDispatchResponse(
            message="Password reset link created, but we couldn't send the email. "
                    "Please try again shortly.",
            email_sent=False,
        )
    return EmailDispatchResponse(message="Password reset email sent successfully", email_sent=True)


@router.post("/reset-password/{token}", response_model=MessageResponse)
def reset_password(
    token: str,
    reset_data: ResetPasswordRequest,
    db: Session = Depends(get_db),
):
    """Set a new password using the token sent via email."""
    identity.confirm_password_reset(db, token, reset_data.password)
    return MessageResponse(message="Password reset successfully")
