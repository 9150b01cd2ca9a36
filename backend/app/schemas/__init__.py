from app.schemas.user import (
    UserBase,
    UserCreate,
    UserSummary,
    StudentProfile,
    ProfileResponse,
    ProfileUpdate,
)
from app.schemas.auth import (
    LoginRequest,
    TokenResponse,
    SignupResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
    EmailDispatchResponse,
)
from app.schemas.student import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    StudentListResponse,
    StudentMessageResponse,
    VerificationStatusResponse,
    Pagination,
)

__all__ = [
    "UserBase",
    "UserCreate",
    "UserSummary",
    "StudentProfile",
    "ProfileResponse",
    "ProfileUpdate",
    "LoginRequest",
    "TokenResponse",
    "SignupResponse",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "MessageResponse",
    "EmailDispatchResponse",
    "StudentCreate",
    "StudentUpdate",
    "StudentResponse",
    "StudentListResponse",
    "StudentMessageResponse",
    "VerificationStatusResponse",
    "Pagination",
]
