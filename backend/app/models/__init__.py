from app.models.user import User, UserRole
from app.models.student import Student, VerificationStatus
from app.models.auth_token import AuthToken, TokenPurpose

__all__ = ["User", "UserRole", "Student", "VerificationStatus", "AuthToken", "TokenPurpose"]
