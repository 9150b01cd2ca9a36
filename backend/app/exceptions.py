"""Domain errors raised by the identity and student services.

Each error carries a stable ``error_code`` and the HTTP status it maps to, so
the routers never translate them by hand. Credential and token errors use
fixed, deliberately vague messages.
"""


class IdentityError(Exception):
    """Base exception for identity and student service errors."""

    status_code = 400
    error_code = "IDENTITY_ERROR"
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(IdentityError):
    error_code = "VALIDATION_FAILED"
    default_message = "Validation failed"


class MissingProfileFields(ValidationFailure):
    error_code = "MISSING_PROFILE_FIELDS"
    default_message = "Name and course are required for student registration"


class WeakPassword(ValidationFailure):
    error_code = "WEAK_PASSWORD"

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(f"Password must be at least {min_length} characters long")


class DuplicateEmail(IdentityError):
    error_code = "DUPLICATE_EMAIL"
    default_message = "User already exists with this email"


class InvalidCredentials(IdentityError):
    status_code = 401
    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class Unauthenticated(IdentityError):
    status_code = 401
    error_code = "UNAUTHENTICATED"
    default_message = "Invalid or expired token"


class IncorrectPassword(IdentityError):
    error_code = "INCORRECT_PASSWORD"
    default_message = "Current password is incorrect"


class Forbidden(IdentityError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Access denied. Insufficient permissions."


class NotFound(IdentityError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Not found"


class UserNotFound(NotFound):
    error_code = "USER_NOT_FOUND"
    default_message = "No user found with this email address"


class InvalidOrExpiredToken(IdentityError):
    error_code = "INVALID_OR_EXPIRED_TOKEN"
    default_message = "Invalid or expired token"


class AlreadyVerified(IdentityError):
    error_code = "ALREADY_VERIFIED"
    default_message = "Student account is already verified"


class InternalFailure(IdentityError):
    status_code = 500
    error_code = "INTERNAL_FAILURE"
    default_message = "Unable to complete the request. Please try again later."
