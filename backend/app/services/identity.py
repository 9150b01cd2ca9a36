"""Identity and verification service.

Owns credential checks, session tokens, the student email-verification flow
and the password-reset flow.

Verification is recorded twice, on ``Student.is_verified`` and on
``User.is_email_verified``. Every write that sets one of them sets the other
in the same commit, so the two flags cannot drift apart through this module.

Emails go out only after the state change is committed. A failed send is
logged and reported to the caller; the issued token stays valid so the user
can ask for another email.
"""

import enum
import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import (
    AlreadyVerified,
    DuplicateEmail,
    IncorrectPassword,
    InternalFailure,
    InvalidCredentials,
    InvalidOrExpiredToken,
    MissingProfileFields,
    NotFound,
    Unauthenticated,
    UserNotFound,
    ValidationFailure,
    WeakPassword,
)
from app.models import Student, TokenPurpose, User, UserRole
from app.services.auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    normalize_email,
    pwd_context,
    utcnow,
    verify_password,
)
from app.services.email import send_password_reset_email, send_verification_email
from app.services.tokens import find_valid_token, has_pending_token, issue_token

logger = logging.getLogger(__name__)
settings = get_settings()


class VerificationState(str, enum.Enum):
    UNVERIFIED = "unverified"
    PENDING = "pending_verification"
    VERIFIED = "verified"


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def check_password_strength(password: str | None) -> None:
    if not password or len(password) < settings.min_password_length:
        raise WeakPassword(settings.min_password_length)


def commit_or_fail(db: Session, action: str, on_conflict: Exception | None = None) -> None:
    """Commit the session, rolling back and translating database errors.

    An IntegrityError becomes ``on_conflict`` when one is given. Any other
    database error is logged and surfaced as a generic InternalFailure.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if on_conflict is not None:
            raise on_conflict from e
        logger.exception("Integrity error while trying to %s", action)
        raise InternalFailure() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise InternalFailure() from e


def store_token(db: Session, user: User, purpose: TokenPurpose, lifetime: timedelta) -> str:
    """Issue and commit a token for ``user``, replacing any earlier one for ``purpose``.

    Two overlapping requests can both find no row and both insert. The loser of
    that race hits the (user_id, purpose) unique constraint; it rolls back and
    retries once, which then updates the winner's row.
    """
    for attempt in range(2):
        token = issue_token(db, user, purpose, lifetime)
        try:
            db.commit()
            return token
        except IntegrityError as e:
            db.rollback()
            if attempt:
                logger.exception("Could not store %s token for user %s", purpose.value, user.id)
                raise InternalFailure() from e
            logger.warning(f"Concurrent {purpose.value} token request for user {user.id}, retrying")
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Failed to store %s token for user %s", purpose.value, user.id)
            raise InternalFailure() from e


def _require_profile_fields(name: str | None, course: str | None) -> tuple[str, str]:
    name = (name or "").strip()
    course = (course or "").strip()
    if not name or not course:
        raise MissingProfileFields()
    return name, course


def issue_session_token(user: User) -> str:
    return create_access_token(user.id, user.session_version or 0)


# --- Credentials and sessions ---


def register(
    db: Session,
    email: str,
    password: str,
    role: UserRole | str = UserRole.STUDENT,
    name: str | None = None,
    course: str | None = None,
) -> tuple[User, str]:
    """Create a user, plus a student profile for the student role, in a single commit.

    Returns the new user and a session token.
    """
    try:
        role = UserRole(role)
    except ValueError:
        raise ValidationFailure("Role must be either admin or student")

    email = normalize_email(email)
    check_password_strength(password)

    if get_user_by_email(db, email):
        raise DuplicateEmail()

    user = User(email=email, password_hash=hash_password(password), role=role)
    if role == UserRole.STUDENT:
        name, course = _require_profile_fields(name, course)
        user.student = Student(name=name, email=email, course=course)

    db.add(user)
    commit_or_fail(db, f"register {email}", on_conflict=DuplicateEmail())
    db.refresh(user)

    logger.info(f"Registered {role.value} account {user.id}")
    return user, issue_session_token(user)


def authenticate(db: Session, email: str, password: str) -> tuple[User, str]:
    """Check credentials and return the user with a fresh session token."""
    user = get_user_by_email(db, email)

    if user is None:
        # Keep response timing close to the wrong-password path
        pwd_context.dummy_verify()
        logger.warning("Login attempt for unknown email")
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        logger.warning(f"Invalid password for user {user.id}")
        raise InvalidCredentials()

    return user, issue_session_token(user)


def resolve_session(db: Session, token: str | None) -> User:
    """Return the user a session token belongs to, or raise Unauthenticated."""
    if not token:
        raise Unauthenticated("Not authenticated")

    payload = decode_access_token(token)
    if not payload:
        raise Unauthenticated()

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token payload")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated()

    if payload.get("ver", 0) != user.session_version:
        logger.warning(f"Rejected revoked session token for user {user.id}")
        raise Unauthenticated()

    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> str:
    """Replace the user's password and revoke their other sessions.

    Returns a new session token for the caller.
    """
    if not verify_password(current_password, user.password_hash):
        raise IncorrectPassword()
    check_password_strength(new_password)

    user.password_hash = hash_password(new_password)
    user.session_version = (user.session_version or 0) + 1
    commit_or_fail(db, f"change password for user {user.id}")

    logger.info(f"Password changed for user {user.id}")
    return issue_session_token(user)


def get_profile(db: Session, user: User) -> dict:
    profile = {
        "id": user.id,
        "email": user.email,
        "role": user.role.value,
        "is_email_verified": user.is_email_verified,
        "student": None,
    }
    if user.role == UserRole.STUDENT and user.student is not None:
        student = user.student
        profile["student"] = {
            "id": student.id,
            "name": student.name,
            "course": student.course,
            "enrollment_date": student.enrollment_date,
            "is_verified": student.verification_status.is_verified,
            "verification_state": verification_state(db, student).value,
        }
    return profile


def update_profile(
    db: Session,
    user: User,
    name: str | None = None,
    email: str | None = None,
    course: str | None = None,
) -> User:
    """Update the caller's own email and, for students, name and course."""
    if email:
        email = normalize_email(email)
        if email != user.email:
            existing = get_user_by_email(db, email)
            if existing is not None and existing.id != user.id:
                raise DuplicateEmail("Email already exists")
            user.email = email

    if user.role == UserRole.STUDENT:
        student = user.student
        if student is None:
            raise NotFound("Student profile not found")
        if name and name.strip():
            student.name = name.strip()
        if course and course.strip():
            student.course = course.strip()
        student.email = user.email

    commit_or_fail(db, f"update profile for user {user.id}", on_conflict=DuplicateEmail("Email already exists"))
    db.refresh(user)
    return user


# --- Email verification ---


def verification_state(db: Session, student: Student) -> VerificationState:
    if student.verification_status.is_verified:
        return VerificationState.VERIFIED
    if has_pending_token(db, student.user_id, TokenPurpose.EMAIL_VERIFICATION, utcnow()):
        return VerificationState.PENDING
    return VerificationState.UNVERIFIED


def request_verification(db: Session, user: User) -> bool:
    """Issue a verification token for the user's student profile and email it.

    Returns whether the email was handed off successfully.
    """
    student = user.student if user.role == UserRole.STUDENT else None
    if student is None:
        raise NotFound("Student profile not found")

    if student.verification_status.is_verified:
        raise AlreadyVerified()

    token = store_token(
        db,
        user,
        TokenPurpose.EMAIL_VERIFICATION,
        timedelta(hours=settings.verification_token_expire_hours),
    )

    email_sent = send_verification_email(user.email, student.name, token)
    if not email_sent:
        logger.warning(
            "Failed to send verification email to %s - user can request resend",
            user.email,
        )
    return email_sent


def confirm_verification(db: Session, token: str) -> Student:
    """Consume a verification token and mark student and user verified together."""
    record = find_valid_token(db, token, TokenPurpose.EMAIL_VERIFICATION, utcnow())
    student = record.user.student if record is not None else None
    if student is None:
        logger.warning("Rejected invalid or expired verification token")
        raise InvalidOrExpiredToken("Invalid or expired verification token")

    student.is_verified = True
    record.user.is_email_verified = True
    db.delete(record)
    commit_or_fail(db, f"verify student {student.id}")

    logger.info(f"Student {student.id} verified")
    return student


# --- Password reset ---


def request_password_reset(db: Session, email: str) -> bool:
    """Issue a reset token for the account with ``email`` and email it.

    Returns whether an email was handed off. Unknown emails raise UserNotFound
    unless ``reveal_unknown_reset_email`` is disabled, in which case they
    return False like a failed send.
    """
    user = get_user_by_email(db, email)
    if user is None:
        if settings.reveal_unknown_reset_email:
            raise UserNotFound()
        logger.info("Password reset requested for unknown email")
        return False

    token = store_token(
        db,
        user,
        TokenPurpose.PASSWORD_RESET,
        timedelta(hours=settings.reset_token_expire_hours),
    )

    display_name = user.student.name if user.student is not None else user.email
    email_sent = send_password_reset_email(user.email, display_name, token)
    if not email_sent:
        logger.warning("Failed to send password reset email to %s", user.email)
    return email_sent


def confirm_password_reset(db: Session, token: str, new_password: str) -> User:
    """Consume a reset token, set the new password and revoke existing sessions."""
    check_password_strength(new_password)

    record = find_valid_token(db, token, TokenPurpose.PASSWORD_RESET, utcnow())
    if record is None:
        logger.warning("Rejected invalid or expired password reset token")
        raise InvalidOrExpiredToken("Invalid or expired password reset token")

    user = record.user
    user.password_hash = hash_password(new_password)
    user.session_version = (user.session_version or 0) + 1
    db.delete(record)
    commit_or_fail(db, f"reset password for user {user.id}")

    logger.info(f"Password reset for user {user.id}")
    return user
