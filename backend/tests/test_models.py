"""Tests for SQLAlchemy models and their constraints."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.models import AuthToken, Student, TokenPurpose, User, UserRole


class TestUserModel:
    """Tests for the User model."""

    def test_create_user_with_required_fields(self, db):
        """User can be created with required fields."""
        user = User(email="test@example.com", password_hash="hashed_password_here")
        db.add(user)
        db.commit()
        db.refresh(user)

        assert user.id is not None
        assert user.email == "test@example.com"
        assert user.password_hash == "hashed_password_here"

    def test_user_email_unique_constraint(self, db):
        """User email must be unique."""
        user1 = User(email="duplicate@example.com", password_hash="hash1")
        db.add(user1)
        db.commit()

        user2 = User(email="duplicate@example.com", password_hash="hash2")
        db.add(user2)
        with pytest.raises(IntegrityError):
            db.commit()

    def test_user_password_hash_required(self, db):
        """User password_hash is required (not nullable)."""
        user = User(email="nopassword@example.com", password_hash=None)
        db.add(user)
        with pytest.raises(IntegrityError):
            db.commit()

    def test_user_default_values(self, db):
        """User defaults to an unverified student with session version 0."""
        user = User(email="defaults@example.com", password_hash="hash")
        db.add(user)
        db.commit()
        db.refresh(user)

        assert user.role == UserRole.STUDENT
        assert user.is_email_verified is False
        assert user.session_version == 0
        assert user.student is None
        assert user.created_at is not None


class TestStudentModel:
    """Tests for the Student model."""

    def test_student_defaults(self, db, student_user):
        student = student_user.student

        assert student.id is not None
        assert student.user_id == student_user.id
        assert student.is_verified is False
        assert student.enrollment_date is not None

    def test_one_student_per_user(self, db, student_user):
        """A second student row for the same user violates the unique constraint."""
        db.add(Student(user_id=student_user.id, name="Other", email="other@example.com", course="X"))
        with pytest.raises(IntegrityError):
            db.commit()

    def test_deleting_user_deletes_student(self, db, student_user):
        student_id = student_user.student.id

        db.delete(student_user)
        db.commit()

        assert db.query(Student).filter(Student.id == student_id).first() is None

    def test_verification_status_combines_flags(self, db, student_user):
        student = student_user.student

        status = student.verification_status
        assert status.is_verified is False
        assert status.is_drifted is False

        student.is_verified = True
        status = student.verification_status
        assert status.student_verified is True
        assert status.user_verified is False
        assert status.is_verified is True
        assert status.is_drifted is True


class TestAuthTokenModel:
    """Tests for the AuthToken model."""

    def _token(self, user, purpose, token_hash):
        return AuthToken(
            user_id=user.id,
            purpose=purpose,
            token_hash=token_hash,
            expires_at=datetime.utcnow() + timedelta(hours=1),
        )

    def test_one_token_per_user_and_purpose(self, db, student_user):
        db.add(self._token(student_user, TokenPurpose.EMAIL_VERIFICATION, "a" * 64))
        db.commit()

        db.add(self._token(student_user, TokenPurpose.EMAIL_VERIFICATION, "b" * 64))
        with pytest.raises(IntegrityError):
            db.commit()

    def test_different_purposes_coexist(self, db, student_user):
        db.add(self._token(student_user, TokenPurpose.EMAIL_VERIFICATION, "a" * 64))
        db.add(self._token(student_user, TokenPurpose.PASSWORD_RESET, "b" * 64))
        db.commit()

        assert db.query(AuthToken).filter(AuthToken.user_id == student_user.id).count() == 2

    def test_tokens_deleted_with_user(self, db, student_user):
        db.add(self._token(student_user, TokenPurpose.PASSWORD_RESET, "c" * 64))
        db.commit()

        db.delete(student_user)
        db.commit()

        assert db.query(AuthToken).count() == 0
