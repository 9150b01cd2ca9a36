"""Admin operations on student records.

A student record is always paired with a student-role user. Creation, email
changes and deletion touch both rows in a single commit.
"""

import logging
import secrets

from sqlalchemy.orm import Session, joinedload

from app.exceptions import DuplicateEmail, NotFound
from app.models import Student, User, UserRole
from app.services.auth import hash_password, normalize_email
from app.services.identity import (
    check_password_strength,
    commit_or_fail,
    get_user_by_email,
)

logger = logging.getLogger(__name__)


def list_students(db: Session, page: int = 1, limit: int = 10) -> tuple[list[Student], int]:
    """Return one page of students, newest first, and the total count."""
    query = db.query(Student)
    total = query.count()
    students = (
        query.options(joinedload(Student.user))
        .order_by(Student.created_at.desc(), Student.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return students, total


def get_student(db: Session, student_id: int) -> Student:
    student = (
        db.query(Student)
        .options(joinedload(Student.user))
        .filter(Student.id == student_id)
        .first()
    )
    if student is None:
        raise NotFound("Student not found")
    return student


def create_student(
    db: Session,
    name: str,
    email: str,
    course: str,
    password: str | None = None,
) -> Student:
    """Create a student and its user account together.

    Without a password the account gets a random one; the student sets their
    own through the password reset flow.
    """
    email = normalize_email(email)
    if password is None:
        password = secrets.token_urlsafe(16)
    check_password_strength(password)

    if get_user_by_email(db, email):
        raise DuplicateEmail()

    user = User(email=email, password_hash=hash_password(password), role=UserRole.STUDENT)
    student = Student(name=name.strip(), email=email, course=course.strip())
    user.student = student

    db.add(user)
    commit_or_fail(db, f"create student {email}", on_conflict=DuplicateEmail())
    db.refresh(student)

    logger.info(f"Admin created student {student.id}")
    return student


def update_student(
    db: Session,
    student_id: int,
    name: str | None = None,
    email: str | None = None,
    course: str | None = None,
) -> Student:
    student = get_student(db, student_id)

    if email:
        email = normalize_email(email)
        if email != student.user.email:
            existing = get_user_by_email(db, email)
            if existing is not None and existing.id != student.user_id:
                raise DuplicateEmail("Email already exists")
            student.user.email = email
        student.email = email

    if name and name.strip():
        student.name = name.strip()
    if course and course.strip():
        student.course = course.strip()

    commit_or_fail(db, f"update student {student_id}", on_conflict=DuplicateEmail("Email already exists"))
    db.refresh(student)
    return student


def delete_student(db: Session, student_id: int) -> None:
    """Delete a student by deleting its user; profile and tokens cascade."""
    student = get_student(db, student_id)
    db.delete(student.user)
    commit_or_fail(db, f"delete student {student_id}")
    logger.info(f"Admin deleted student {student_id}")
