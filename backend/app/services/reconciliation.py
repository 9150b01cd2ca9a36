"""Detection and repair of drift between Student.is_verified and User.is_email_verified.

The identity service sets both flags in one commit, so drift can only come
from rows written some other way (imports, manual edits, older data). Both
functions here are safe to run repeatedly.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session, joinedload

from app.models import Student, User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class DriftRecord:
    student_id: int
    user_id: int
    name: str
    email: str
    student_verified: bool
    user_verified: bool


@dataclass
class VerificationReport:
    total: int = 0
    verified: int = 0
    mismatched: list[DriftRecord] = field(default_factory=list)

    @property
    def pending(self) -> int:
        return self.total - self.verified

    @property
    def in_sync(self) -> bool:
        return not self.mismatched


def find_verification_drift(db: Session) -> VerificationReport:
    """Scan every student and report those whose two verification flags disagree."""
    report = VerificationReport()
    students = db.query(Student).options(joinedload(Student.user)).order_by(Student.id).all()

    for student in students:
        status = student.verification_status
        report.total += 1
        if status.is_verified:
            report.verified += 1
        if status.is_drifted:
            report.mismatched.append(
                DriftRecord(
                    student_id=student.id,
                    user_id=student.user_id,
                    name=student.name,
                    email=student.email,
                    student_verified=status.student_verified,
                    user_verified=status.user_verified,
                )
            )

    if report.mismatched:
        logger.warning(f"Found {len(report.mismatched)} students with mismatched verification flags")
    return report


def sync_verification_status(db: Session) -> int:
    """Set both flags wherever either one is set. Returns the number of rows changed."""
    synced = 0

    verified_students = (
        db.query(Student)
        .join(Student.user)
        .filter(Student.is_verified == True, User.is_email_verified == False)  # noqa: E712
        .all()
    )
    for student in verified_students:
        student.user.is_email_verified = True
        synced += 1
        logger.info(f"Synced user verification for student {student.id}")

    unverified_students = (
        db.query(Student)
        .join(Student.user)
        .filter(
            User.role == UserRole.STUDENT,
            User.is_email_verified == True,  # noqa: E712
            Student.is_verified == False,  # noqa: E712
        )
        .all()
    )
    for student in unverified_students:
        student.is_verified = True
        synced += 1
        logger.info(f"Synced student verification for student {student.id}")

    db.commit()
    logger.info(f"Verification sync complete, updated {synced} records")
    return synced
