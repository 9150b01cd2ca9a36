from dataclasses import dataclass

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


@dataclass(frozen=True)
class VerificationStatus:
    """Both verification flags plus the combined answer."""
    user_verified: bool
    student_verified: bool

    @property
    def is_verified(self) -> bool:
        return self.user_verified or self.student_verified

    @property
    def is_drifted(self) -> bool:
        return self.user_verified != self.student_verified


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    course = Column(String(255), nullable=False)
    enrollment_date = Column(DateTime, server_default=func.now())
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="student")

    @property
    def verification_status(self) -> VerificationStatus:
        return VerificationStatus(
            user_verified=bool(self.user and self.user.is_email_verified),
            student_verified=bool(self.is_verified),
        )
