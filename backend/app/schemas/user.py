from datetime import datetime

from pydantic import BaseModel, EmailStr, field_validator

from app.models import UserRole

MAX_PASSWORD_LENGTH = 128


def validate_password_length(v: str) -> str:
    # Minimum length is a business rule enforced by the identity service
    if len(v) > MAX_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_LENGTH} characters long")
    return v


def validate_optional_text(v: str | None, field_label: str) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if len(v) < 2:
        raise ValueError(f"{field_label} must be at least 2 characters long")
    return v


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.STUDENT
    name: str | None = None
    course: str | None = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_length(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return validate_optional_text(v, "Name")

    @field_validator("course")
    @classmethod
    def validate_course(cls, v: str | None) -> str | None:
        return validate_optional_text(v, "Course")


class UserSummary(UserBase):
    id: int
    role: UserRole

    class Config:
        from_attributes = True


class StudentProfile(BaseModel):
    id: int
    name: str
    course: str
    enrollment_date: datetime | None = None
    is_verified: bool
    verification_state: str


class ProfileResponse(UserBase):
    id: int
    role: UserRole
    is_email_verified: bool
    student: StudentProfile | None = None


class ProfileUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    course: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return validate_optional_text(v, "Name")

    @field_validator("course")
    @classmethod
    def validate_course(cls, v: str | None) -> str | None:
        return validate_optional_text(v, "Course")
