from datetime import datetime

from pydantic import BaseModel, EmailStr, field_validator

from app.schemas.user import validate_optional_text, validate_password_length


class StudentBase(BaseModel):
    name: str
    email: EmailStr
    course: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_optional_text(v, "Name")

    @field_validator("course")
    @classmethod
    def validate_course(cls, v: str) -> str:
        return validate_optional_text(v, "Course")


class StudentCreate(StudentBase):
    password: str | None = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return validate_password_length(v)


class StudentUpdate(BaseModel):
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


class VerificationStatusResponse(BaseModel):
    user_verified: bool
    student_verified: bool
    is_verified: bool

    class Config:
        from_attributes = True


class StudentResponse(BaseModel):
    id: int
    name: str
    email: str
    course: str
    user_id: int
    enrollment_date: datetime | None = None
    is_verified: bool
    verification_status: VerificationStatusResponse
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    current: int
    pages: int
    total: int
    limit: int


class StudentListResponse(BaseModel):
    students: list[StudentResponse]
    pagination: Pagination


class StudentMessageResponse(BaseModel):
    message: str
    student: StudentResponse
