import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_admin
from app.schemas import (
    MessageResponse,
    Pagination,
    StudentCreate,
    StudentListResponse,
    StudentMessageResponse,
    StudentResponse,
    StudentUpdate,
)
from app.services import students as student_service

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=StudentListResponse)
def list_students(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
):
    """List students, newest first, with combined verification status."""
    students, total = student_service.list_students(db, page=page, limit=limit)
    total_pages = (total + limit - 1) // limit if total > 0 else 0
    return StudentListResponse(
        students=[StudentResponse.model_validate(s) for s in students],
        pagination=Pagination(current=page, pages=total_pages, total=total, limit=limit),
    )


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(student_id: int, db: Session = Depends(get_db)):
    return student_service.get_student(db, student_id)


@router.post("", response_model=StudentMessageResponse, status_code=status.HTTP_201_CREATED)
def create_student(student_data: StudentCreate, db: Session = Depends(get_db)):
    """Create a student together with its user account."""
    student = student_service.create_student(
        db,
        name=student_data.name,
        email=student_data.email,
        course=student_data.course,
        password=student_data.password,
    )
    return StudentMessageResponse(
        message="Student created successfully",
        student=StudentResponse.model_validate(student),
    )


@router.put("/{student_id}", response_model=StudentMessageResponse)
def update_student(student_id: int, student_data: StudentUpdate, db: Session = Depends(get_db)):
    student = student_service.update_student(
        db,
        student_id,
        name=student_data.name,
        email=student_data.email,
        course=student_data.course,
    )
    return StudentMessageResponse(
        message="Student updated successfully",
        student=StudentResponse.model_validate(student),
    )


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(student_id: int, db: Session = Depends(get_db)):
    """Delete a student and its user account."""
    student_service.delete_student(db, student_id)
    return MessageResponse(message="Student deleted successfully")
