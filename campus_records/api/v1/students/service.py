import logging
from typing import List, Optional, Sequence
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_records.core.config import settings
from campus_records.core.exceptions import ConflictError, ServiceError
from campus_records.core.models import Student
from campus_records.api.v1.courses import service as course_service

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _to_response(s: Student) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        roll_number=s.roll_number,
        full_name=s.full_name,
        course_id=s.course_id,
        semester=s.semester,
        academic_year=s.academic_year,
        email=s.email,
        phone_number=s.phone_number,
        section=s.section,
        specializations=s.specializations,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def _get_by_roll_number(db: AsyncSession, roll_number: str) -> Optional[Student]:
    result = await db.execute(select(Student).where(Student.roll_number == roll_number))
    return result.scalar_one_or_none()


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    if payload.course_id:
        course = await course_service.lookup_course(db, payload.course_id.strip().upper())
    else:
        course = await course_service.get_course_by_name(db, payload.course_name)
    if not course:
        raise ServiceError("Course not found", status.HTTP_404_NOT_FOUND)
    if await _get_by_roll_number(db, payload.roll_number):
        raise ConflictError("Student with this roll number already exists")
    student = Student(
        roll_number=payload.roll_number,
        full_name=payload.full_name.strip(),
        course_id=course.id,
        semester=payload.semester,
        academic_year=payload.academic_year or settings.default_academic_year,
        email=payload.email,
        phone_number=payload.phone_number,
        section=payload.section,
        specializations=payload.specializations,
    )
    db.add(student)
    try:
        await db.commit()
        await db.refresh(student)
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Student with this roll number already exists")
    logger.info(f"Student created: {student.full_name} ({student.roll_number})")
    return _to_response(student)


async def list_students(db: AsyncSession, course_id: Optional[str] = None) -> List[StudentResponse]:
    stmt = select(Student)
    if course_id:
        stmt = stmt.where(Student.course_id == course_id)
    result = await db.execute(stmt.order_by(Student.roll_number))
    return [_to_response(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    result = await db.execute(select(Student).where(Student.id == student_id))
    student = result.scalar_one_or_none()
    return _to_response(student) if student else None


async def update_student(db: AsyncSession, student_id: UUID, payload: StudentUpdate) -> StudentResponse:
    result = await db.execute(select(Student).where(Student.id == student_id))
    student = result.scalar_one_or_none()
    if not student:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("roll_number") and changes["roll_number"] != student.roll_number:
        if await _get_by_roll_number(db, changes["roll_number"]):
            raise ConflictError("Student with this roll number already exists")
    if changes.get("course_id"):
        course = await course_service.lookup_course(db, changes["course_id"].strip().upper())
        if not course:
            raise ServiceError("Course not found", status.HTTP_404_NOT_FOUND)
        changes["course_id"] = course.id
    for field in ("roll_number", "full_name", "course_id", "semester", "academic_year"):
        # Required columns: an explicit null is ignored rather than cleared.
        if field in changes and not changes[field]:
            changes.pop(field)
    for field, value in changes.items():
        setattr(student, field, value)
    await db.commit()
    await db.refresh(student)
    return _to_response(student)


async def delete_student(db: AsyncSession, student_id: UUID) -> None:
    result = await db.execute(delete(Student).where(Student.id == student_id))
    if result.rowcount == 0:
        await db.rollback()
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    await db.commit()


async def lookup_students(db: AsyncSession, student_ids: Sequence[UUID]) -> List[Student]:
    """
    Read students for a progression batch inside the caller's transaction.
    Rows are locked FOR UPDATE where the backend supports it. Unknown ids are simply absent.
    """
    if not student_ids:
        return []
    result = await db.execute(
        select(Student)
        .where(Student.id.in_(list(student_ids)))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def update_student_state(
    db: AsyncSession,
    student_id: UUID,
    semester: Optional[str] = None,
    academic_year: Optional[str] = None,
) -> None:
    """Stage a semester/academic_year write in the caller's transaction. Does not commit."""
    values = {}
    if semester is not None:
        values["semester"] = semester
    if academic_year is not None:
        values["academic_year"] = academic_year
    if not values:
        return
    result = await db.execute(
        update(Student)
        .where(Student.id == student_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ServiceError(f"Student {student_id} could not be updated")
