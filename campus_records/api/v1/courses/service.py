from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_records.core.exceptions import ConflictError
from campus_records.core.models import Course

from .schemas import CourseCreate, CourseResponse


def _to_response(c: Course) -> CourseResponse:
    return CourseResponse(
        id=c.id,
        name=c.name,
        total_semesters=c.total_semesters,
        created_at=c.created_at,
    )


async def create_course(db: AsyncSession, payload: CourseCreate) -> CourseResponse:
    code = payload.id.strip().upper()
    name = payload.name.strip()
    existing = await db.execute(select(Course).where((Course.id == code) | (Course.name == name)))
    if existing.scalars().first():
        raise ConflictError(f"Course '{code}' or '{name}' already exists")
    course = Course(id=code, name=name, total_semesters=payload.total_semesters)
    db.add(course)
    try:
        await db.commit()
        await db.refresh(course)
        return _to_response(course)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Course '{code}' already exists")


async def list_courses(db: AsyncSession) -> List[CourseResponse]:
    result = await db.execute(select(Course).order_by(Course.name))
    return [_to_response(c) for c in result.scalars().all()]


async def get_course(db: AsyncSession, course_id: str) -> Optional[CourseResponse]:
    course = await lookup_course(db, course_id)
    return _to_response(course) if course else None


async def lookup_course(db: AsyncSession, course_id: str) -> Optional[Course]:
    """Catalog lookup used by the progression engine. Runs inside the caller's transaction."""
    result = await db.execute(select(Course).where(Course.id == course_id))
    return result.scalar_one_or_none()


async def get_course_by_name(db: AsyncSession, name: str) -> Optional[Course]:
    result = await db.execute(select(Course).where(Course.name == name.strip()))
    return result.scalar_one_or_none()
