import os
from typing import AsyncGenerator, Callable, List, Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from campus_records.core.models import Course, Student
from campus_records.db.session import Base, get_db
from campus_records.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test; StaticPool keeps every session on the same connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session for the test body; API requests get their own sessions from the same database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with session_factory() as session:
        yield session
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def course(db_session: AsyncSession) -> Course:
    course = Course(id="MCA-5Y", name="M.Tech (IT) 5 Years", total_semesters=8)
    db_session.add(course)
    await db_session.commit()
    db_session.expunge(course)
    return course


@pytest.fixture()
def make_student(db_session: AsyncSession) -> Callable:
    counter = {"n": 0}

    async def _make(
        semester: str = "1",
        academic_year: str = "2025-26",
        course_id: str = "MCA-5Y",
        roll_number: Optional[str] = None,
    ) -> Student:
        counter["n"] += 1
        student = Student(
            roll_number=roll_number or f"IT-2K21-{counter['n']}",
            full_name=f"Student {counter['n']}",
            course_id=course_id,
            semester=semester,
            academic_year=academic_year,
        )
        db_session.add(student)
        await db_session.commit()
        # Detached, so a rollback in db_session cannot expire it under the test.
        db_session.expunge(student)
        return student

    return _make


@pytest.fixture()
def fetch_states(session_factory: async_sessionmaker) -> Callable:
    """Read (semester, academic_year) from a separate session, i.e. what is actually committed."""

    async def _fetch(students: List[Student]) -> List[tuple]:
        async with session_factory() as session:
            states = []
            for s in students:
                row = await session.get(Student, s.id)
                states.append((row.semester, row.academic_year))
            return states

    return _fetch
