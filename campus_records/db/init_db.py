"""
Create the tables and optionally seed a few catalog courses.

Usage:
  python -m campus_records.db.init_db
  python -m campus_records.db.init_db --seed-courses
"""

import argparse
import asyncio
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

# Import models so Base.metadata knows every table
from campus_records.core.models import Course, Student  # noqa: F401
from campus_records.db.session import AsyncSessionLocal, Base, engine

# (code, name, total_semesters)
DEMO_COURSES: List[Tuple[str, str, int]] = [
    ("MCA-5Y", "M.Tech (IT) 5 Years", 10),
    ("MBA-MS-5Y", "MBA (MS) 5 Years", 10),
    ("MCA-2Y", "MCA 2 Years", 4),
    ("BCOM-HONS", "B.Com (Hons.)", 6),
]


async def create_tables(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_courses(db: AsyncSession) -> int:
    """Insert DEMO_COURSES that are not present yet. Returns number created."""
    created = 0
    for code, name, total_semesters in DEMO_COURSES:
        result = await db.execute(select(Course).where(Course.id == code))
        if result.scalar_one_or_none():
            continue
        db.add(Course(id=code, name=name, total_semesters=total_semesters))
        created += 1
    await db.commit()
    return created


async def main(seed: bool) -> None:
    await create_tables()
    print("Tables created")
    if not seed:
        return
    async with AsyncSessionLocal() as db:
        try:
            created = await seed_courses(db)
        except Exception as e:
            print(f"Error seeding courses: {e}")
            await db.rollback()
            raise
    print(f"Courses created: {created}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and seed demo courses")
    parser.add_argument("--seed-courses", action="store_true", help="Insert demo catalog courses")
    args = parser.parse_args()
    asyncio.run(main(args.seed_courses))
