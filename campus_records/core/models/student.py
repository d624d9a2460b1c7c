import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from campus_records.db.session import Base


class Student(Base):
    """
    Student roster entry.
    semester is stored as text (e.g. "4"); academic_year is a "YYYY-YY" label (e.g. "2025-26").
    Only the progression engine changes semester/academic_year in bulk.
    course_id is a plain reference: a missing course is reported per student, not enforced by FK.
    """

    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    roll_number = Column(String(50), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    course_id = Column(String(50), nullable=False, index=True)
    semester = Column(String(10), nullable=False)
    academic_year = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(20), nullable=True)
    section = Column(String(20), nullable=True)
    specializations = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
