"""Course catalog entry. total_semesters is the ceiling for a student's semester."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from campus_records.db.session import Base


class Course(Base):
    __tablename__ = "courses"

    # Institution course code, e.g. "MCA-5Y"; students reference it by value.
    id = Column(String(50), primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    total_semesters = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
