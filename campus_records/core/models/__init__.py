from campus_records.core.models.course import Course
from campus_records.core.models.student import Student

__all__ = [
    "Course",
    "Student",
]
