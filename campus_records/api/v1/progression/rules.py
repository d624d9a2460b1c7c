"""
Semester / academic-year transition rules.

Everything here is pure: a decision depends only on one student's current state and,
for advances, the semester count of the student's course. The service feeds in a
snapshot taken before any write is staged, so batch order never matters.

Year labels look like "2025-26": start year, dash, last two digits of start year + 1.
Both directions key the year change off the parity of the semester the student is in
*before* the transition:
  advance   even -> odd  moves the label forward one year
  rollback  from even    moves the label back one year
"""

import re
from typing import NamedTuple, Optional, Union
from uuid import UUID

from campus_records.core.enums import SkipReason, TransitionKind

from .schemas import AppliedTransition, SemesterState, SkippedStudent

ACADEMIC_YEAR_PATTERN = re.compile(r"^(\d{4,})-(\d{2})$")
SEMESTER_PATTERN = re.compile(r"^\d+$")

Decision = Union[AppliedTransition, SkippedStudent]


class InvalidAcademicYear(ValueError):
    pass


class StudentAcademicState(NamedTuple):
    id: UUID
    course_id: str
    semester: str
    academic_year: str


def parse_academic_year(label: Optional[str]) -> int:
    """Return the start year of a "YYYY-YY" label."""
    match = ACADEMIC_YEAR_PATTERN.match((label or "").strip())
    if not match:
        raise InvalidAcademicYear(f"Invalid academic year label: {label!r}")
    return int(match.group(1))


def format_academic_year(start_year: int) -> str:
    # Labels must round-trip through parse_academic_year.
    if start_year < 1:
        raise InvalidAcademicYear(f"Academic year start {start_year} is out of range")
    return f"{start_year:04d}-{(start_year + 1) % 100:02d}"


def next_academic_year(label: str) -> str:
    return format_academic_year(parse_academic_year(label) + 1)


def previous_academic_year(label: str) -> str:
    return format_academic_year(parse_academic_year(label) - 1)


def parse_semester(value: Optional[str]) -> Optional[int]:
    """Positive integer semester, or None when the stored text is not one."""
    text = (value or "").strip()
    if not SEMESTER_PATTERN.match(text):
        return None
    semester = int(text)
    return semester if semester > 0 else None


def _skip(state: StudentAcademicState, reason: SkipReason) -> SkippedStudent:
    return SkippedStudent(student_id=state.id, reason=reason, detail=reason.detail)


def _applied(
    state: StudentAcademicState,
    kind: TransitionKind,
    semester: str,
    academic_year: str,
) -> AppliedTransition:
    return AppliedTransition(
        student_id=state.id,
        kind=kind,
        previous=SemesterState(semester=state.semester, academic_year=state.academic_year),
        current=SemesterState(semester=semester, academic_year=academic_year),
    )


def classify_advance(state: StudentAcademicState, total_semesters: Optional[int]) -> Decision:
    """Next-semester decision. total_semesters is None when the course is not in the catalog."""
    if total_semesters is None:
        return _skip(state, SkipReason.COURSE_NOT_FOUND)
    semester = parse_semester(state.semester)
    if semester is None:
        return _skip(state, SkipReason.INVALID_SEMESTER)
    if semester >= total_semesters:
        return _skip(state, SkipReason.FINAL_SEMESTER)

    academic_year = state.academic_year
    if semester % 2 == 0:
        try:
            academic_year = next_academic_year(state.academic_year)
        except InvalidAcademicYear:
            return _skip(state, SkipReason.INVALID_ACADEMIC_YEAR)
    return _applied(state, TransitionKind.ADVANCE, str(semester + 1), academic_year)


def classify_rollback(state: StudentAcademicState, reset_attendance: bool = False) -> Decision:
    semester = parse_semester(state.semester)
    if semester is None:
        return _skip(state, SkipReason.INVALID_SEMESTER)

    if reset_attendance:
        # Restart the year for the cohort: semester untouched, label always one year on.
        try:
            academic_year = next_academic_year(state.academic_year)
        except InvalidAcademicYear:
            return _skip(state, SkipReason.INVALID_ACADEMIC_YEAR)
        return _applied(state, TransitionKind.RESET_YEAR_ONLY, state.semester, academic_year)

    if semester <= 1:
        return _skip(state, SkipReason.ALREADY_FIRST_SEMESTER)
    academic_year = state.academic_year
    if semester % 2 == 0:
        try:
            academic_year = previous_academic_year(state.academic_year)
        except InvalidAcademicYear:
            return _skip(state, SkipReason.INVALID_ACADEMIC_YEAR)
    return _applied(state, TransitionKind.NORMAL_ROLLBACK, str(semester - 1), academic_year)
