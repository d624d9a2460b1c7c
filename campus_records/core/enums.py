from enum import Enum


class ProgressionDirection(str, Enum):
    ADVANCE = "ADVANCE"
    ROLLBACK = "ROLLBACK"


class TransitionKind(str, Enum):
    ADVANCE = "ADVANCE"
    NORMAL_ROLLBACK = "NORMAL_ROLLBACK"
    RESET_YEAR_ONLY = "RESET_YEAR_ONLY"


class SkipReason(str, Enum):
    COURSE_NOT_FOUND = "COURSE_NOT_FOUND"
    INVALID_SEMESTER = "INVALID_SEMESTER"
    INVALID_ACADEMIC_YEAR = "INVALID_ACADEMIC_YEAR"
    FINAL_SEMESTER = "FINAL_SEMESTER"
    ALREADY_FIRST_SEMESTER = "ALREADY_FIRST_SEMESTER"

    @property
    def detail(self) -> str:
        return _SKIP_DETAILS[self]


_SKIP_DETAILS = {
    SkipReason.COURSE_NOT_FOUND: "Course not found",
    SkipReason.INVALID_SEMESTER: "Invalid semester value",
    SkipReason.INVALID_ACADEMIC_YEAR: "Invalid academic year label",
    SkipReason.FINAL_SEMESTER: "Final semester",
    SkipReason.ALREADY_FIRST_SEMESTER: "Already in first semester",
}
