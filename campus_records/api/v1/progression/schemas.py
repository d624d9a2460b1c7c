from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from campus_records.core.enums import ProgressionDirection, SkipReason, TransitionKind


class ProgressionRequest(BaseModel):
    """
    Batch request. Accepts camelCase (studentIds, resetAttendance) or snake_case keys.
    Routers pass the raw body through service.parse_batch_request so malformed input is a 400.
    """

    student_ids: Optional[Any] = Field(None, alias="studentIds", description="Student UUIDs to process")
    reset_attendance: bool = Field(
        False,
        alias="resetAttendance",
        description="Rollback only: keep semester, move academic year forward by one",
    )

    class Config:
        populate_by_name = True


class SemesterState(BaseModel):
    semester: str
    academic_year: str


class AppliedTransition(BaseModel):
    student_id: UUID
    kind: TransitionKind
    previous: SemesterState
    current: SemesterState


class SkippedStudent(BaseModel):
    student_id: UUID
    reason: SkipReason
    detail: str


class BatchOutcome(BaseModel):
    """Engine result for one batch. Every requested id is in exactly one of applied / skipped."""

    direction: ProgressionDirection
    requested: int
    applied: List[AppliedTransition] = Field(default_factory=list)
    skipped: List[SkippedStudent] = Field(default_factory=list)
    preview: bool = False


class ProgressionSummary(BaseModel):
    requested: int
    applied: int
    skipped: int


class ProgressionResponse(BaseModel):
    success: bool
    message: str
    preview: bool = False
    summary: ProgressionSummary
    applied: List[AppliedTransition] = Field(default_factory=list)
    skipped: List[SkippedStudent] = Field(default_factory=list)
