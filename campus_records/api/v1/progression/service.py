"""
Batch semester progression.

advance() / rollback() run one batch as a single unit of work on the session they are
given: every read, every staged write and the final commit (or rollback) happen on that
session. Nothing is committed unless the whole batch got through; per-student skips are
part of the outcome, not errors.

Assumes the database runs at READ COMMITTED or stronger. Student rows are read with
SELECT ... FOR UPDATE, so overlapping batches on PostgreSQL queue behind each other.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_records.core.config import settings
from campus_records.core.enums import ProgressionDirection
from campus_records.core.exceptions import (
    InvalidBatchError,
    ProgressionTransactionError,
    ServiceError,
    StudentsNotFoundError,
)
from campus_records.core.models import Student
from campus_records.api.v1.courses import service as course_service
from campus_records.api.v1.students import service as student_service

from .rules import Decision, StudentAcademicState, classify_advance, classify_rollback
from .schemas import AppliedTransition, BatchOutcome, ProgressionRequest, ProgressionResponse, ProgressionSummary

logger = logging.getLogger(__name__)


def parse_batch_request(body: Any) -> ProgressionRequest:
    """Turn a raw request body into a ProgressionRequest; any malformed body is an input error (400)."""
    if not isinstance(body, dict):
        raise InvalidBatchError("Request body must be an object with a studentIds array")
    try:
        return ProgressionRequest.model_validate(body)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidBatchError(f"Invalid batch request: {fields}")


def normalize_student_ids(raw: Any) -> List[UUID]:
    """Validate the requested ids before any storage is touched. Duplicates collapse, first one wins."""
    if not isinstance(raw, (list, tuple)) or len(raw) == 0:
        raise InvalidBatchError("studentIds must be a non-empty array")
    if len(raw) > settings.max_batch_size:
        raise InvalidBatchError(f"At most {settings.max_batch_size} students can be processed per request")
    ids: List[UUID] = []
    seen = set()
    for value in raw:
        try:
            student_id = value if isinstance(value, UUID) else UUID(str(value))
        except (TypeError, ValueError):
            raise InvalidBatchError(f"Invalid student id: {value!r}")
        if student_id not in seen:
            seen.add(student_id)
            ids.append(student_id)
    return ids


def _snapshot(student: Student) -> StudentAcademicState:
    return StudentAcademicState(
        id=student.id,
        course_id=student.course_id,
        semester=student.semester,
        academic_year=student.academic_year,
    )


async def _course_ceilings(db: AsyncSession, states: Sequence[StudentAcademicState]) -> Dict[str, Optional[int]]:
    """total_semesters per course referenced in the batch; None for courses missing from the catalog."""
    ceilings: Dict[str, Optional[int]] = {}
    for state in states:
        if state.course_id in ceilings:
            continue
        course = await course_service.lookup_course(db, state.course_id)
        ceilings[state.course_id] = course.total_semesters if course else None
    return ceilings


async def _load_states(db: AsyncSession, student_ids: List[UUID]) -> List[StudentAcademicState]:
    students = await student_service.lookup_students(db, student_ids)
    found = {s.id: s for s in students}
    missing = [sid for sid in student_ids if sid not in found]
    if missing:
        raise StudentsNotFoundError(missing, requested=len(student_ids))
    # Snapshot in request order before anything is staged.
    return [_snapshot(found[sid]) for sid in student_ids]


async def _stage(db: AsyncSession, transition: AppliedTransition) -> None:
    try:
        await student_service.update_student_state(
            db,
            transition.student_id,
            semester=transition.current.semester,
            academic_year=transition.current.academic_year,
        )
    except ServiceError as e:
        raise ProgressionTransactionError(e.message, e) from e


async def _run_batch(
    db: AsyncSession,
    direction: ProgressionDirection,
    student_ids: List[UUID],
    decide: Callable[[AsyncSession, List[StudentAcademicState]], Any],
    preview: bool,
) -> BatchOutcome:
    outcome = BatchOutcome(direction=direction, requested=len(student_ids), preview=preview)
    try:
        states = await _load_states(db, student_ids)
        decisions: List[Decision] = await decide(db, states)
        for decision in decisions:
            if isinstance(decision, AppliedTransition):
                outcome.applied.append(decision)
            else:
                logger.debug(f"Skipping student {decision.student_id}: {decision.reason.value}")
                outcome.skipped.append(decision)
        for transition in outcome.applied:
            await _stage(db, transition)
        if preview:
            await db.rollback()
        else:
            await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{direction.value} batch aborted: {e}")
        raise ProgressionTransactionError(f"{direction.value.title()} failed", e) from e
    except asyncio.CancelledError:
        await db.rollback()
        raise
    return outcome


async def _with_timeout(coro, direction: ProgressionDirection) -> BatchOutcome:
    try:
        return await asyncio.wait_for(coro, timeout=settings.progression_timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.error(f"{direction.value} batch timed out after {settings.progression_timeout_seconds}s")
        raise ProgressionTransactionError(f"{direction.value.title()} timed out", e) from e


async def advance(db: AsyncSession, student_ids: Any, preview: bool = False) -> BatchOutcome:
    """Move each student to the next semester of their course."""
    ids = normalize_student_ids(student_ids)

    async def decide(session: AsyncSession, states: List[StudentAcademicState]) -> List[Decision]:
        ceilings = await _course_ceilings(session, states)
        return [classify_advance(state, ceilings[state.course_id]) for state in states]

    logger.info(f"Advancing {len(ids)} students (preview={preview})")
    outcome = await _with_timeout(
        _run_batch(db, ProgressionDirection.ADVANCE, ids, decide, preview),
        ProgressionDirection.ADVANCE,
    )
    logger.info(f"Advance done: {len(outcome.applied)} applied, {len(outcome.skipped)} skipped")
    return outcome


async def rollback(
    db: AsyncSession,
    student_ids: Any,
    reset_attendance: bool = False,
    preview: bool = False,
) -> BatchOutcome:
    """
    Move each student back one semester, or with reset_attendance=True keep the semester
    and move the academic year label forward by one.
    """
    ids = normalize_student_ids(student_ids)

    async def decide(session: AsyncSession, states: List[StudentAcademicState]) -> List[Decision]:
        return [classify_rollback(state, reset_attendance) for state in states]

    logger.info(f"Rolling back {len(ids)} students (reset_attendance={reset_attendance}, preview={preview})")
    outcome = await _with_timeout(
        _run_batch(db, ProgressionDirection.ROLLBACK, ids, decide, preview),
        ProgressionDirection.ROLLBACK,
    )
    logger.info(f"Rollback done: {len(outcome.applied)} applied, {len(outcome.skipped)} skipped")
    return outcome


_MESSAGES = {
    (ProgressionDirection.ADVANCE, False): "Students promoted successfully",
    (ProgressionDirection.ADVANCE, True): "Promotion preview; no changes saved",
    (ProgressionDirection.ROLLBACK, False): "Rollback completed successfully",
    (ProgressionDirection.ROLLBACK, True): "Rollback preview; no changes saved",
}


def to_response(outcome: BatchOutcome) -> ProgressionResponse:
    return ProgressionResponse(
        success=True,
        message=_MESSAGES[(outcome.direction, outcome.preview)],
        preview=outcome.preview,
        summary=ProgressionSummary(
            requested=outcome.requested,
            applied=len(outcome.applied),
            skipped=len(outcome.skipped),
        ),
        applied=outcome.applied,
        skipped=outcome.skipped,
    )


async def promote_students(db: AsyncSession, student_ids: Any, preview: bool = False) -> ProgressionResponse:
    return to_response(await advance(db, student_ids, preview=preview))


async def rollback_students(
    db: AsyncSession,
    student_ids: Any,
    reset_attendance: bool = False,
    preview: bool = False,
) -> ProgressionResponse:
    return to_response(await rollback(db, student_ids, reset_attendance=reset_attendance, preview=preview))
