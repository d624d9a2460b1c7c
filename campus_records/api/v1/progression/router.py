from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_records.core.exceptions import ProgressionTransactionError, ServiceError, StudentsNotFoundError
from campus_records.db.session import get_db

from .schemas import ProgressionResponse
from . import service

router = APIRouter(prefix="/api/v1/students/progression", tags=["progression"])


def _http_error(e: ServiceError) -> HTTPException:
    if isinstance(e, ProgressionTransactionError):
        detail = {"success": False, "message": e.message, "error": e.cause_message}
    elif isinstance(e, StudentsNotFoundError):
        detail = {"message": e.message, "missing_ids": [str(i) for i in e.missing_ids]}
    else:
        detail = e.message
    return HTTPException(status_code=e.status_code, detail=detail)


@router.post("/promote", response_model=ProgressionResponse)
async def promote_students(
    payload: Any = Body(None, description="{studentIds: [uuid, ...], resetAttendance?: bool}"),
    preview: bool = Query(False, description="Compute the outcome without saving it"),
    db: AsyncSession = Depends(get_db),
) -> ProgressionResponse:
    """Move students to their next semester. Students that cannot move are listed in `skipped`."""
    try:
        request = service.parse_batch_request(payload)
        return await service.promote_students(db, request.student_ids, preview=preview)
    except ServiceError as e:
        raise _http_error(e)


@router.post("/rollback", response_model=ProgressionResponse)
async def rollback_students(
    payload: Any = Body(None, description="{studentIds: [uuid, ...], resetAttendance?: bool}"),
    preview: bool = Query(False, description="Compute the outcome without saving it"),
    db: AsyncSession = Depends(get_db),
) -> ProgressionResponse:
    """
    Move students back one semester. With resetAttendance=true the semester is kept and the
    academic year moves forward one year instead.
    """
    try:
        request = service.parse_batch_request(payload)
        return await service.rollback_students(
            db,
            request.student_ids,
            reset_attendance=request.reset_attendance,
            preview=preview,
        )
    except ServiceError as e:
        raise _http_error(e)
