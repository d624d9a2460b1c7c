from typing import Iterable, List, Optional
from uuid import UUID

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConflictError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class InvalidBatchError(ServiceError):
    """Batch request rejected before any transaction is opened."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class StudentsNotFoundError(ServiceError):
    """One or more requested student ids do not resolve to a student."""

    def __init__(self, missing_ids: Iterable[UUID], requested: int) -> None:
        self.missing_ids: List[UUID] = list(missing_ids)
        if len(self.missing_ids) == requested:
            message = "No valid students found"
        else:
            message = "Students not found: " + ", ".join(str(i) for i in self.missing_ids)
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ProgressionTransactionError(ServiceError):
    """Whole-batch failure; nothing staged in the batch was committed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.cause = cause

    @property
    def cause_message(self) -> Optional[str]:
        if self.cause is None:
            return None
        return str(self.cause) or self.cause.__class__.__name__
