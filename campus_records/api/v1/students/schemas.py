import re
from datetime import datetime
from typing import Any, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

# Two letters, "-2K", two-digit intake year, "-", serial. e.g. IT-2K21-36
ROLL_NUMBER_PATTERN = re.compile(r"^[A-Z]{2}-2K\d{2}-\d+$")


def normalize_roll_number(value: str) -> str:
    cleaned = value.strip().upper()
    if not ROLL_NUMBER_PATTERN.match(cleaned):
        raise ValueError("Invalid roll number format. Use XX-2KYY-NNN (e.g., IT-2K21-36)")
    return cleaned


def _empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _clean_specializations(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, list):
        filtered = [s for s in value if s not in ("", None)]
        return filtered or None
    return value


class StudentCreate(BaseModel):
    """Create a student. Course is resolved from course_name (or course_id when given)."""

    roll_number: str = Field(..., description="e.g. IT-2K21-36")
    full_name: str = Field(..., min_length=1, max_length=255)
    course_name: Optional[str] = Field(None, description="Course name as listed in the catalog")
    course_id: Optional[str] = Field(None, description="Course code; alternative to course_name")
    semester: Union[int, str] = Field(..., description="Current semester, e.g. 1")
    academic_year: Optional[str] = Field(None, description='e.g. "2025-26"; defaults to DEFAULT_ACADEMIC_YEAR')
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    section: Optional[str] = Field(None, max_length=20)
    specializations: Optional[List[str]] = None

    @field_validator("roll_number")
    @classmethod
    def check_roll_number(cls, v: str) -> str:
        return normalize_roll_number(v)

    @field_validator("semester")
    @classmethod
    def semester_as_text(cls, v: Union[int, str]) -> str:
        text = str(v).strip()
        if not text:
            raise ValueError("semester is required")
        return text

    @field_validator("course_name", "course_id", "academic_year", "email", "phone_number", "section", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _empty_to_none(v)

    @field_validator("specializations", mode="before")
    @classmethod
    def drop_empty_specializations(cls, v: Any) -> Any:
        return _clean_specializations(v)

    @model_validator(mode="after")
    def require_course(self) -> "StudentCreate":
        if not self.course_name and not self.course_id:
            raise ValueError("course_name or course_id is required")
        return self


class StudentUpdate(BaseModel):
    """Partial update. Fields not sent are left untouched; empty strings clear optional fields."""

    roll_number: Optional[str] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    course_id: Optional[str] = None
    semester: Optional[Union[int, str]] = None
    academic_year: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    section: Optional[str] = Field(None, max_length=20)
    specializations: Optional[List[str]] = None

    @field_validator("roll_number")
    @classmethod
    def check_roll_number(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return normalize_roll_number(v)

    @field_validator("semester")
    @classmethod
    def semester_as_text(cls, v: Optional[Union[int, str]]) -> Optional[str]:
        if v is None:
            return None
        return str(v).strip()

    @field_validator("email", "phone_number", "section", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _empty_to_none(v)

    @field_validator("specializations", mode="before")
    @classmethod
    def drop_empty_specializations(cls, v: Any) -> Any:
        return _clean_specializations(v)


class StudentResponse(BaseModel):
    id: UUID
    roll_number: str
    full_name: str
    course_id: str
    semester: str
    academic_year: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    section: Optional[str] = None
    specializations: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
