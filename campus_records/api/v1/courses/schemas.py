from datetime import datetime

from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50, description="Course code, e.g. MCA-5Y")
    name: str = Field(..., min_length=1, max_length=255)
    total_semesters: int = Field(..., gt=0, description="Number of semesters in the course")


class CourseResponse(BaseModel):
    id: str
    name: str
    total_semesters: int
    created_at: datetime

    class Config:
        from_attributes = True
