from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from .base import CamelModel


def _strip(value):
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
    return value


# Batch schemas. BatchId/BatchName keep the capitalised keys the mobile client reads.
class BatchSummary(CamelModel):
    id: int = Field(..., alias="BatchId")
    batch_name: str = Field(..., alias="BatchName")
    course: str
    current_semester: int


class BatchCreate(CamelModel):
    batch_name: str = Field(..., alias="BatchName", min_length=1, max_length=100)
    course: str = Field(..., min_length=1, max_length=100)
    current_semester: int = Field(1, ge=1, le=8)

    @field_validator("batch_name", "course")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip(value)


class BatchUpdate(CamelModel):
    batch_name: Optional[str] = Field(None, alias="BatchName", min_length=1, max_length=100)
    course: Optional[str] = Field(None, min_length=1, max_length=100)
    current_semester: Optional[int] = Field(None, ge=1, le=8)
    is_active: Optional[bool] = None

    @field_validator("batch_name", "course")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _strip(value)


class BatchResponse(BatchSummary):
    is_active: bool
    created_at: Optional[datetime] = None
    student_count: int = 0


# Subject schemas
class SubjectBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    code: str = Field(..., min_length=1, max_length=30)
    department: str = Field(..., min_length=1, max_length=100)
    semester: int = Field(..., ge=1, le=8)
    credits: int = Field(3, ge=0, le=20)


class SubjectCreate(SubjectBase):
    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return _strip(value).upper()


class SubjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    code: Optional[str] = Field(None, min_length=1, max_length=30)
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    semester: Optional[int] = Field(None, ge=1, le=8)
    credits: Optional[int] = Field(None, ge=0, le=20)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: Optional[str]) -> Optional[str]:
        return _strip(value).upper() if value is not None else value


class SubjectResponse(SubjectBase):
    id: int
    created_at: Optional[datetime] = None


class SubjectSummary(CamelModel):
    id: int
    name: str
    code: str


# Teaching assignment schemas
class TeachingAssignmentCreate(CamelModel):
    faculty_id: int
    batch_id: int
    subject_id: int


class TeachingAssignmentResponse(CamelModel):
    id: int
    faculty_id: int
    batch_id: int
    subject_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    subject: Optional[SubjectSummary] = None
    batch: Optional[BatchSummary] = None
