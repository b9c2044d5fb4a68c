from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime, timezone

from ..models.assignment import AssignmentStatus, SubmissionStatus
from .base import CamelModel
from .academic import BatchSummary, SubjectSummary


def _naive_utc(value: datetime) -> datetime:
    # stored timestamps are naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class AssignmentCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    subject_id: int
    batch_id: int
    total_marks: int = Field(100, ge=1)
    due_date: datetime
    instructions: Optional[str] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    status: AssignmentStatus = AssignmentStatus.PUBLISHED

    @field_validator("due_date")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        return _naive_utc(value)


class AssignmentUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    total_marks: Optional[int] = Field(None, ge=1)
    due_date: Optional[datetime] = None
    instructions: Optional[str] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    status: Optional[AssignmentStatus] = None

    @field_validator("due_date")
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value) if value is not None else value


class AssignmentResponse(CamelModel):
    id: int
    title: str
    description: str
    subject_id: int
    batch_id: int
    faculty_id: int
    total_marks: int
    due_date: datetime
    instructions: Optional[str] = None
    attachment_url: Optional[str] = None
    status: AssignmentStatus
    created_at: Optional[datetime] = None
    subject: Optional[SubjectSummary] = None
    batch: Optional[BatchSummary] = None


class SubmissionCreate(CamelModel):
    content: Optional[str] = None
    attachment_url: Optional[str] = Field(None, max_length=500)


class GradeRequest(CamelModel):
    marks: int = Field(..., ge=0)
    feedback: Optional[str] = None


class SubmissionResponse(CamelModel):
    id: int
    assignment_id: int
    student_id: int
    content: Optional[str] = None
    attachment_url: Optional[str] = None
    submitted_at: datetime
    status: SubmissionStatus
    marks: Optional[int] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None
