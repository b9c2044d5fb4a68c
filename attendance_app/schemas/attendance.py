from pydantic import Field, model_validator
from typing import List, Optional
from datetime import date, datetime

from ..models.attendance import AttendanceStatus, SessionType
from .base import CamelModel, TIME_PATTERN
from .academic import BatchSummary, SubjectSummary


class StudentMark(CamelModel):
    student_id: int
    status: AttendanceStatus = AttendanceStatus.ABSENT
    remarks: Optional[str] = None


class SessionCreate(CamelModel):
    subject_id: int
    batch_id: int
    date: date
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    topic: Optional[str] = Field(None, max_length=255)
    session_type: SessionType = SessionType.LECTURE
    attendance: List[StudentMark] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class RecordUpdate(CamelModel):
    status: AttendanceStatus
    remarks: Optional[str] = None


class UserBrief(CamelModel):
    id: int
    name: str
    email: str


class RecordResponse(CamelModel):
    id: int
    session_id: int
    student_id: int
    status: AttendanceStatus
    marked_by: int
    remarks: Optional[str] = None
    marked_at: Optional[datetime] = None
    student: Optional[UserBrief] = None


class SessionResponse(CamelModel):
    id: int
    subject_id: int
    batch_id: int
    faculty_id: int
    date: date
    start_time: str
    end_time: str
    topic: Optional[str] = None
    session_type: SessionType
    created_at: Optional[datetime] = None
    subject: Optional[SubjectSummary] = None
    batch: Optional[BatchSummary] = None


class SessionDetail(SessionResponse):
    records: List[RecordResponse] = []
