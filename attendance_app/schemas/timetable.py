from pydantic import Field, model_validator
from typing import List, Optional
from datetime import date, datetime

from ..models.attendance import SessionType
from .base import CamelModel, TIME_PATTERN
from .academic import BatchSummary, SubjectSummary
from .attendance import UserBrief


# Version schemas
class VersionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    academic_year: str = Field(..., min_length=1, max_length=20)
    semester: int = Field(..., ge=1, le=8)
    valid_from: date
    valid_to: Optional[date] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_to is not None and self.valid_to < self.valid_from:
            raise ValueError("validTo must not be before validFrom")
        return self


class VersionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    academic_year: Optional[str] = Field(None, min_length=1, max_length=20)
    semester: Optional[int] = Field(None, ge=1, le=8)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    is_active: Optional[bool] = None


class VersionResponse(CamelModel):
    id: int
    name: str
    academic_year: str
    semester: int
    valid_from: date
    valid_to: Optional[date] = None
    is_active: bool
    created_by: int
    created_at: Optional[datetime] = None


# Slot schemas
class SlotCreate(CamelModel):
    day_of_week: int = Field(..., ge=1, le=7)
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    subject_id: int
    batch_id: int
    faculty_id: int
    room_number: Optional[str] = Field(None, max_length=30)
    session_type: SessionType = SessionType.LECTURE

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class SlotBatchCreate(CamelModel):
    slots: List[SlotCreate] = Field(..., min_length=1)


class SlotUpdate(CamelModel):
    day_of_week: Optional[int] = Field(None, ge=1, le=7)
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    subject_id: Optional[int] = None
    batch_id: Optional[int] = None
    faculty_id: Optional[int] = None
    room_number: Optional[str] = Field(None, max_length=30)
    session_type: Optional[SessionType] = None


class SlotResponse(CamelModel):
    id: int
    timetable_version_id: int
    day_of_week: int
    start_time: str
    end_time: str
    subject_id: int
    batch_id: int
    faculty_id: int
    room_number: Optional[str] = None
    session_type: SessionType
    is_active: bool
    subject: Optional[SubjectSummary] = None
    batch: Optional[BatchSummary] = None
    faculty: Optional[UserBrief] = None
