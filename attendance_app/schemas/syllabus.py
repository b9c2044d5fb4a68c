from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime

from ..models.syllabus import ProgressStatus
from .base import CamelModel
from .academic import BatchSummary, SubjectSummary, _strip
from .assignment import _naive_utc
from .attendance import UserBrief


class TopicCreate(CamelModel):
    topic_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    estimated_hours: int = Field(1, ge=0)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return _strip(value)


class UnitCreate(CamelModel):
    unit_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    weightage: int = Field(0, ge=0, le=100)
    topics: List[TopicCreate] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return _strip(value)

    @field_validator("topics")
    @classmethod
    def unique_topic_numbers(cls, topics: List[TopicCreate]) -> List[TopicCreate]:
        numbers = [topic.topic_number for topic in topics]
        if len(numbers) != len(set(numbers)):
            raise ValueError("topic numbers must be unique within a unit")
        return topics


class SyllabusCreate(CamelModel):
    units: List[UnitCreate] = Field(..., min_length=1)

    @field_validator("units")
    @classmethod
    def unique_unit_numbers(cls, units: List[UnitCreate]) -> List[UnitCreate]:
        numbers = [unit.unit_number for unit in units]
        if len(numbers) != len(set(numbers)):
            raise ValueError("unit numbers must be unique")
        return units


class UnitUpdate(CamelModel):
    unit_number: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    weightage: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: Optional[str]) -> Optional[str]:
        return _strip(value)


class TopicResponse(CamelModel):
    id: int
    unit_id: int
    topic_number: int
    title: str
    description: Optional[str] = None
    estimated_hours: int


class UnitResponse(CamelModel):
    id: int
    subject_id: int
    unit_number: int
    title: str
    description: Optional[str] = None
    weightage: int
    topics: List[TopicResponse] = []


class TopicProgressUpdate(CamelModel):
    topic_id: int
    status: Optional[ProgressStatus] = None
    taught_at: Optional[datetime] = None
    session_id: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("taught_at")
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value) if value is not None else value


class ProgressUpdate(CamelModel):
    batch_id: int
    subject_id: int
    unit_id: int
    status: Optional[ProgressStatus] = None
    completion_percent: Optional[int] = Field(None, ge=0, le=100)
    notes: Optional[str] = None
    topic_progress: List[TopicProgressUpdate] = []

    @field_validator("topic_progress")
    @classmethod
    def unique_topics(cls, updates: List[TopicProgressUpdate]) -> List[TopicProgressUpdate]:
        topic_ids = [update.topic_id for update in updates]
        if len(topic_ids) != len(set(topic_ids)):
            raise ValueError("each topic may appear only once")
        return updates


class TopicProgressResponse(CamelModel):
    id: int
    faculty_id: int
    batch_id: int
    topic_id: int
    status: ProgressStatus
    taught_at: Optional[datetime] = None
    session_id: Optional[int] = None
    notes: Optional[str] = None


class ProgressResponse(CamelModel):
    id: int
    faculty_id: int
    batch_id: int
    subject_id: int
    unit_id: int
    status: ProgressStatus
    completion_percent: int
    notes: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressDetail(ProgressResponse):
    """Progress row with the names the HOD overview shows"""
    faculty: Optional[UserBrief] = None
    batch: Optional[BatchSummary] = None
    subject: Optional[SubjectSummary] = None
    unit: Optional[UnitResponse] = None
