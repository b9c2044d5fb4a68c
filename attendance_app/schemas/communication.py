from pydantic import Field, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from ..models.communication import NotificationType
from .base import CamelModel
from .academic import BatchSummary


# Announcement schemas
class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    department: Optional[str] = Field(None, max_length=100)
    batch_id: Optional[int] = None


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = Field(None, max_length=100)
    batch_id: Optional[int] = None
    is_active: Optional[bool] = None


class AnnouncementResponse(CamelModel):
    id: int
    title: str
    content: str
    department: Optional[str] = None
    batch_id: Optional[int] = None
    hod_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    batch: Optional[BatchSummary] = None


class StudentAnnouncement(AnnouncementResponse):
    time_ago: str
    is_new: bool


# Notification schemas
class NotificationResponse(CamelModel):
    id: int
    title: str
    message: str
    type: NotificationType
    user_id: int
    sender_id: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="extra_data", serialization_alias="metadata")
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class NotificationSend(CamelModel):
    """HOD broadcast; exactly how recipients are picked depends on which target is given"""
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.GENERAL
    recipients: Optional[List[int]] = None
    batch_ids: Optional[List[int]] = None
    department: Optional[str] = None

    @model_validator(mode="after")
    def check_target(self):
        if not (self.recipients or self.batch_ids or self.department):
            raise ValueError("one of recipients, batchIds or department is required")
        return self
