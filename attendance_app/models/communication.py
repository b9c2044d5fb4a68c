import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class NotificationType(str, enum.Enum):
    GENERAL = "GENERAL"
    ASSIGNMENT = "ASSIGNMENT"
    ATTENDANCE = "ATTENDANCE"
    CIRCULAR = "CIRCULAR"
    EVENT = "EVENT"
    ANNOUNCEMENT = "ANNOUNCEMENT"


class Announcement(Base):
    """HOD announcement; department/batch narrow who sees it, both unset means everyone"""
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    department = Column(String(100), nullable=True)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=True)
    hod_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    hod = relationship("User")
    batch = relationship("Batch")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Enum(NotificationType, native_enum=False, length=20), default=NotificationType.GENERAL, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    # "metadata" is reserved on declarative classes
    extra_data = Column("metadata", JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    recipient = relationship("User", foreign_keys=[user_id])
    sender = relationship("User", foreign_keys=[sender_id])
