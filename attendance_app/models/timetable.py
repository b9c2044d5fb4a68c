from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .attendance import SessionType


class TimetableVersion(Base):
    """A weekly timetable valid for a date window; older versions are kept for history"""
    __tablename__ = "timetable_versions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    academic_year = Column(String(20), nullable=False)  # e.g. "2024-25"
    semester = Column(Integer, nullable=False, index=True)
    valid_from = Column(Date, nullable=False)
    valid_to = Column(Date, nullable=True)  # open ended when null
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    slots = relationship("TimetableSlot", back_populates="timetable_version")


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"

    id = Column(Integer, primary_key=True, index=True)
    timetable_version_id = Column(Integer, ForeignKey("timetable_versions.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 1=Monday .. 7=Sunday
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=False, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    room_number = Column(String(30))
    session_type = Column(Enum(SessionType, native_enum=False, length=20), default=SessionType.LECTURE, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    timetable_version = relationship("TimetableVersion", back_populates="slots")
    subject = relationship("Subject")
    batch = relationship("Batch")
    faculty = relationship("User")
