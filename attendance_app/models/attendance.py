import enum

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class SessionType(str, enum.Enum):
    LECTURE = "LECTURE"
    LAB = "LAB"
    TUTORIAL = "TUTORIAL"
    SEMINAR = "SEMINAR"


class AttendanceSession(Base):
    """One class meeting for which attendance was taken"""
    __tablename__ = "attendance_sessions"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=False, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    topic = Column(String(255))
    session_type = Column(Enum(SessionType, native_enum=False, length=20), default=SessionType.LECTURE, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    subject = relationship("Subject")
    batch = relationship("Batch")
    faculty = relationship("User")
    records = relationship(
        "AttendanceRecord",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="AttendanceRecord.id",
    )


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Enum(AttendanceStatus, native_enum=False, length=10), default=AttendanceStatus.ABSENT, nullable=False)
    marked_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    remarks = Column(Text)
    marked_at = Column(DateTime, server_default=func.now())

    # Relationships
    session = relationship("AttendanceSession", back_populates="records")
    student = relationship("User", foreign_keys=[student_id])
