import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class ProgressStatus(str, enum.Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class SyllabusUnit(Base):
    """A numbered unit of a subject's syllabus"""
    __tablename__ = "syllabus_units"
    __table_args__ = (
        UniqueConstraint("subject_id", "unit_number", name="uq_syllabus_unit_subject_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    unit_number = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    weightage = Column(Integer, default=0, nullable=False)  # percent of the exam
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    subject = relationship("Subject")
    topics = relationship(
        "SyllabusTopic",
        back_populates="unit",
        cascade="all, delete-orphan",
        order_by="SyllabusTopic.topic_number",
    )


class SyllabusTopic(Base):
    __tablename__ = "syllabus_topics"
    __table_args__ = (
        UniqueConstraint("unit_id", "topic_number", name="uq_syllabus_topic_unit_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("syllabus_units.id"), nullable=False, index=True)
    topic_number = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    estimated_hours = Column(Integer, default=1, nullable=False)

    # Relationships
    unit = relationship("SyllabusUnit", back_populates="topics")


class SyllabusProgress(Base):
    """How far a faculty member has got with one unit for one batch"""
    __tablename__ = "syllabus_progress"
    __table_args__ = (
        UniqueConstraint("faculty_id", "batch_id", "subject_id", "unit_id", name="uq_syllabus_progress"),
    )

    id = Column(Integer, primary_key=True, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    unit_id = Column(Integer, ForeignKey("syllabus_units.id"), nullable=False)
    status = Column(Enum(ProgressStatus, native_enum=False, length=20), default=ProgressStatus.NOT_STARTED, nullable=False)
    completion_percent = Column(Integer, default=0, nullable=False)
    notes = Column(Text)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    faculty = relationship("User")
    batch = relationship("Batch")
    subject = relationship("Subject")
    unit = relationship("SyllabusUnit")


class SyllabusTopicProgress(Base):
    __tablename__ = "syllabus_topic_progress"
    __table_args__ = (
        UniqueConstraint("faculty_id", "batch_id", "topic_id", name="uq_syllabus_topic_progress"),
    )

    id = Column(Integer, primary_key=True, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=False, index=True)
    topic_id = Column(Integer, ForeignKey("syllabus_topics.id"), nullable=False)
    status = Column(Enum(ProgressStatus, native_enum=False, length=20), default=ProgressStatus.NOT_STARTED, nullable=False)
    taught_at = Column(DateTime, nullable=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id"), nullable=True)
    notes = Column(Text)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    topic = relationship("SyllabusTopic")
