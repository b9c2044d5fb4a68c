import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class AssignmentStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    LATE_SUBMISSION = "LATE_SUBMISSION"
    GRADED = "GRADED"


class Assignment(Base):
    """Coursework set by a faculty member for one batch/subject"""
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=False, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_marks = Column(Integer, default=100, nullable=False)
    due_date = Column(DateTime, nullable=False)
    instructions = Column(Text)
    attachment_url = Column(String(500))
    status = Column(Enum(AssignmentStatus, native_enum=False, length=20), default=AssignmentStatus.PUBLISHED, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    subject = relationship("Subject")
    batch = relationship("Batch")
    faculty = relationship("User")
    submissions = relationship("AssignmentSubmission", back_populates="assignment")


class AssignmentSubmission(Base):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text)
    attachment_url = Column(String(500))
    submitted_at = Column(DateTime, nullable=False)
    status = Column(Enum(SubmissionStatus, native_enum=False, length=20), default=SubmissionStatus.SUBMITTED, nullable=False)
    marks = Column(Integer, nullable=True)
    feedback = Column(Text)
    graded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    graded_at = Column(DateTime, nullable=True)

    # Relationships
    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id])
