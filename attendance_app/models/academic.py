from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Batch(Base):
    """A cohort of students admitted in the same year/course"""
    __tablename__ = "batches"

    # Column names kept as BatchId/BatchName to match the mobile client's payloads
    id = Column("BatchId", Integer, primary_key=True, index=True)
    batch_name = Column("BatchName", String(100), nullable=False)
    course = Column(String(100), nullable=False)
    current_semester = Column(Integer, default=1, nullable=False)  # 1..8
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    students = relationship("Student", back_populates="batch")
    teaching_assignments = relationship("FacultyBatchSubject", back_populates="batch")


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    code = Column(String(30), unique=True, index=True, nullable=False)
    department = Column(String(100), nullable=False)
    semester = Column(Integer, nullable=False)
    credits = Column(Integer, default=3, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    teaching_assignments = relationship("FacultyBatchSubject", back_populates="subject")


class FacultyBatchSubject(Base):
    """Who teaches what to whom"""
    __tablename__ = "faculty_batch_subjects"
    __table_args__ = (
        UniqueConstraint("faculty_id", "batch_id", "subject_id", name="uq_faculty_batch_subject"),
    )

    id = Column(Integer, primary_key=True, index=True)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    batch_id = Column(Integer, ForeignKey("batches.BatchId"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    faculty = relationship("User")
    batch = relationship("Batch", back_populates="teaching_assignments")
    subject = relationship("Subject", back_populates="teaching_assignments")
