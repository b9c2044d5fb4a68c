from collections import Counter
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload, selectinload

from ..database import get_db
from ..models import (
    User, UserType, Student, Subject, FacultyBatchSubject,
    AttendanceSession, AttendanceRecord, AttendanceStatus,
)
from ..schemas.academic import TeachingAssignmentResponse, SubjectSummary
from ..schemas.attendance import SessionCreate, RecordUpdate, SessionResponse, SessionDetail, RecordResponse
from ..schemas.user import StudentUserResponse
from ..core.permissions import TokenClaims, require_faculty, require_student, require_hod
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok
from ..services.academics import get_batch_or_404, ensure_teaches
from ..services.attendance_stats import format_percentage, summarize, subject_wise
from ..config import settings

faculty_router = APIRouter(prefix="/faculty/attendance", tags=["faculty-attendance"])
student_router = APIRouter(prefix="/student/attendance", tags=["student-attendance"])
hod_router = APIRouter(prefix="/hod/attendance", tags=["hod-attendance"])
logger = get_logger(__name__)

RECENT_RECORDS = 20
LOW_ATTENDANCE_LIMIT = 10


def _session_query(db: Session):
    return db.query(AttendanceSession).options(
        joinedload(AttendanceSession.subject),
        joinedload(AttendanceSession.batch),
        selectinload(AttendanceSession.records).joinedload(AttendanceRecord.student),
    )


def _session_with_summary(session: AttendanceSession, include_records: bool = False) -> dict:
    schema = SessionDetail if include_records else SessionResponse
    return {
        "session": schema.model_validate(session),
        "summary": summarize(session.records),
    }


def _student_records(db: Session, student_id: int, subject_id: Optional[int] = None):
    """A student's records with session and subject loaded, newest class first"""
    query = (
        db.query(AttendanceRecord)
        .join(AttendanceSession, AttendanceRecord.session_id == AttendanceSession.id)
        .options(joinedload(AttendanceRecord.session).joinedload(AttendanceSession.subject))
        .filter(AttendanceRecord.student_id == student_id)
    )
    if subject_id is not None:
        query = query.filter(AttendanceSession.subject_id == subject_id)
    return query.order_by(
        AttendanceSession.date.desc(),
        AttendanceSession.start_time.desc(),
        AttendanceRecord.id.desc(),
    ).all()


def _record_item(record: AttendanceRecord) -> dict:
    session = record.session
    return {
        "id": record.id,
        "sessionId": session.id,
        "date": session.date,
        "startTime": session.start_time,
        "endTime": session.end_time,
        "topic": session.topic,
        "sessionType": session.session_type,
        "status": record.status,
        "remarks": record.remarks,
        "markedAt": record.marked_at,
        "subject": SubjectSummary.model_validate(session.subject),
    }


def _batch_student_ids(db: Session, batch_id: int) -> set:
    rows = (
        db.query(User.id)
        .join(Student, Student.user_id == User.id)
        .filter(Student.batch_id == batch_id, User.type == UserType.STUDENT)
        .all()
    )
    return {row[0] for row in rows}


# ============================================
# Faculty
# ============================================

@faculty_router.get("/assignments")
def my_teaching_assignments(claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    """Active batch/subject pairs the caller teaches"""
    assignments = (
        db.query(FacultyBatchSubject)
        .options(joinedload(FacultyBatchSubject.subject), joinedload(FacultyBatchSubject.batch))
        .filter(FacultyBatchSubject.faculty_id == claims.id, FacultyBatchSubject.is_active == True)
        .order_by(FacultyBatchSubject.id)
        .all()
    )
    return ok([TeachingAssignmentResponse.model_validate(a) for a in assignments])


@faculty_router.get("/students")
def students_for_marking(
    batch_id: int = Query(..., alias="batchId"),
    subject_id: int = Query(..., alias="subjectId"),
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    """Verified, active students of a batch the caller teaches, by roll number"""
    ensure_teaches(db, claims.id, batch_id, subject_id)
    users = (
        db.query(User)
        .join(Student, Student.user_id == User.id)
        .options(joinedload(User.student))
        .filter(
            Student.batch_id == batch_id,
            Student.is_verified == True,
            User.is_active == True,
        )
        .order_by(Student.roll_number)
        .all()
    )
    return ok([StudentUserResponse.model_validate(u) for u in users])


@faculty_router.post("/session", status_code=status.HTTP_201_CREATED)
def create_session(payload: SessionCreate, claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    """Create a session and all of its records in one transaction"""
    ensure_teaches(db, claims.id, payload.batch_id, payload.subject_id)

    student_ids = [mark.student_id for mark in payload.attendance]
    duplicates = sorted(sid for sid, n in Counter(student_ids).items() if n > 1)
    if duplicates:
        raise ValidationError(f"Duplicate students in attendance: {duplicates}", field="attendance")

    outside = sorted(set(student_ids) - _batch_student_ids(db, payload.batch_id))
    if outside:
        raise ValidationError(f"Students not in batch {payload.batch_id}: {outside}", field="attendance")

    session = AttendanceSession(
        subject_id=payload.subject_id,
        batch_id=payload.batch_id,
        faculty_id=claims.id,
        date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        topic=payload.topic,
        session_type=payload.session_type,
    )
    session.records = [
        AttendanceRecord(
            student_id=mark.student_id,
            status=mark.status,
            marked_by=claims.id,
            remarks=mark.remarks,
        )
        for mark in payload.attendance
    ]

    try:
        db.add(session)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Faculty {claims.id} recorded session {session.id} with {len(student_ids)} records",
        extra={"session_id": session.id, "batch_id": payload.batch_id, "subject_id": payload.subject_id},
    )
    session = _session_query(db).filter(AttendanceSession.id == session.id).first()
    data = _session_with_summary(session)
    data["recordCount"] = len(session.records)
    return ok(data, message="Attendance recorded")


@faculty_router.get("/sessions")
def my_sessions(
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    batch_id: Optional[int] = Query(None, alias="batchId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    """Sessions the caller recorded, newest first, each with its status counts"""
    query = _session_query(db).filter(AttendanceSession.faculty_id == claims.id)
    if subject_id is not None:
        query = query.filter(AttendanceSession.subject_id == subject_id)
    if batch_id is not None:
        query = query.filter(AttendanceSession.batch_id == batch_id)
    if start_date is not None:
        query = query.filter(AttendanceSession.date >= start_date)
    if end_date is not None:
        query = query.filter(AttendanceSession.date <= end_date)

    sessions, meta = pagination.paginate(query.order_by(
        AttendanceSession.date.desc(),
        AttendanceSession.start_time.desc(),
        AttendanceSession.id.desc(),
    ))
    return ok([_session_with_summary(s) for s in sessions], pagination=meta)


@faculty_router.get("/sessions/{session_id}")
def my_session_detail(session_id: int, claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    session = _session_query(db).filter(AttendanceSession.id == session_id).first()
    if not session:
        raise NotFoundError("Attendance session", session_id)
    if session.faculty_id != claims.id:
        raise AuthorizationError("You can only view your own sessions")
    return ok(_session_with_summary(session, include_records=True))


@faculty_router.put("/record/{record_id}")
def update_record(
    record_id: int,
    payload: RecordUpdate,
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    """Correct one student's mark; only the faculty who owns the session may"""
    record = (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.session))
        .filter(AttendanceRecord.id == record_id)
        .first()
    )
    if not record:
        raise NotFoundError("Attendance record", record_id)
    if record.session.faculty_id != claims.id:
        raise AuthorizationError("You can only update records of your own sessions")

    record.status = payload.status
    if "remarks" in payload.model_fields_set:
        record.remarks = payload.remarks
    record.marked_by = claims.id
    record.marked_at = func.now()
    db.commit()
    db.refresh(record)

    return ok(RecordResponse.model_validate(record), message="Attendance updated")


# ============================================
# Student
# ============================================

@student_router.get("")
def my_attendance(claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    """Overall and per-subject attendance plus the most recent marks"""
    records = _student_records(db, claims.id)
    return ok({
        "overall": summarize(records),
        "subjectWise": subject_wise(records),
        "recentRecords": [_record_item(r) for r in records[:RECENT_RECORDS]],
    })


@student_router.get("/subject/{subject_id}")
def my_subject_attendance(subject_id: int, claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise NotFoundError("Subject", subject_id)

    records = _student_records(db, claims.id, subject_id=subject_id)
    return ok({
        "subject": SubjectSummary.model_validate(subject),
        "summary": summarize(records),
        "records": [_record_item(r) for r in records],
    })


# ============================================
# HOD
# ============================================

@hod_router.get("/batch/{batch_id}")
def batch_attendance(
    batch_id: int,
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    batch = get_batch_or_404(db, batch_id)

    query = _session_query(db).filter(AttendanceSession.batch_id == batch_id)
    if subject_id is not None:
        query = query.filter(AttendanceSession.subject_id == subject_id)
    if start_date is not None:
        query = query.filter(AttendanceSession.date >= start_date)
    if end_date is not None:
        query = query.filter(AttendanceSession.date <= end_date)
    sessions = query.order_by(AttendanceSession.date.desc(), AttendanceSession.start_time.desc()).all()

    return ok({
        "batch": {"BatchId": batch.id, "BatchName": batch.batch_name, "course": batch.course},
        "sessions": [_session_with_summary(s, include_records=True) for s in sessions],
        "totalSessions": len(sessions),
    })


@hod_router.get("/student/{student_id}")
def student_attendance(student_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    user = (
        db.query(User)
        .options(joinedload(User.student).joinedload(Student.batch))
        .filter(User.id == student_id, User.type == UserType.STUDENT)
        .first()
    )
    if not user:
        raise NotFoundError("Student", student_id)

    records = _student_records(db, student_id)
    return ok({
        "student": StudentUserResponse.model_validate(user),
        "overall": summarize(records),
        "subjectWise": subject_wise(records),
    })


@hod_router.get("/stats")
def attendance_stats(claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Department-wide numbers and the students furthest below the threshold"""
    total_sessions = db.query(AttendanceSession).count()
    today_sessions = db.query(AttendanceSession).filter(AttendanceSession.date == date.today()).count()

    status_counts = dict(
        db.query(AttendanceRecord.status, func.count(AttendanceRecord.id))
        .group_by(AttendanceRecord.status)
        .all()
    )
    present = status_counts.get(AttendanceStatus.PRESENT, 0)
    late = status_counts.get(AttendanceStatus.LATE, 0)
    total_records = sum(status_counts.values())

    attended = func.sum(case(
        (AttendanceRecord.status.in_([AttendanceStatus.PRESENT, AttendanceStatus.LATE]), 1),
        else_=0,
    ))
    per_student = (
        db.query(AttendanceRecord.student_id, func.count(AttendanceRecord.id), attended)
        .join(Student, Student.user_id == AttendanceRecord.student_id)
        .filter(Student.is_verified == True)
        .group_by(AttendanceRecord.student_id)
        .all()
    )

    low = []
    for student_id, total, attended_count in per_student:
        percentage = (attended_count or 0) / total * 100
        if percentage < settings.low_attendance_threshold:
            low.append((percentage, student_id, total, attended_count or 0))
    low.sort()
    low = low[:LOW_ATTENDANCE_LIMIT]

    users = {}
    if low:
        users = {
            u.id: u for u in db.query(User)
            .options(joinedload(User.student))
            .filter(User.id.in_([row[1] for row in low]))
            .all()
        }

    return ok({
        "totalSessions": total_sessions,
        "todaySessions": today_sessions,
        "totalRecords": total_records,
        "presentRecords": present,
        "lateRecords": late,
        "overallPercentage": format_percentage(present + late, total_records),
        "lowAttendanceThreshold": settings.low_attendance_threshold,
        "lowAttendanceStudents": [
            {
                "studentId": student_id,
                "name": users[student_id].name,
                "rollNumber": users[student_id].student.roll_number,
                "totalClasses": total,
                "attended": attended_count,
                "percentage": format_percentage(attended_count, total),
            }
            for _, student_id, total, attended_count in low
        ],
    })
