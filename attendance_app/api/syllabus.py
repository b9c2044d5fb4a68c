from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from ..database import get_db
from ..models import (
    Hod, Student, Subject, Batch, FacultyBatchSubject, AttendanceSession,
    SyllabusUnit, SyllabusTopic, SyllabusProgress, SyllabusTopicProgress, ProgressStatus,
)
from ..schemas.academic import BatchSummary, SubjectSummary
from ..schemas.attendance import UserBrief
from ..schemas.syllabus import (
    SyllabusCreate, UnitUpdate, UnitResponse, ProgressUpdate,
    ProgressResponse, ProgressDetail, TopicProgressResponse,
)
from ..core.permissions import TokenClaims, require_hod, require_faculty, require_student
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..core.pagination import ok
from ..services.academics import ensure_teaches
from ..services.syllabus import subject_units, syllabus_tree

router = APIRouter(prefix="/syllabus", tags=["syllabus"])
logger = get_logger(__name__)


def _get_subject(db: Session, subject_id: int) -> Subject:
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise NotFoundError("Subject", subject_id)
    return subject


def _get_unit(db: Session, unit_id: int) -> SyllabusUnit:
    unit = (
        db.query(SyllabusUnit)
        .options(selectinload(SyllabusUnit.topics))
        .filter(SyllabusUnit.id == unit_id)
        .first()
    )
    if not unit:
        raise NotFoundError("Syllabus unit", unit_id)
    return unit


def _ensure_unit_number_free(db: Session, subject_id: int, unit_number: int, exclude_id: Optional[int] = None) -> None:
    query = db.query(SyllabusUnit).filter(
        SyllabusUnit.subject_id == subject_id,
        SyllabusUnit.unit_number == unit_number,
    )
    if exclude_id is not None:
        query = query.filter(SyllabusUnit.id != exclude_id)
    if query.first():
        raise ConflictError(f"Unit {unit_number} already exists for this subject", details={"field": "unitNumber"})


def _batch_teachers(db: Session, batch_id: int, subject_id: int) -> list:
    assignments = (
        db.query(FacultyBatchSubject)
        .options(joinedload(FacultyBatchSubject.faculty))
        .filter(
            FacultyBatchSubject.batch_id == batch_id,
            FacultyBatchSubject.subject_id == subject_id,
            FacultyBatchSubject.is_active == True,
        )
        .order_by(FacultyBatchSubject.id)
        .all()
    )
    return [UserBrief.model_validate(a.faculty) for a in assignments]


def _student_batch(db: Session, user_id: int) -> Batch:
    student = db.query(Student).options(joinedload(Student.batch)).filter(Student.user_id == user_id).first()
    if not student or not student.batch:
        raise NotFoundError("Student batch")
    return student.batch


# ============================================
# HOD
# ============================================

@router.post("/hod/subjects/{subject_id}/syllabus", status_code=status.HTTP_201_CREATED)
def create_syllabus(
    subject_id: int,
    payload: SyllabusCreate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Add units with their topics to a subject; all of them are stored or none"""
    _get_subject(db, subject_id)
    for unit_data in payload.units:
        _ensure_unit_number_free(db, subject_id, unit_data.unit_number)

    units = []
    for unit_data in payload.units:
        unit = SyllabusUnit(subject_id=subject_id, **unit_data.model_dump(exclude={"topics"}))
        unit.topics = [SyllabusTopic(**topic.model_dump()) for topic in unit_data.topics]
        units.append(unit)

    try:
        db.add_all(units)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"HOD {claims.id} added {len(units)} syllabus units to subject {subject_id}")
    return ok(
        [UnitResponse.model_validate(unit) for unit in units],
        message="Syllabus structure created",
    )


@router.get("/hod/subjects/{subject_id}/syllabus")
def get_syllabus(subject_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    _get_subject(db, subject_id)
    units = subject_units(db, subject_id)
    return ok({"subjectId": subject_id, "units": [UnitResponse.model_validate(u) for u in units]})


@router.put("/hod/units/{unit_id}")
def update_unit(
    unit_id: int,
    payload: UnitUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    unit = _get_unit(db, unit_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("unit_number") is not None and changes["unit_number"] != unit.unit_number:
        _ensure_unit_number_free(db, unit.subject_id, changes["unit_number"], exclude_id=unit.id)
    for field, value in changes.items():
        if value is None and field != "description":
            continue
        setattr(unit, field, value)

    db.commit()
    return ok(UnitResponse.model_validate(_get_unit(db, unit_id)), message="Syllabus unit updated")


@router.delete("/hod/units/{unit_id}")
def delete_unit(unit_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Hard delete with its topics, refused once any progress has been recorded against it"""
    unit = _get_unit(db, unit_id)
    topic_ids = [topic.id for topic in unit.topics]

    recorded = db.query(SyllabusProgress).filter(SyllabusProgress.unit_id == unit_id).count()
    if topic_ids:
        recorded += db.query(SyllabusTopicProgress).filter(SyllabusTopicProgress.topic_id.in_(topic_ids)).count()
    if recorded:
        raise ConflictError(
            "Progress has been recorded for this unit; it cannot be deleted",
            details={"progressRecords": recorded},
        )

    db.delete(unit)
    db.commit()
    logger.info(f"HOD {claims.id} deleted syllabus unit {unit_id}")
    return ok(message="Syllabus unit deleted")


@router.get("/hod/syllabus-progress")
def progress_overview(
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    batch_id: Optional[int] = Query(None, alias="batchId"),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Unit progress for every subject of the HOD's department"""
    hod = db.query(Hod).filter(Hod.user_id == claims.id).first()
    if not hod:
        raise NotFoundError("HOD profile")

    query = (
        db.query(SyllabusProgress)
        .join(Subject, SyllabusProgress.subject_id == Subject.id)
        .join(Batch, SyllabusProgress.batch_id == Batch.id)
        .join(SyllabusUnit, SyllabusProgress.unit_id == SyllabusUnit.id)
        .options(
            joinedload(SyllabusProgress.faculty),
            joinedload(SyllabusProgress.batch),
            joinedload(SyllabusProgress.subject),
            joinedload(SyllabusProgress.unit),
        )
        .filter(Subject.department == hod.department)
    )
    if subject_id is not None:
        query = query.filter(SyllabusProgress.subject_id == subject_id)
    if batch_id is not None:
        query = query.filter(SyllabusProgress.batch_id == batch_id)

    rows = query.order_by(Subject.name, Batch.batch_name, SyllabusUnit.unit_number, SyllabusProgress.id).all()
    return ok([ProgressDetail.model_validate(row) for row in rows])


# ============================================
# Faculty
# ============================================

@router.get("/faculty/my-syllabus")
def my_syllabus(
    batch_id: Optional[int] = Query(None, alias="batchId"),
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    """Syllabus of every batch/subject the caller teaches, with their own progress"""
    query = (
        db.query(FacultyBatchSubject)
        .options(joinedload(FacultyBatchSubject.subject), joinedload(FacultyBatchSubject.batch))
        .filter(FacultyBatchSubject.faculty_id == claims.id, FacultyBatchSubject.is_active == True)
    )
    if batch_id is not None:
        query = query.filter(FacultyBatchSubject.batch_id == batch_id)
    if subject_id is not None:
        query = query.filter(FacultyBatchSubject.subject_id == subject_id)

    result = []
    for assignment in query.order_by(FacultyBatchSubject.id).all():
        tree = syllabus_tree(db, subject_units(db, assignment.subject_id), assignment.batch_id, faculty_id=claims.id)
        result.append({
            "teachingAssignmentId": assignment.id,
            "subject": SubjectSummary.model_validate(assignment.subject),
            "batch": BatchSummary.model_validate(assignment.batch),
            **tree,
        })
    return ok(result)


@router.put("/faculty/syllabus-progress")
def update_progress(payload: ProgressUpdate, claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    """Create or update the caller's progress on one unit and, optionally, its topics"""
    ensure_teaches(db, claims.id, payload.batch_id, payload.subject_id)

    unit = _get_unit(db, payload.unit_id)
    if unit.subject_id != payload.subject_id:
        raise ValidationError("Unit does not belong to this subject", field="unitId")

    topic_ids = {topic.id for topic in unit.topics}
    foreign = sorted({tp.topic_id for tp in payload.topic_progress} - topic_ids)
    if foreign:
        raise ValidationError(f"Topics not in unit {unit.id}: {foreign}", field="topicProgress")

    session_ids = {tp.session_id for tp in payload.topic_progress if tp.session_id is not None}
    if session_ids:
        own = {
            row[0] for row in db.query(AttendanceSession.id).filter(
                AttendanceSession.id.in_(session_ids),
                AttendanceSession.faculty_id == claims.id,
                AttendanceSession.batch_id == payload.batch_id,
                AttendanceSession.subject_id == payload.subject_id,
            ).all()
        }
        unknown = sorted(session_ids - own)
        if unknown:
            raise ValidationError(f"Sessions not recorded by you for this batch/subject: {unknown}", field="sessionId")

    now = datetime.utcnow()
    progress = db.query(SyllabusProgress).filter(
        SyllabusProgress.faculty_id == claims.id,
        SyllabusProgress.batch_id == payload.batch_id,
        SyllabusProgress.subject_id == payload.subject_id,
        SyllabusProgress.unit_id == payload.unit_id,
    ).first()
    if not progress:
        progress = SyllabusProgress(
            faculty_id=claims.id,
            batch_id=payload.batch_id,
            subject_id=payload.subject_id,
            unit_id=payload.unit_id,
            status=ProgressStatus.NOT_STARTED,
            completion_percent=0,
        )
        db.add(progress)

    if "notes" in payload.model_fields_set:
        progress.notes = payload.notes
    if payload.completion_percent is not None:
        progress.completion_percent = payload.completion_percent
    if payload.status is not None:
        progress.status = payload.status
        if payload.status == ProgressStatus.NOT_STARTED:
            progress.started_at = None
            progress.completed_at = None
        elif payload.status == ProgressStatus.IN_PROGRESS:
            progress.started_at = progress.started_at or now
            progress.completed_at = None
        else:
            progress.started_at = progress.started_at or now
            progress.completed_at = now
            if payload.completion_percent is None:
                progress.completion_percent = 100

    topic_rows = []
    for update in payload.topic_progress:
        row = db.query(SyllabusTopicProgress).filter(
            SyllabusTopicProgress.faculty_id == claims.id,
            SyllabusTopicProgress.batch_id == payload.batch_id,
            SyllabusTopicProgress.topic_id == update.topic_id,
        ).first()
        if not row:
            row = SyllabusTopicProgress(
                faculty_id=claims.id,
                batch_id=payload.batch_id,
                topic_id=update.topic_id,
                status=ProgressStatus.NOT_STARTED,
            )
            db.add(row)
        if update.status is not None:
            row.status = update.status
        if update.taught_at is not None:
            row.taught_at = update.taught_at
        elif update.status == ProgressStatus.COMPLETED and row.taught_at is None:
            row.taught_at = now
        if update.session_id is not None:
            row.session_id = update.session_id
        if "notes" in update.model_fields_set:
            row.notes = update.notes
        topic_rows.append(row)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(progress)
    for row in topic_rows:
        db.refresh(row)

    logger.info(
        f"Faculty {claims.id} set unit {unit.id} to {progress.status.value} for batch {payload.batch_id}",
        extra={"unit_id": unit.id, "batch_id": payload.batch_id, "topics": len(topic_rows)},
    )
    return ok(
        {
            "progress": ProgressResponse.model_validate(progress),
            "topicProgress": [TopicProgressResponse.model_validate(row) for row in topic_rows],
        },
        message="Syllabus progress updated",
    )


@router.get("/faculty/syllabus-progress/{subject_id}/{batch_id}")
def progress_detail(
    subject_id: int,
    batch_id: int,
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    ensure_teaches(db, claims.id, batch_id, subject_id)
    tree = syllabus_tree(db, subject_units(db, subject_id), batch_id, faculty_id=claims.id)
    return ok({"subjectId": subject_id, "batchId": batch_id, **tree})


# ============================================
# Student
# ============================================

@router.get("/student/my-syllabus")
def student_syllabus(claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    """Subjects taught to the caller's batch with coverage so far"""
    batch = _student_batch(db, claims.id)
    subjects = (
        db.query(Subject)
        .join(FacultyBatchSubject, FacultyBatchSubject.subject_id == Subject.id)
        .filter(FacultyBatchSubject.batch_id == batch.id, FacultyBatchSubject.is_active == True)
        .distinct()
        .order_by(Subject.name, Subject.id)
        .all()
    )

    result = []
    for subject in subjects:
        result.append({
            "subject": SubjectSummary.model_validate(subject),
            "faculty": _batch_teachers(db, batch.id, subject.id),
            **syllabus_tree(db, subject_units(db, subject.id), batch.id),
        })
    return ok({"batch": BatchSummary.model_validate(batch), "subjects": result})


@router.get("/student/syllabus/{subject_id}")
def student_subject_syllabus(subject_id: int, claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    batch = _student_batch(db, claims.id)
    subject = _get_subject(db, subject_id)
    return ok({
        "subject": SubjectSummary.model_validate(subject),
        "faculty": _batch_teachers(db, batch.id, subject.id),
        **syllabus_tree(db, subject_units(db, subject.id), batch.id),
    })
