from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Subject, AttendanceSession, TimetableSlot, FacultyBatchSubject, Assignment, SyllabusUnit
from ..schemas.academic import SubjectCreate, SubjectUpdate, SubjectResponse
from ..core.permissions import TokenClaims, require_hod
from ..core.exceptions import ConflictError, NotFoundError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok

router = APIRouter(prefix="/hod/subjects", tags=["hod-subjects"])
logger = get_logger(__name__)

# Rows that keep a subject from being hard deleted
DEPENDENTS = (
    ("attendanceSessions", AttendanceSession),
    ("timetableSlots", TimetableSlot),
    ("teachingAssignments", FacultyBatchSubject),
    ("assignments", Assignment),
    ("syllabusUnits", SyllabusUnit),
)


def _get_subject(db: Session, subject_id: int) -> Subject:
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise NotFoundError("Subject", subject_id)
    return subject


def _ensure_code_available(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Subject).filter(Subject.code == code)
    if exclude_id is not None:
        query = query.filter(Subject.id != exclude_id)
    if query.first():
        raise ConflictError(f"Subject code '{code}' already exists", details={"field": "code"})


@router.get("")
def list_subjects(
    department: Optional[str] = None,
    semester: Optional[int] = None,
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    query = db.query(Subject)
    if department:
        query = query.filter(Subject.department == department)
    if semester is not None:
        query = query.filter(Subject.semester == semester)

    subjects, meta = pagination.paginate(query.order_by(Subject.semester, Subject.code))
    return ok([SubjectResponse.model_validate(s) for s in subjects], pagination=meta)


@router.get("/{subject_id}")
def get_subject(subject_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    return ok(SubjectResponse.model_validate(_get_subject(db, subject_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectCreate, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    _ensure_code_available(db, payload.code)

    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return ok(SubjectResponse.model_validate(subject), message="Subject created")


@router.put("/{subject_id}")
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    subject = _get_subject(db, subject_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "code" in changes and changes["code"] != subject.code:
        _ensure_code_available(db, changes["code"], exclude_id=subject.id)

    for field, value in changes.items():
        setattr(subject, field, value)

    db.commit()
    db.refresh(subject)
    return ok(SubjectResponse.model_validate(subject), message="Subject updated")


@router.delete("/{subject_id}")
def delete_subject(subject_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Hard delete, refused while anything still references the subject"""
    subject = _get_subject(db, subject_id)

    dependents = {}
    for name, model in DEPENDENTS:
        count = db.query(model).filter(model.subject_id == subject_id).count()
        if count:
            dependents[name] = count
    if dependents:
        raise ConflictError(
            "Subject is in use and cannot be deleted: " + ", ".join(dependents),
            details={"dependents": dependents},
        )

    db.delete(subject)
    db.commit()
    logger.info(f"HOD {claims.id} deleted subject {subject_id}")
    return ok(message="Subject deleted")
