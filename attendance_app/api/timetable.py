from datetime import date
from typing import Dict, Iterable, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import User, UserType, Student, Subject, TimetableVersion, TimetableSlot
from ..schemas.timetable import (
    VersionCreate, VersionUpdate, VersionResponse,
    SlotBatchCreate, SlotUpdate, SlotResponse,
)
from ..core.permissions import TokenClaims, require_hod, require_faculty, require_student
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..core.pagination import ok
from ..services.academics import get_batch_or_404
from ..services.timetable import (
    iso_weekday, current_versions, current_version, make_room_for, slot_query,
)

router = APIRouter(prefix="/timetable", tags=["timetable"])
logger = get_logger(__name__)


def _get_version(db: Session, version_id: int) -> TimetableVersion:
    version = db.query(TimetableVersion).filter(TimetableVersion.id == version_id).first()
    if not version:
        raise NotFoundError("Timetable version", version_id)
    return version


def _get_slot(db: Session, slot_id: int) -> TimetableSlot:
    slot = db.query(TimetableSlot).filter(TimetableSlot.id == slot_id).first()
    if not slot:
        raise NotFoundError("Timetable slot", slot_id)
    return slot


def _check_references(
    db: Session,
    subject_ids: Iterable[int],
    batch_ids: Iterable[int],
    faculty_ids: Iterable[int],
) -> None:
    subject_ids, batch_ids, faculty_ids = set(subject_ids), set(batch_ids), set(faculty_ids)

    found = {row[0] for row in db.query(Subject.id).filter(Subject.id.in_(subject_ids)).all()}
    missing = sorted(subject_ids - found)
    if missing:
        raise NotFoundError("Subject", missing[0])

    for batch_id in sorted(batch_ids):
        get_batch_or_404(db, batch_id)

    found = {
        row[0] for row in db.query(User.id)
        .filter(User.id.in_(faculty_ids), User.type == UserType.FACULTY)
        .all()
    }
    missing = sorted(faculty_ids - found)
    if missing:
        raise NotFoundError("Faculty", missing[0])


def _slot_counts(db: Session, version_ids: List[int]) -> Dict[int, int]:
    rows = (
        db.query(TimetableSlot.timetable_version_id, func.count(TimetableSlot.id))
        .filter(TimetableSlot.timetable_version_id.in_(version_ids), TimetableSlot.is_active == True)
        .group_by(TimetableSlot.timetable_version_id)
        .all()
    )
    return dict(rows)


def _group_by_day(slots: List[TimetableSlot]) -> Dict[int, list]:
    days: Dict[int, list] = {day: [] for day in range(1, 8)}
    for slot in slots:
        days[slot.day_of_week].append(SlotResponse.model_validate(slot))
    return days


# ============================================
# HOD
# ============================================

@router.post("/hod/version", status_code=status.HTTP_201_CREATED)
def create_version(payload: VersionCreate, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """New timetable version; overlapping active versions of the same semester are trimmed or retired"""
    version = TimetableVersion(**payload.model_dump(), created_by=claims.id)
    try:
        deactivated, trimmed = make_room_for(db, version)
        db.add(version)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(version)

    if deactivated or trimmed:
        logger.info(f"Timetable version {version.id} deactivated {deactivated}, trimmed {trimmed}")
    return ok(
        {
            "version": VersionResponse.model_validate(version),
            "deactivatedVersionIds": deactivated,
            "trimmedVersionIds": trimmed,
        },
        message="Timetable version created",
    )


@router.get("/hod/versions")
def list_versions(
    academic_year: Optional[str] = Query(None, alias="academicYear"),
    semester: Optional[int] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    query = db.query(TimetableVersion)
    if academic_year:
        query = query.filter(TimetableVersion.academic_year == academic_year)
    if semester is not None:
        query = query.filter(TimetableVersion.semester == semester)
    if is_active is not None:
        query = query.filter(TimetableVersion.is_active == is_active)

    versions = query.order_by(TimetableVersion.valid_from.desc(), TimetableVersion.id.desc()).all()
    counts = _slot_counts(db, [v.id for v in versions])
    return ok([
        {**VersionResponse.model_validate(v).model_dump(mode="json", by_alias=True), "slotCount": counts.get(v.id, 0)}
        for v in versions
    ])


@router.put("/hod/version/{version_id}")
def update_version(
    version_id: int,
    payload: VersionUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    version = _get_version(db, version_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("valid_from") is None:
        changes.pop("valid_from", None)

    for field, value in changes.items():
        if value is None and field != "valid_to":
            continue
        setattr(version, field, value)

    if version.valid_to is not None and version.valid_to < version.valid_from:
        db.rollback()
        raise ValidationError("validTo must not be before validFrom", field="validTo")

    deactivated, trimmed = make_room_for(db, version) if version.is_active else ([], [])
    db.commit()
    db.refresh(version)
    return ok(
        {
            "version": VersionResponse.model_validate(version),
            "deactivatedVersionIds": deactivated,
            "trimmedVersionIds": trimmed,
        },
        message="Timetable version updated",
    )


@router.delete("/hod/version/{version_id}")
def deactivate_version(version_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    version = _get_version(db, version_id)
    version.is_active = False
    db.commit()
    return ok(message="Timetable version deactivated")


@router.post("/hod/version/{version_id}/slots", status_code=status.HTTP_201_CREATED)
def create_slots(
    version_id: int,
    payload: SlotBatchCreate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Add a batch of slots to a version; either all of them are stored or none"""
    _get_version(db, version_id)
    _check_references(
        db,
        subject_ids=(s.subject_id for s in payload.slots),
        batch_ids=(s.batch_id for s in payload.slots),
        faculty_ids=(s.faculty_id for s in payload.slots),
    )

    slots = [TimetableSlot(timetable_version_id=version_id, **s.model_dump()) for s in payload.slots]
    try:
        db.add_all(slots)
        db.commit()
    except Exception:
        db.rollback()
        raise

    created = slot_query(db).filter(TimetableSlot.id.in_([s.id for s in slots])).all()
    return ok([SlotResponse.model_validate(s) for s in created], message=f"{len(created)} slots created")


@router.get("/hod/slots")
def list_slots(
    version_id: Optional[int] = Query(None, alias="versionId"),
    batch_id: Optional[int] = Query(None, alias="batchId"),
    faculty_id: Optional[int] = Query(None, alias="facultyId"),
    day_of_week: Optional[int] = Query(None, alias="dayOfWeek", ge=1, le=7),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    query = slot_query(db)
    if version_id is not None:
        query = query.filter(TimetableSlot.timetable_version_id == version_id)
    if batch_id is not None:
        query = query.filter(TimetableSlot.batch_id == batch_id)
    if faculty_id is not None:
        query = query.filter(TimetableSlot.faculty_id == faculty_id)
    if day_of_week is not None:
        query = query.filter(TimetableSlot.day_of_week == day_of_week)
    return ok([SlotResponse.model_validate(s) for s in query.all()])


@router.put("/hod/slot/{slot_id}")
def update_slot(
    slot_id: int,
    payload: SlotUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    slot = _get_slot(db, slot_id)
    changes = payload.model_dump(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None or k == "room_number"}

    _check_references(
        db,
        subject_ids=[changes["subject_id"]] if "subject_id" in changes else [],
        batch_ids=[changes["batch_id"]] if "batch_id" in changes else [],
        faculty_ids=[changes["faculty_id"]] if "faculty_id" in changes else [],
    )
    start = changes.get("start_time", slot.start_time)
    end = changes.get("end_time", slot.end_time)
    if end <= start:
        raise ValidationError("endTime must be after startTime", field="endTime")

    for field, value in changes.items():
        setattr(slot, field, value)
    db.commit()

    slot = slot_query(db).filter(TimetableSlot.id == slot_id).first()
    return ok(SlotResponse.model_validate(slot), message="Slot updated")


@router.delete("/hod/slot/{slot_id}")
def delete_slot(slot_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    slot = _get_slot(db, slot_id)
    slot.is_active = False
    db.commit()
    return ok(message="Slot removed")


@router.get("/hod/batch/{batch_id}/timetable")
def batch_timetable(
    batch_id: int,
    version_id: Optional[int] = Query(None, alias="versionId"),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Explicit version, or whatever is current for the batch's semester"""
    batch = get_batch_or_404(db, batch_id)
    if version_id is not None:
        version = _get_version(db, version_id)
    else:
        version = current_version(db, date.today(), batch.current_semester)

    slots = []
    if version is not None:
        slots = (
            slot_query(db)
            .filter(TimetableSlot.timetable_version_id == version.id, TimetableSlot.batch_id == batch_id)
            .all()
        )
    return ok({
        "version": VersionResponse.model_validate(version) if version else None,
        "timetable": _group_by_day(slots),
    })


# ============================================
# Faculty
# ============================================

def _faculty_slots(db: Session, faculty_id: int, today: date, day_of_week: Optional[int] = None):
    version_ids = [v.id for v in current_versions(db, today).all()]
    query = slot_query(db).filter(
        TimetableSlot.faculty_id == faculty_id,
        TimetableSlot.timetable_version_id.in_(version_ids),
    )
    if day_of_week is not None:
        query = query.filter(TimetableSlot.day_of_week == day_of_week)
    return query.all()


@router.get("/faculty/my-timetable")
def faculty_timetable(claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    return ok({"timetable": _group_by_day(_faculty_slots(db, claims.id, date.today()))})


@router.get("/faculty/today")
def faculty_today(claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    today = date.today()
    day = iso_weekday(today)
    slots = _faculty_slots(db, claims.id, today, day_of_week=day)
    return ok({
        "date": today,
        "dayOfWeek": day,
        "slots": [SlotResponse.model_validate(s) for s in slots],
    })


# ============================================
# Student
# ============================================

def _student_slots(db: Session, user_id: int, today: date, day_of_week: Optional[int] = None):
    student = db.query(Student).filter(Student.user_id == user_id).first()
    if not student or student.batch_id is None:
        raise NotFoundError("Batch assignment for student", user_id)

    batch = get_batch_or_404(db, student.batch_id)
    version = current_version(db, today, batch.current_semester)
    if version is None:
        return None, []

    query = slot_query(db).filter(
        TimetableSlot.timetable_version_id == version.id,
        TimetableSlot.batch_id == batch.id,
    )
    if day_of_week is not None:
        query = query.filter(TimetableSlot.day_of_week == day_of_week)
    return version, query.all()


@router.get("/student/my-timetable")
def student_timetable(claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    version, slots = _student_slots(db, claims.id, date.today())
    return ok({
        "version": VersionResponse.model_validate(version) if version else None,
        "timetable": _group_by_day(slots),
    })


@router.get("/student/today")
def student_today(claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    today = date.today()
    day = iso_weekday(today)
    version, slots = _student_slots(db, claims.id, today, day_of_week=day)
    return ok({
        "date": today,
        "dayOfWeek": day,
        "version": VersionResponse.model_validate(version) if version else None,
        "slots": [SlotResponse.model_validate(s) for s in slots],
    })
