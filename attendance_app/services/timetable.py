from datetime import date, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, Query, joinedload

from ..models import TimetableSlot, TimetableVersion


def iso_weekday(day: date) -> int:
    """Monday=1 .. Sunday=7"""
    return day.isoweekday()


def current_versions(db: Session, today: date, semester: Optional[int] = None) -> Query:
    """Versions in force on `today`, newest validFrom first"""
    query = db.query(TimetableVersion).filter(
        TimetableVersion.is_active == True,
        TimetableVersion.valid_from <= today,
        or_(TimetableVersion.valid_to.is_(None), TimetableVersion.valid_to >= today),
    )
    if semester is not None:
        query = query.filter(TimetableVersion.semester == semester)
    return query.order_by(TimetableVersion.valid_from.desc(), TimetableVersion.id.desc())


def current_version(db: Session, today: date, semester: int) -> Optional[TimetableVersion]:
    return current_versions(db, today, semester).first()


def overlapping_active_versions(
    db: Session, semester: int, valid_from: date, valid_to: Optional[date]
) -> List[TimetableVersion]:
    """Active versions of a semester whose window intersects [valid_from, valid_to]"""
    query = db.query(TimetableVersion).filter(
        TimetableVersion.is_active == True,
        TimetableVersion.semester == semester,
        or_(TimetableVersion.valid_to.is_(None), TimetableVersion.valid_to >= valid_from),
    )
    if valid_to is not None:
        query = query.filter(TimetableVersion.valid_from <= valid_to)
    return query.all()


def slot_query(db: Session) -> Query:
    return (
        db.query(TimetableSlot)
        .options(
            joinedload(TimetableSlot.subject),
            joinedload(TimetableSlot.batch),
            joinedload(TimetableSlot.faculty),
        )
        .filter(TimetableSlot.is_active == True)
        .order_by(TimetableSlot.day_of_week, TimetableSlot.start_time)
    )


def make_room_for(db: Session, version: TimetableVersion) -> Tuple[List[int], List[int]]:
    """
    Keep at most one active version per semester for any given day.

    A version that started before `version` is closed the day before it begins.
    One that starts inside the window but outlives it is moved to start the day after.
    Only versions lying entirely inside the new window are deactivated.
    Returns (deactivated ids, trimmed ids).
    """
    deactivated, trimmed = [], []
    for other in overlapping_active_versions(db, version.semester, version.valid_from, version.valid_to):
        if other.id == version.id:
            continue
        if other.valid_from < version.valid_from:
            other.valid_to = version.valid_from - timedelta(days=1)
            trimmed.append(other.id)
        elif version.valid_to is not None and (other.valid_to is None or other.valid_to > version.valid_to):
            other.valid_from = version.valid_to + timedelta(days=1)
            trimmed.append(other.id)
        else:
            other.is_active = False
            deactivated.append(other.id)
    return deactivated, trimmed
