from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..models import Announcement, Student
from ..schemas.communication import AnnouncementCreate, AnnouncementUpdate, AnnouncementResponse, StudentAnnouncement
from ..core.permissions import TokenClaims, require_hod, require_student
from ..core.exceptions import NotFoundError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok
from ..services.academics import get_batch_or_404
from ..services.announcements import visible_to_student, time_ago, is_new

router = APIRouter(prefix="/announcements", tags=["announcements"])
logger = get_logger(__name__)


def _get_own_announcement(db: Session, announcement_id: int, hod_id: int) -> Announcement:
    announcement = db.query(Announcement).filter(
        Announcement.id == announcement_id,
        Announcement.hod_id == hod_id,
    ).first()
    if not announcement:
        raise NotFoundError("Announcement", announcement_id)
    return announcement


@router.post("/hod", status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: AnnouncementCreate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Announcement for everyone, one department (course), or one batch"""
    if payload.batch_id is not None:
        get_batch_or_404(db, payload.batch_id)

    announcement = Announcement(**payload.model_dump(), hod_id=claims.id)
    db.add(announcement)
    db.commit()
    db.refresh(announcement)

    logger.info(f"HOD {claims.id} posted announcement {announcement.id}")
    return ok(AnnouncementResponse.model_validate(announcement), message="Announcement created")


@router.get("/hod")
def list_my_announcements(
    include_inactive: bool = Query(False, alias="includeInactive"),
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    query = (
        db.query(Announcement)
        .options(joinedload(Announcement.batch))
        .filter(Announcement.hod_id == claims.id)
    )
    if not include_inactive:
        query = query.filter(Announcement.is_active == True)

    announcements, meta = pagination.paginate(
        query.order_by(Announcement.created_at.desc(), Announcement.id.desc())
    )
    return ok([AnnouncementResponse.model_validate(a) for a in announcements], pagination=meta)


@router.put("/hod/{announcement_id}")
def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    announcement = _get_own_announcement(db, announcement_id, claims.id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("batch_id") is not None:
        get_batch_or_404(db, changes["batch_id"])

    for field, value in changes.items():
        # department/batch may be cleared to widen the audience
        if value is None and field not in ("department", "batch_id"):
            continue
        setattr(announcement, field, value)

    db.commit()
    db.refresh(announcement)
    return ok(AnnouncementResponse.model_validate(announcement), message="Announcement updated")


@router.delete("/hod/{announcement_id}")
def delete_announcement(
    announcement_id: int,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    announcement = _get_own_announcement(db, announcement_id, claims.id)
    announcement.is_active = False
    db.commit()
    return ok(message="Announcement deleted")


@router.get("/student")
def student_announcements(
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_student),
    db: Session = Depends(get_db)
):
    """Announcements addressed to the caller, newest first"""
    student = db.query(Student).filter(Student.user_id == claims.id).first()
    if not student:
        raise NotFoundError("Student profile")

    announcements, meta = pagination.paginate(
        visible_to_student(db, student).options(joinedload(Announcement.batch))
    )
    now = datetime.utcnow()
    items = []
    for announcement in announcements:
        item = StudentAnnouncement.model_validate({
            **AnnouncementResponse.model_validate(announcement).model_dump(),
            "time_ago": time_ago(announcement.created_at, now),
            "is_new": is_new(announcement.created_at, now),
        })
        items.append(item)
    return ok(items, pagination=meta)
