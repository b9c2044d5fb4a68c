from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Notification, NotificationType, User, Student, Faculty
from ..schemas.communication import NotificationResponse, NotificationSend
from ..core.permissions import TokenClaims, get_current_claims, require_hod
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok
from ..services.notifications import create_bulk_notifications, batch_student_ids

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = get_logger(__name__)


@router.get("/my-notifications")
def my_notifications(
    type: Optional[NotificationType] = None,
    is_read: Optional[bool] = Query(None, alias="isRead"),
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db)
):
    query = db.query(Notification).filter(Notification.user_id == claims.id)
    if type is not None:
        query = query.filter(Notification.type == type)
    if is_read is not None:
        query = query.filter(Notification.is_read == is_read)

    notifications, meta = pagination.paginate(
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    unread = (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == claims.id, Notification.is_read == False)
        .scalar()
    )
    return ok(
        [NotificationResponse.model_validate(n) for n in notifications],
        pagination=meta,
        unreadCount=unread,
    )


@router.put("/mark-all-read")
def mark_all_read(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == claims.id, Notification.is_read == False)
        .update({Notification.is_read: True, Notification.read_at: datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    return ok({"updatedCount": updated}, message=f"{updated} notifications marked as read")


@router.put("/{notification_id}/read")
def mark_read(notification_id: int, claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == claims.id,
    ).first()
    if not notification:
        raise NotFoundError("Notification", notification_id)

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        db.refresh(notification)
    return ok(NotificationResponse.model_validate(notification))


@router.get("/stats")
def notification_stats(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    counts = dict(
        db.query(Notification.is_read, func.count(Notification.id))
        .filter(Notification.user_id == claims.id)
        .group_by(Notification.is_read)
        .all()
    )
    unread = counts.get(False, 0)
    read = counts.get(True, 0)
    return ok({"unread": unread, "read": read, "total": unread + read})


@router.post("/hod/send", status_code=status.HTTP_201_CREATED)
def send_notification(payload: NotificationSend, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Broadcast to explicit users, every student of some batches, or a whole department"""
    recipients = []
    if payload.recipients:
        rows = db.query(User.id).filter(User.id.in_(payload.recipients), User.is_active == True).all()
        recipients.extend(row[0] for row in rows)
    if payload.batch_ids:
        recipients.extend(batch_student_ids(db, payload.batch_ids))
    if payload.department:
        faculty_rows = (
            db.query(User.id)
            .join(Faculty, Faculty.user_id == User.id)
            .filter(Faculty.department == payload.department, User.is_active == True)
            .all()
        )
        student_rows = (
            db.query(User.id)
            .join(Student, Student.user_id == User.id)
            .filter(Student.course == payload.department, Student.is_verified == True, User.is_active == True)
            .all()
        )
        recipients.extend(row[0] for row in faculty_rows + student_rows)

    recipients = [user_id for user_id in dict.fromkeys(recipients) if user_id != claims.id]
    if not recipients:
        raise ValidationError("No recipients matched the given target", field="recipients")

    notifications = create_bulk_notifications(
        db,
        recipients,
        title=payload.title,
        message=payload.message,
        type=payload.type,
        sender_id=claims.id,
    )
    db.commit()

    logger.info(f"HOD {claims.id} sent '{payload.title}' to {len(notifications)} users")
    return ok({"sentCount": len(notifications)}, message="Notification sent")
