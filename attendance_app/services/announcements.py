from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, Query

from ..models import Announcement, Student

NEW_WINDOW = timedelta(hours=24)


def visible_to_student(db: Session, student: Student) -> Query:
    """Active announcements a student may see.

    Visible when the announcement targets everyone, targets the student's
    course (department) without a batch, or targets the student's batch.
    """
    audience = [
        and_(Announcement.department.is_(None), Announcement.batch_id.is_(None)),
        and_(Announcement.department == student.course, Announcement.batch_id.is_(None)),
    ]
    if student.batch_id is not None:
        audience.append(Announcement.batch_id == student.batch_id)

    return (
        db.query(Announcement)
        .filter(Announcement.is_active == True, or_(*audience))
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
    )


def time_ago(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    if created_at is None:
        return "just now"
    now = now or datetime.utcnow()
    seconds = int((now - created_at).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    if days < 30:
        return f"{days} day{'s' if days != 1 else ''} ago"
    return created_at.strftime("%d %b %Y")


def is_new(created_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if created_at is None:
        return True
    now = now or datetime.utcnow()
    return now - created_at < NEW_WINDOW
