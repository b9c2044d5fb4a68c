"""
Notification fan-out.

These helpers only add rows to the caller's session; the caller commits, so a
notification burst lands in the same transaction as the event that caused it.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.logging_config import get_logger
from ..models import Notification, NotificationType, Student, User
from ..models.assignment import Assignment, AssignmentSubmission

logger = get_logger(__name__)


def create_notification(
    db: Session,
    user_id: int,
    title: str,
    message: str,
    type: NotificationType = NotificationType.GENERAL,
    sender_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        sender_id=sender_id,
        extra_data=metadata,
    )
    db.add(notification)
    return notification


def create_bulk_notifications(
    db: Session,
    user_ids: Iterable[int],
    title: str,
    message: str,
    type: NotificationType = NotificationType.GENERAL,
    sender_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> List[Notification]:
    """One row per distinct recipient"""
    notifications = [
        Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            sender_id=sender_id,
            extra_data=metadata,
        )
        for user_id in dict.fromkeys(user_ids)
    ]
    db.add_all(notifications)
    logger.info(f"Queued {len(notifications)} '{type.value}' notifications")
    return notifications


def batch_student_ids(db: Session, batch_ids: Iterable[int]) -> List[int]:
    """User ids of active, verified students in the given batches"""
    rows = (
        db.query(User.id)
        .join(Student, Student.user_id == User.id)
        .filter(
            Student.batch_id.in_(list(batch_ids)),
            Student.is_verified == True,
            User.is_active == True,
        )
        .order_by(User.id)
        .all()
    )
    return [row[0] for row in rows]


def notify_students_about_assignment(db: Session, assignment: Assignment) -> List[Notification]:
    student_ids = batch_student_ids(db, [assignment.batch_id])
    due = assignment.due_date.strftime("%d %b %Y %H:%M")
    return create_bulk_notifications(
        db,
        student_ids,
        title=f"New assignment: {assignment.title}",
        message=f"{assignment.subject.name}: due {due}",
        type=NotificationType.ASSIGNMENT,
        sender_id=assignment.faculty_id,
        metadata={"assignmentId": assignment.id, "subjectId": assignment.subject_id},
    )


def notify_student_about_grade(db: Session, submission: AssignmentSubmission) -> Notification:
    assignment = submission.assignment
    return create_notification(
        db,
        submission.student_id,
        title=f"Assignment graded: {assignment.title}",
        message=f"You scored {submission.marks}/{assignment.total_marks}",
        type=NotificationType.ASSIGNMENT,
        sender_id=submission.graded_by,
        metadata={"assignmentId": assignment.id, "submissionId": submission.id},
    )
