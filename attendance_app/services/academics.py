from sqlalchemy.orm import Session

from ..core.exceptions import AuthorizationError, NotFoundError
from ..models import Batch, FacultyBatchSubject


def get_batch_or_404(db: Session, batch_id: int) -> Batch:
    batch = db.query(Batch).filter(Batch.id == batch_id).first()
    if not batch:
        raise NotFoundError("Batch", batch_id)
    return batch


def ensure_teaches(db: Session, faculty_id: int, batch_id: int, subject_id: int) -> FacultyBatchSubject:
    """The faculty's active assignment for (batch, subject), or 403"""
    assignment = db.query(FacultyBatchSubject).filter(
        FacultyBatchSubject.faculty_id == faculty_id,
        FacultyBatchSubject.batch_id == batch_id,
        FacultyBatchSubject.subject_id == subject_id,
        FacultyBatchSubject.is_active == True,
    ).first()
    if not assignment:
        raise AuthorizationError("You are not assigned to teach this subject to this batch")
    return assignment
