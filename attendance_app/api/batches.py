from typing import Dict, Iterable, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Batch, Student
from ..schemas.academic import BatchCreate, BatchUpdate, BatchResponse
from ..core.permissions import TokenClaims, require_hod
from ..core.exceptions import ConflictError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok
from ..services.academics import get_batch_or_404

router = APIRouter(prefix="/hod/batches", tags=["hod-batches"])
logger = get_logger(__name__)


def _student_counts(db: Session, batch_ids: Iterable[int]) -> Dict[int, int]:
    rows = (
        db.query(Student.batch_id, func.count(Student.id))
        .filter(Student.batch_id.in_(list(batch_ids)))
        .group_by(Student.batch_id)
        .all()
    )
    return {batch_id: count for batch_id, count in rows}


def _with_count(batch: Batch, counts: Dict[int, int]) -> BatchResponse:
    response = BatchResponse.model_validate(batch)
    response.student_count = counts.get(batch.id, 0)
    return response


def _ensure_unique(db: Session, batch_name: str, course: str, exclude_id: Optional[int] = None) -> None:
    """At most one active batch per (name, course)"""
    query = db.query(Batch).filter(
        Batch.batch_name == batch_name,
        Batch.course == course,
        Batch.is_active == True,
    )
    if exclude_id is not None:
        query = query.filter(Batch.id != exclude_id)
    if query.first():
        raise ConflictError(
            f"Active batch '{batch_name}' already exists for {course}",
            details={"BatchName": batch_name, "course": course},
        )


@router.get("")
def list_batches(
    course: Optional[str] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    query = db.query(Batch)
    if course:
        query = query.filter(Batch.course == course)
    if is_active is not None:
        query = query.filter(Batch.is_active == is_active)

    batches, meta = pagination.paginate(query.order_by(Batch.batch_name.desc(), Batch.id))
    counts = _student_counts(db, [b.id for b in batches])
    return ok([_with_count(b, counts) for b in batches], pagination=meta)


@router.get("/{batch_id}")
def get_batch(batch_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    batch = get_batch_or_404(db, batch_id)
    return ok(_with_count(batch, _student_counts(db, [batch.id])))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_batch(payload: BatchCreate, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    _ensure_unique(db, payload.batch_name, payload.course)

    batch = Batch(
        batch_name=payload.batch_name,
        course=payload.course,
        current_semester=payload.current_semester,
    )
    db.add(batch)
    db.commit()
    db.refresh(batch)

    logger.info(f"HOD {claims.id} created batch {batch.id} ({batch.batch_name}, {batch.course})")
    return ok(_with_count(batch, {}), message="Batch created")


@router.put("/{batch_id}")
def update_batch(
    batch_id: int,
    payload: BatchUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    batch = get_batch_or_404(db, batch_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    name = changes.get("batch_name", batch.batch_name)
    course = changes.get("course", batch.course)
    becomes_active = changes.get("is_active", batch.is_active)
    if becomes_active and (name, course, True) != (batch.batch_name, batch.course, batch.is_active):
        _ensure_unique(db, name, course, exclude_id=batch.id)

    for field, value in changes.items():
        setattr(batch, field, value)

    db.commit()
    db.refresh(batch)
    return ok(_with_count(batch, _student_counts(db, [batch.id])), message="Batch updated")


@router.delete("/{batch_id}")
def deactivate_batch(batch_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Soft delete; students keep their batch reference"""
    batch = get_batch_or_404(db, batch_id)
    batch.is_active = False
    db.commit()
    return ok(message="Batch deactivated")
