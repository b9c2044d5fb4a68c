from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..models import User, UserType, Student
from ..schemas.user import StudentCreate, StudentUpdate, StudentUserResponse, VerifyRequest
from ..core.permissions import TokenClaims, require_hod
from ..core.exceptions import NotFoundError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok
from ..services.accounts import create_student_account, ensure_roll_number_available
from ..services.academics import get_batch_or_404

router = APIRouter(prefix="/hod", tags=["hod-students"])
logger = get_logger(__name__)

USER_FIELDS = {"name", "is_active"}


def _student_query(db: Session):
    return (
        db.query(User)
        .join(Student, Student.user_id == User.id)
        .options(joinedload(User.student).joinedload(Student.batch))
        .filter(User.type == UserType.STUDENT)
    )


def _get_student_user(db: Session, user_id: int) -> User:
    user = _student_query(db).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Student", user_id)
    return user


@router.get("/students")
def list_students(
    batch_id: Optional[int] = Query(None, alias="batchId"),
    course: Optional[str] = None,
    is_verified: Optional[bool] = Query(None, alias="isVerified"),
    search: Optional[str] = None,
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Paginated student list with profile and batch"""
    query = _student_query(db)
    if batch_id is not None:
        query = query.filter(Student.batch_id == batch_id)
    if course:
        query = query.filter(Student.course == course)
    if is_verified is not None:
        query = query.filter(Student.is_verified == is_verified)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            Student.roll_number.ilike(pattern),
        ))

    users, meta = pagination.paginate(query.order_by(Student.roll_number, User.id))
    return ok([StudentUserResponse.model_validate(u) for u in users], pagination=meta)


@router.get("/students/{user_id}")
def get_student(user_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    return ok(StudentUserResponse.model_validate(_get_student_user(db, user_id)))


@router.get("/batches/{batch_id}/students")
def list_batch_students(batch_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Every student of a batch, ordered by roll number"""
    get_batch_or_404(db, batch_id)
    users = (
        _student_query(db)
        .filter(Student.batch_id == batch_id)
        .order_by(Student.roll_number)
        .all()
    )
    return ok([StudentUserResponse.model_validate(u) for u in users])


@router.post("/students", status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    try:
        user = create_student_account(
            db,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            roll_number=payload.roll_number,
            course=payload.course,
            batch_id=payload.batch_id,
            phone=payload.phone,
            is_verified=payload.is_verified,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"HOD {claims.id} created student {user.id}")
    return ok(StudentUserResponse.model_validate(_get_student_user(db, user.id)), message="Student created")


@router.put("/students/{user_id}")
def update_student(
    user_id: int,
    payload: StudentUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Partial update; only the fields sent are changed"""
    user = _get_student_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("roll_number") and changes["roll_number"] != user.student.roll_number:
        ensure_roll_number_available(db, changes["roll_number"], exclude_student_id=user.student.id)
    if changes.get("batch_id") is not None:
        get_batch_or_404(db, changes["batch_id"])

    for field, value in changes.items():
        if field in USER_FIELDS:
            if value is not None:
                setattr(user, field, value)
        elif field == "batch_id" or value is not None:
            setattr(user.student, field, value)

    db.commit()
    return ok(StudentUserResponse.model_validate(_get_student_user(db, user_id)), message="Student updated")


@router.patch("/students/{user_id}/verify")
def verify_student(
    user_id: int,
    payload: VerifyRequest,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Approve (or revoke approval of) a student account"""
    user = _get_student_user(db, user_id)
    user.student.is_verified = payload.is_verified
    db.commit()

    logger.info(f"HOD {claims.id} set verified={payload.is_verified} on student {user_id}")
    message = "Student verified" if payload.is_verified else "Student verification revoked"
    return ok(StudentUserResponse.model_validate(_get_student_user(db, user_id)), message=message)


@router.delete("/students/{user_id}")
def deactivate_student(user_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Soft delete; attendance history stays intact"""
    user = _get_student_user(db, user_id)
    user.is_active = False
    db.commit()
    return ok(message="Student deactivated")
