from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..models import User, UserType, Faculty, Subject, FacultyBatchSubject
from ..schemas.user import FacultyCreate, FacultyUpdate, FacultyUserResponse
from ..schemas.academic import TeachingAssignmentCreate, TeachingAssignmentResponse
from ..core.permissions import TokenClaims, require_hod
from ..core.exceptions import NotFoundError, ConflictError
from ..core.logging_config import get_logger
from ..core.pagination import PaginationParams, ok
from ..services.accounts import create_faculty_account
from ..services.academics import get_batch_or_404

router = APIRouter(prefix="/hod", tags=["hod-faculty"])
logger = get_logger(__name__)


def _faculty_query(db: Session):
    return (
        db.query(User)
        .join(Faculty, Faculty.user_id == User.id)
        .options(joinedload(User.faculty))
        .filter(User.type == UserType.FACULTY)
    )


def _get_faculty_user(db: Session, user_id: int) -> User:
    user = _faculty_query(db).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Faculty", user_id)
    return user


def _assignment_query(db: Session):
    return db.query(FacultyBatchSubject).options(
        joinedload(FacultyBatchSubject.subject),
        joinedload(FacultyBatchSubject.batch),
    )


@router.get("/faculty")
def list_faculty(
    department: Optional[str] = None,
    pagination: PaginationParams = Depends(),
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Active faculty ordered by name; department=all disables the filter"""
    query = _faculty_query(db).filter(User.is_active == True)
    if department and department.lower() != "all":
        query = query.filter(Faculty.department == department)

    users, meta = pagination.paginate(query.order_by(User.name, User.id))
    return ok([FacultyUserResponse.model_validate(u) for u in users], pagination=meta)


@router.get("/faculty/{user_id}")
def get_faculty(user_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    return ok(FacultyUserResponse.model_validate(_get_faculty_user(db, user_id)))


@router.post("/faculty", status_code=status.HTTP_201_CREATED)
def create_faculty(payload: FacultyCreate, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    try:
        user = create_faculty_account(
            db,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            department=payload.department,
            phone=payload.phone,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"HOD {claims.id} created faculty {user.id}")
    return ok(FacultyUserResponse.model_validate(_get_faculty_user(db, user.id)), message="Faculty created")


@router.put("/faculty/{user_id}")
def update_faculty(
    user_id: int,
    payload: FacultyUpdate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    user = _get_faculty_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "name" in changes:
        user.name = changes.pop("name")
    for field, value in changes.items():
        setattr(user.faculty, field, value)

    db.commit()
    return ok(FacultyUserResponse.model_validate(_get_faculty_user(db, user_id)), message="Faculty updated")


@router.delete("/faculty/{user_id}")
def deactivate_faculty(user_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Soft delete; sessions and timetable slots keep pointing at the user"""
    user = _get_faculty_user(db, user_id)
    user.is_active = False
    db.commit()
    return ok(message="Faculty deactivated")


@router.get("/faculty/{user_id}/assignments")
def list_faculty_assignments(user_id: int, claims: TokenClaims = Depends(require_hod), db: Session = Depends(get_db)):
    """Teaching assignments of one faculty member"""
    _get_faculty_user(db, user_id)
    assignments = (
        _assignment_query(db)
        .filter(FacultyBatchSubject.faculty_id == user_id)
        .order_by(FacultyBatchSubject.is_active.desc(), FacultyBatchSubject.id)
        .all()
    )
    return ok([TeachingAssignmentResponse.model_validate(a) for a in assignments])


@router.post("/teaching-assignments", status_code=status.HTTP_201_CREATED)
def create_teaching_assignment(
    payload: TeachingAssignmentCreate,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    """Assign a faculty member to teach a subject to a batch, reactivating an old assignment if one exists"""
    _get_faculty_user(db, payload.faculty_id)
    get_batch_or_404(db, payload.batch_id)
    if not db.query(Subject).filter(Subject.id == payload.subject_id).first():
        raise NotFoundError("Subject", payload.subject_id)

    assignment = db.query(FacultyBatchSubject).filter(
        FacultyBatchSubject.faculty_id == payload.faculty_id,
        FacultyBatchSubject.batch_id == payload.batch_id,
        FacultyBatchSubject.subject_id == payload.subject_id,
    ).first()

    if assignment and assignment.is_active:
        raise ConflictError("Faculty is already assigned to this batch and subject")
    if assignment:
        assignment.is_active = True
    else:
        assignment = FacultyBatchSubject(
            faculty_id=payload.faculty_id,
            batch_id=payload.batch_id,
            subject_id=payload.subject_id,
        )
        db.add(assignment)

    db.commit()
    assignment = _assignment_query(db).filter(FacultyBatchSubject.id == assignment.id).first()
    return ok(TeachingAssignmentResponse.model_validate(assignment), message="Teaching assignment created")


@router.delete("/teaching-assignments/{assignment_id}")
def deactivate_teaching_assignment(
    assignment_id: int,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    assignment = db.query(FacultyBatchSubject).filter(FacultyBatchSubject.id == assignment_id).first()
    if not assignment:
        raise NotFoundError("Teaching assignment", assignment_id)
    assignment.is_active = False
    db.commit()
    return ok(message="Teaching assignment removed")
