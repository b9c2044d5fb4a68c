from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from ..database import get_db
from ..models import (
    User, Student, Subject, Assignment, AssignmentSubmission, AssignmentStatus, SubmissionStatus,
)
from ..schemas.assignment import (
    AssignmentCreate, AssignmentUpdate, AssignmentResponse,
    SubmissionCreate, GradeRequest, SubmissionResponse,
)
from ..core.permissions import TokenClaims, require_faculty, require_student, require_hod
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..core.pagination import ok
from ..services.academics import ensure_teaches
from ..services.notifications import notify_students_about_assignment, notify_student_about_grade

router = APIRouter(prefix="/assignments", tags=["assignments"])
logger = get_logger(__name__)


def _assignment_query(db: Session):
    return db.query(Assignment).options(
        joinedload(Assignment.subject),
        joinedload(Assignment.batch),
    )


def _get_assignment(db: Session, assignment_id: int) -> Assignment:
    assignment = _assignment_query(db).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFoundError("Assignment", assignment_id)
    return assignment


def _get_own_assignment(db: Session, assignment_id: int, faculty_id: int) -> Assignment:
    assignment = _get_assignment(db, assignment_id)
    if assignment.faculty_id != faculty_id:
        raise AuthorizationError("You can only manage your own assignments")
    return assignment


def _submission_counts(db: Session, assignment_ids: List[int]) -> Dict[int, dict]:
    graded = func.sum(case((AssignmentSubmission.status == SubmissionStatus.GRADED, 1), else_=0))
    rows = (
        db.query(AssignmentSubmission.assignment_id, func.count(AssignmentSubmission.id), graded)
        .filter(AssignmentSubmission.assignment_id.in_(assignment_ids))
        .group_by(AssignmentSubmission.assignment_id)
        .all()
    )
    return {
        assignment_id: {"submissionCount": total, "gradedCount": graded_count or 0}
        for assignment_id, total, graded_count in rows
    }


def _with_counts(assignment: Assignment, counts: Dict[int, dict]) -> dict:
    data = AssignmentResponse.model_validate(assignment).model_dump(mode="json", by_alias=True)
    data.update(counts.get(assignment.id, {"submissionCount": 0, "gradedCount": 0}))
    return data


def _student_profile(db: Session, user_id: int) -> Student:
    student = db.query(Student).filter(Student.user_id == user_id).first()
    if not student:
        raise NotFoundError("Student profile")
    return student


def _student_view(assignment: Assignment, submission: Optional[AssignmentSubmission], now: datetime) -> dict:
    data = AssignmentResponse.model_validate(assignment).model_dump(mode="json", by_alias=True)
    data["submission"] = (
        SubmissionResponse.model_validate(submission).model_dump(mode="json", by_alias=True)
        if submission else None
    )
    data["isOverdue"] = submission is None and assignment.due_date < now
    return data


# ============================================
# Faculty
# ============================================

@router.get("/faculty/my-assignments")
def my_assignments(claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    assignments = (
        _assignment_query(db)
        .filter(Assignment.faculty_id == claims.id)
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .all()
    )
    counts = _submission_counts(db, [a.id for a in assignments])
    return ok([_with_counts(a, counts) for a in assignments])


@router.post("/faculty", status_code=status.HTTP_201_CREATED)
def create_assignment(payload: AssignmentCreate, claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    """Create an assignment and notify every student of the batch in the same transaction"""
    ensure_teaches(db, claims.id, payload.batch_id, payload.subject_id)

    assignment = Assignment(**payload.model_dump(), faculty_id=claims.id)
    try:
        db.add(assignment)
        db.flush()
        notified = []
        if assignment.status == AssignmentStatus.PUBLISHED:
            notified = notify_students_about_assignment(db, assignment)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Faculty {claims.id} created assignment {assignment.id}, notified {len(notified)} students")
    return ok(
        {"assignment": AssignmentResponse.model_validate(_get_assignment(db, assignment.id)), "notifiedCount": len(notified)},
        message="Assignment created",
    )


@router.put("/faculty/{assignment_id}")
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    assignment = _get_own_assignment(db, assignment_id, claims.id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in ("instructions", "attachment_url"):
            continue
        setattr(assignment, field, value)

    db.commit()
    return ok(AssignmentResponse.model_validate(_get_assignment(db, assignment_id)), message="Assignment updated")


@router.get("/faculty/{assignment_id}/submissions")
def assignment_submissions(assignment_id: int, claims: TokenClaims = Depends(require_faculty), db: Session = Depends(get_db)):
    """Every student of the batch with their submission, or NOT_SUBMITTED"""
    assignment = _get_own_assignment(db, assignment_id, claims.id)

    students = (
        db.query(User)
        .join(Student, Student.user_id == User.id)
        .options(joinedload(User.student))
        .filter(Student.batch_id == assignment.batch_id, Student.is_verified == True, User.is_active == True)
        .order_by(Student.roll_number)
        .all()
    )
    submissions = {
        s.student_id: s for s in db.query(AssignmentSubmission)
        .filter(AssignmentSubmission.assignment_id == assignment_id)
        .all()
    }

    items = []
    for user in students:
        submission = submissions.get(user.id)
        items.append({
            "studentId": user.id,
            "name": user.name,
            "rollNumber": user.student.roll_number,
            "status": submission.status.value if submission else "NOT_SUBMITTED",
            "submission": SubmissionResponse.model_validate(submission) if submission else None,
        })

    return ok({
        "assignment": AssignmentResponse.model_validate(assignment),
        "submissions": items,
        "submittedCount": sum(1 for item in items if item["submission"] is not None),
        "totalStudents": len(items),
    })


@router.put("/faculty/submissions/{submission_id}/grade")
def grade_submission(
    submission_id: int,
    payload: GradeRequest,
    claims: TokenClaims = Depends(require_faculty),
    db: Session = Depends(get_db)
):
    submission = (
        db.query(AssignmentSubmission)
        .options(joinedload(AssignmentSubmission.assignment))
        .filter(AssignmentSubmission.id == submission_id)
        .first()
    )
    if not submission:
        raise NotFoundError("Submission", submission_id)
    if submission.assignment.faculty_id != claims.id:
        raise AuthorizationError("You can only grade submissions for your own assignments")
    if payload.marks > submission.assignment.total_marks:
        raise ValidationError(
            f"marks must be between 0 and {submission.assignment.total_marks}",
            field="marks",
        )

    submission.marks = payload.marks
    submission.feedback = payload.feedback
    submission.status = SubmissionStatus.GRADED
    submission.graded_by = claims.id
    submission.graded_at = datetime.utcnow()
    try:
        notify_student_about_grade(db, submission)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(submission)
    return ok(SubmissionResponse.model_validate(submission), message="Submission graded")


# ============================================
# Student
# ============================================

@router.get("/student")
def student_assignments(claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    """Published assignments of the caller's batch with their own submission"""
    student = _student_profile(db, claims.id)
    if student.batch_id is None:
        return ok([])

    assignments = (
        _assignment_query(db)
        .filter(Assignment.batch_id == student.batch_id, Assignment.status == AssignmentStatus.PUBLISHED)
        .order_by(Assignment.due_date, Assignment.id)
        .all()
    )
    submissions = {
        s.assignment_id: s for s in db.query(AssignmentSubmission)
        .filter(
            AssignmentSubmission.student_id == claims.id,
            AssignmentSubmission.assignment_id.in_([a.id for a in assignments]),
        )
        .all()
    }
    now = datetime.utcnow()
    return ok([_student_view(a, submissions.get(a.id), now) for a in assignments])


def _assignment_for_student(db: Session, assignment_id: int, student: Student) -> Assignment:
    assignment = _get_assignment(db, assignment_id)
    if assignment.status == AssignmentStatus.DRAFT:
        raise NotFoundError("Assignment", assignment_id)
    if assignment.batch_id != student.batch_id:
        raise AuthorizationError("This assignment is not for your batch")
    return assignment


@router.get("/student/{assignment_id}")
def student_assignment_detail(assignment_id: int, claims: TokenClaims = Depends(require_student), db: Session = Depends(get_db)):
    student = _student_profile(db, claims.id)
    assignment = _assignment_for_student(db, assignment_id, student)
    submission = db.query(AssignmentSubmission).filter(
        AssignmentSubmission.assignment_id == assignment_id,
        AssignmentSubmission.student_id == claims.id,
    ).first()
    return ok(_student_view(assignment, submission, datetime.utcnow()))


@router.post("/student/{assignment_id}/submit", status_code=status.HTTP_201_CREATED)
def submit_assignment(
    assignment_id: int,
    payload: SubmissionCreate,
    claims: TokenClaims = Depends(require_student),
    db: Session = Depends(get_db)
):
    """Submit, or resubmit until the submission has been graded"""
    student = _student_profile(db, claims.id)
    assignment = _assignment_for_student(db, assignment_id, student)
    if assignment.status == AssignmentStatus.CLOSED:
        raise ValidationError("Assignment is closed for submissions")
    if not (payload.content or payload.attachment_url):
        raise ValidationError("Submission needs content or an attachment", field="content")

    now = datetime.utcnow()
    submission_status = SubmissionStatus.LATE_SUBMISSION if now > assignment.due_date else SubmissionStatus.SUBMITTED

    submission = db.query(AssignmentSubmission).filter(
        AssignmentSubmission.assignment_id == assignment_id,
        AssignmentSubmission.student_id == claims.id,
    ).first()
    if submission and submission.status == SubmissionStatus.GRADED:
        raise ConflictError("Submission has already been graded")

    if submission is None:
        submission = AssignmentSubmission(assignment_id=assignment_id, student_id=claims.id)
        db.add(submission)
    submission.content = payload.content
    submission.attachment_url = payload.attachment_url
    submission.submitted_at = now
    submission.status = submission_status
    db.commit()
    db.refresh(submission)

    message = "Submitted after the due date" if submission_status == SubmissionStatus.LATE_SUBMISSION else "Submitted"
    return ok(SubmissionResponse.model_validate(submission), message=message)


# ============================================
# HOD
# ============================================

@router.get("/hod")
def all_assignments(
    department: Optional[str] = None,
    claims: TokenClaims = Depends(require_hod),
    db: Session = Depends(get_db)
):
    query = _assignment_query(db).join(Subject, Assignment.subject_id == Subject.id)
    if department and department.lower() != "all":
        query = query.filter(Subject.department == department)

    assignments = query.order_by(Assignment.created_at.desc(), Assignment.id.desc()).all()
    counts = _submission_counts(db, [a.id for a in assignments])
    return ok([_with_counts(a, counts) for a in assignments])
