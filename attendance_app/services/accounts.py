from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError
from ..core.security import get_password_hash
from ..models import Faculty, Student, User, UserType
from .academics import get_batch_or_404


def ensure_email_available(db: Session, email: str) -> None:
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered", details={"field": "email"})


def ensure_roll_number_available(db: Session, roll_number: str, exclude_student_id: Optional[int] = None) -> None:
    query = db.query(Student).filter(Student.roll_number == roll_number)
    if exclude_student_id is not None:
        query = query.filter(Student.id != exclude_student_id)
    if query.first():
        raise ConflictError("Roll number already registered", details={"field": "rollNumber"})


def create_student_account(
    db: Session,
    name: str,
    email: str,
    password: str,
    roll_number: str,
    course: str,
    batch_id: Optional[int] = None,
    phone: Optional[str] = None,
    is_verified: bool = False,
) -> User:
    """Add a User+Student pair to the session; the caller commits both together."""
    ensure_email_available(db, email)
    ensure_roll_number_available(db, roll_number)
    if batch_id is not None:
        get_batch_or_404(db, batch_id)

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        type=UserType.STUDENT,
    )
    user.student = Student(
        roll_number=roll_number,
        course=course,
        batch_id=batch_id,
        phone=phone,
        is_verified=is_verified,
    )
    db.add(user)
    db.flush()
    return user


def create_faculty_account(
    db: Session,
    name: str,
    email: str,
    password: str,
    department: str,
    phone: Optional[str] = None,
) -> User:
    """Add a User+Faculty pair to the session; the caller commits both together."""
    ensure_email_available(db, email)

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        type=UserType.FACULTY,
    )
    user.faculty = Faculty(department=department, phone=phone)
    db.add(user)
    db.flush()
    return user
