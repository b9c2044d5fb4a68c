from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from ..database import get_db
from ..models.user import User, UserType
from ..schemas.user import LoginRequest, StudentSignup, serialize_user
from ..core.security import verify_password, create_user_token
from ..core.permissions import TokenClaims, get_current_claims
from ..core.exceptions import InvalidCredentialsError, AuthorizationError, NotFoundError
from ..core.logging_config import get_logger
from ..core.pagination import ok
from ..services.accounts import create_student_account
from ..config import settings

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = get_logger(__name__)


def _login(db: Session, credentials: LoginRequest, role: UserType) -> dict:
    user = db.query(User).filter(User.email == credentials.email, User.type == role).first()

    if not user or not user.is_active or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed {role.value} login for {credentials.email}")
        raise InvalidCredentialsError()

    if role == UserType.STUDENT and not (user.student and user.student.is_verified):
        logger.warning(f"Unverified student login attempt: {credentials.email}")
        raise AuthorizationError(
            "Account is pending verification by the HOD",
            code="ACCOUNT_NOT_VERIFIED",
        )

    token = create_user_token(user.id, user.email, user.type.value)
    logger.info(f"{role.value} login: user {user.id}")

    return ok(
        {
            "token": token,
            "tokenType": "bearer",
            "expiresIn": settings.access_token_expire_minutes * 60,
            "user": serialize_user(user),
        },
        message="Login successful",
    )


@router.post("/student/login")
def student_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Login as a verified student"""
    return _login(db, credentials, UserType.STUDENT)


@router.post("/faculty/login")
def faculty_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Login as faculty"""
    return _login(db, credentials, UserType.FACULTY)


@router.post("/hod/login")
def hod_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Login as head of department"""
    return _login(db, credentials, UserType.HOD)


@router.post("/student/signup", status_code=status.HTTP_201_CREATED)
def student_signup(payload: StudentSignup, db: Session = Depends(get_db)):
    """Self-registration; the account stays unverified until the HOD approves it"""
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
            is_verified=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info(f"Student signup: user {user.id} ({user.student.roll_number})")
    return ok(serialize_user(user), message="Registration successful. Await HOD verification before logging in.")


@router.get("/me")
def get_current_user_info(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    """Get current user information with role profile"""
    user = db.query(User).filter(User.id == claims.id).first()
    if not user:
        raise NotFoundError("User", claims.id)
    return ok(serialize_user(user))
