from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from ..database import get_db
from ..models.user import User, UserType
from .exceptions import MissingTokenError, InvalidTokenError, AuthorizationError
from .security import decode_token

security = HTTPBearer(auto_error=False)


class TokenClaims(BaseModel):
    """What a verified token tells a handler about its caller"""
    id: int
    email: str
    role: UserType


def get_current_claims(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> TokenClaims:
    """Get the claims of the caller from the Authorization header, any role."""
    if not credentials or not credentials.credentials:
        raise MissingTokenError()

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise InvalidTokenError()

    try:
        claims = TokenClaims(
            id=payload.get("id"),
            email=payload.get("email"),
            role=payload.get("role"),
        )
    except PydanticValidationError:
        raise InvalidTokenError("Malformed token")

    user = db.query(User).filter(User.id == claims.id).first()
    if user is None or not user.is_active:
        raise InvalidTokenError("User no longer exists or is inactive")

    return claims


def require_role(required_role: UserType):
    """Dependency factory that only lets tokens of one role through"""
    def role_checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role != required_role:
            raise AuthorizationError(f"{required_role.value} access required")
        return claims
    return role_checker


require_student = require_role(UserType.STUDENT)
require_faculty = require_role(UserType.FACULTY)
require_hod = require_role(UserType.HOD)
