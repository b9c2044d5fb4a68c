from pydantic import BeforeValidator, EmailStr, Field, field_validator
from typing import Annotated, Optional
from datetime import datetime

from ..models.user import UserType
from .base import CamelModel
from .academic import BatchSummary, _strip


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


# Auth schemas
class LoginRequest(CamelModel):
    email: NormalizedEmail
    password: str = Field(..., min_length=1)


class StudentSignup(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: NormalizedEmail
    password: str = Field(..., min_length=6)
    roll_number: str = Field(..., min_length=1, max_length=50)
    course: str = Field(..., min_length=1, max_length=100)
    batch_id: Optional[int] = None
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("name", "roll_number", "course")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return _strip(value)


# Profile schemas
class StudentProfile(CamelModel):
    id: int
    roll_number: str
    course: str
    batch_id: Optional[int] = None
    phone: Optional[str] = None
    is_verified: bool
    batch: Optional[BatchSummary] = None


class FacultyProfile(CamelModel):
    id: int
    phone: Optional[str] = None
    department: str
    is_hod: bool


class HodProfile(CamelModel):
    id: int
    phone: Optional[str] = None
    department: str


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    type: UserType
    is_active: bool
    created_at: Optional[datetime] = None


class StudentUserResponse(UserResponse):
    student: Optional[StudentProfile] = None


class FacultyUserResponse(UserResponse):
    faculty: Optional[FacultyProfile] = None


# HOD student management
class StudentCreate(StudentSignup):
    is_verified: bool = True


class StudentUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    course: Optional[str] = Field(None, min_length=1, max_length=100)
    batch_id: Optional[int] = None
    roll_number: Optional[str] = Field(None, min_length=1, max_length=50)
    is_active: Optional[bool] = None

    @field_validator("name", "course", "roll_number")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _strip(value)


class VerifyRequest(CamelModel):
    is_verified: bool = True


# HOD faculty management
class FacultyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: NormalizedEmail
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, max_length=20)
    department: str = Field(..., min_length=1, max_length=100)

    @field_validator("name", "department")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return _strip(value)


class FacultyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("name", "department")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _strip(value)


_PROFILE_SCHEMAS = {
    UserType.STUDENT: ("student", StudentProfile),
    UserType.FACULTY: ("faculty", FacultyProfile),
    UserType.HOD: ("hod", HodProfile),
}


def serialize_user(user) -> dict:
    """User fields plus the role profile under `profile`, as returned by login and /auth/me"""
    data = UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)
    attr, schema = _PROFILE_SCHEMAS[user.type]
    profile = getattr(user, attr)
    data["profile"] = schema.model_validate(profile).model_dump(mode="json", by_alias=True) if profile else None
    return data
