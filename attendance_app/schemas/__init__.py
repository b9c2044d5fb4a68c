from .base import CamelModel
from .academic import (
    BatchSummary, BatchCreate, BatchUpdate, BatchResponse,
    SubjectSummary, SubjectCreate, SubjectUpdate, SubjectResponse,
    TeachingAssignmentCreate, TeachingAssignmentResponse
)
from .user import (
    LoginRequest, StudentSignup,
    StudentProfile, FacultyProfile, HodProfile,
    UserResponse, StudentUserResponse, FacultyUserResponse,
    StudentCreate, StudentUpdate, VerifyRequest,
    FacultyCreate, FacultyUpdate,
    serialize_user
)
from .attendance import (
    StudentMark, SessionCreate, RecordUpdate,
    UserBrief, RecordResponse, SessionResponse, SessionDetail
)
from .timetable import (
    VersionCreate, VersionUpdate, VersionResponse,
    SlotCreate, SlotBatchCreate, SlotUpdate, SlotResponse
)
from .communication import (
    AnnouncementCreate, AnnouncementUpdate, AnnouncementResponse, StudentAnnouncement,
    NotificationResponse, NotificationSend
)
from .assignment import (
    AssignmentCreate, AssignmentUpdate, AssignmentResponse,
    SubmissionCreate, GradeRequest, SubmissionResponse
)
from .syllabus import (
    TopicCreate, UnitCreate, SyllabusCreate, UnitUpdate,
    TopicResponse, UnitResponse,
    TopicProgressUpdate, ProgressUpdate, TopicProgressResponse, ProgressResponse, ProgressDetail
)

__all__ = [
    "CamelModel",
    # Academic schemas
    "BatchSummary", "BatchCreate", "BatchUpdate", "BatchResponse",
    "SubjectSummary", "SubjectCreate", "SubjectUpdate", "SubjectResponse",
    "TeachingAssignmentCreate", "TeachingAssignmentResponse",
    # User schemas
    "LoginRequest", "StudentSignup",
    "StudentProfile", "FacultyProfile", "HodProfile",
    "UserResponse", "StudentUserResponse", "FacultyUserResponse",
    "StudentCreate", "StudentUpdate", "VerifyRequest",
    "FacultyCreate", "FacultyUpdate", "serialize_user",
    # Attendance schemas
    "StudentMark", "SessionCreate", "RecordUpdate",
    "UserBrief", "RecordResponse", "SessionResponse", "SessionDetail",
    # Timetable schemas
    "VersionCreate", "VersionUpdate", "VersionResponse",
    "SlotCreate", "SlotBatchCreate", "SlotUpdate", "SlotResponse",
    # Communication schemas
    "AnnouncementCreate", "AnnouncementUpdate", "AnnouncementResponse", "StudentAnnouncement",
    "NotificationResponse", "NotificationSend",
    # Assignment schemas
    "AssignmentCreate", "AssignmentUpdate", "AssignmentResponse",
    "SubmissionCreate", "GradeRequest", "SubmissionResponse",
    # Syllabus schemas
    "TopicCreate", "UnitCreate", "SyllabusCreate", "UnitUpdate",
    "TopicResponse", "UnitResponse",
    "TopicProgressUpdate", "ProgressUpdate", "TopicProgressResponse", "ProgressResponse", "ProgressDetail",
]
