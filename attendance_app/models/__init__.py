from ..database import Base
from .user import User, UserType, Student, Faculty, Hod
from .academic import Batch, Subject, FacultyBatchSubject
from .attendance import AttendanceSession, AttendanceRecord, AttendanceStatus, SessionType
from .timetable import TimetableVersion, TimetableSlot
from .communication import Announcement, Notification, NotificationType
from .assignment import Assignment, AssignmentSubmission, AssignmentStatus, SubmissionStatus
from .syllabus import SyllabusUnit, SyllabusTopic, SyllabusProgress, SyllabusTopicProgress, ProgressStatus

__all__ = [
    "Base",
    # Accounts
    "User",
    "UserType",
    "Student",
    "Faculty",
    "Hod",
    # Academic structure
    "Batch",
    "Subject",
    "FacultyBatchSubject",
    # Attendance
    "AttendanceSession",
    "AttendanceRecord",
    "AttendanceStatus",
    "SessionType",
    # Timetable
    "TimetableVersion",
    "TimetableSlot",
    # Communication
    "Announcement",
    "Notification",
    "NotificationType",
    # Coursework
    "Assignment",
    "AssignmentSubmission",
    "AssignmentStatus",
    "SubmissionStatus",
    # Syllabus
    "SyllabusUnit",
    "SyllabusTopic",
    "SyllabusProgress",
    "SyllabusTopicProgress",
    "ProgressStatus",
]
