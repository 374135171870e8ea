"""Database models package."""

from edurank.models.attendance import AttendanceRecord, AttendanceStatus
from edurank.models.audit import AuditAction, AuditLog
from edurank.models.homework import HomeworkStatus, HomeworkTask
from edurank.models.school import SchoolConfig
from edurank.models.student import Student
from edurank.models.user import STAFF_ROLES, Role, TeachingAssignment, User

__all__ = [
    # School
    "SchoolConfig",
    # User
    "User",
    "Role",
    "STAFF_ROLES",
    "TeachingAssignment",
    # Student
    "Student",
    # Attendance
    "AttendanceRecord",
    "AttendanceStatus",
    # Homework
    "HomeworkTask",
    "HomeworkStatus",
    # Audit
    "AuditLog",
    "AuditAction",
]
