"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .academic import ClassGroup, Student, ClassMembership, EntityStatus
from .attendance_session import AttendanceSession, SessionStatus
from .attendance import AttendanceRecord, AttendanceStatus, AttendanceSource

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'ClassGroup', 'Student', 'ClassMembership', 'EntityStatus',
    'AttendanceSession', 'SessionStatus',
    'AttendanceRecord', 'AttendanceStatus', 'AttendanceSource'
]
