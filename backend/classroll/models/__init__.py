"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .classroom import SchoolClass, ClassEnrollment
from .session import Session, SessionStatus
from .attendance import AttendanceRecord, AttendanceMethod
from .activity import Activity, ActivityType, ActivitySuggestion, StudentInterest, StudentGoal

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'SchoolClass', 'ClassEnrollment',
    'Session', 'SessionStatus',
    'AttendanceRecord', 'AttendanceMethod',
    'Activity', 'ActivityType', 'ActivitySuggestion',
    'StudentInterest', 'StudentGoal'
]
