"""Role dashboards: one implementation per role, picked once at the boundary."""
from datetime import date, datetime, time
from typing import Dict

from classroll import db
from classroll.models.attendance import AttendanceRecord
from classroll.models.classroom import SchoolClass
from classroll.models.user import User, UserRole
from classroll.services.session_registry import SessionRegistry
from classroll.services.suggestion_service import SuggestionService

class Dashboard:
    """Base dashboard."""

    role = None

    def __init__(self, registry: SessionRegistry = None, suggestions: SuggestionService = None):
        self.registry = registry or SessionRegistry()
        self.suggestions = suggestions or SuggestionService(registry=self.registry)

    def build(self, user: User, today: date) -> Dict:
        raise NotImplementedError

class StudentDashboard(Dashboard):
    role = 'student'

    def build(self, user: User, today: date) -> Dict:
        sessions = self.registry.list_for_student_on(user.id, today)
        records = {
            record.session_id: record
            for record in AttendanceRecord.query.filter(
                AttendanceRecord.student_id == user.id,
                AttendanceRecord.session_id.in_([session.id for session in sessions])
            )
        } if sessions else {}

        schedule = []
        for session in sessions:
            entry = session.to_dict()
            record = records.get(session.id)
            entry['attendance'] = {
                'is_present': record.is_present,
                'method': record.method.value if record.method else None,
                'marked_at': record.marked_at.isoformat() if record.marked_at else None
            } if record else None
            schedule.append(entry)

        return {
            'role': self.role,
            'date': today.isoformat(),
            'sessions': schedule,
            'suggestions': [s.to_dict() for s in self.suggestions.list_open(user.id, today)]
        }

class TeacherDashboard(Dashboard):
    role = 'teacher'

    def build(self, user: User, today: date) -> Dict:
        sessions = self.registry.list_for_owner_on(user.id, today)
        return {
            'role': self.role,
            'date': today.isoformat(),
            'sessions': [session.to_dict(include_token=True) for session in sessions],
            'summary': {
                'total_sessions': len(sessions),
                'active_sessions': sum(1 for session in sessions if session.is_active),
                'present': sum(session.present_count for session in sessions),
                'expected': sum(session.total_students for session in sessions)
            }
        }

class AdminDashboard(Dashboard):
    """Institution-wide counts, shared by admins and counselors."""

    role = 'admin'

    def build(self, user: User, today: date) -> Dict:
        day_start = datetime.combine(today, time.min)
        day_end = datetime.combine(today, time.max)

        return {
            'role': user.role.value,
            'date': today.isoformat(),
            'stats': {
                'total_students': User.query.filter_by(role=UserRole.STUDENT).count(),
                'total_teachers': User.query.filter_by(role=UserRole.TEACHER).count(),
                'total_classes': db.session.query(SchoolClass.id).count(),
                'today_attendance': AttendanceRecord.query.filter(
                    AttendanceRecord.is_present.is_(True),
                    AttendanceRecord.marked_at.between(day_start, day_end)
                ).count()
            }
        }

DASHBOARDS = {
    UserRole.STUDENT: StudentDashboard,
    UserRole.TEACHER: TeacherDashboard,
    UserRole.ADMIN: AdminDashboard,
    UserRole.COUNSELOR: AdminDashboard,
}

def dashboard_for(role: UserRole, **kwargs) -> Dashboard:
    """Select the dashboard implementation for ``role``."""
    return DASHBOARDS[role](**kwargs)
