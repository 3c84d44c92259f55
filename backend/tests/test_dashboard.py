"""Role dashboard tests."""
import json

import pytest

from classroll.models.user import UserRole
from classroll.services.dashboard_service import (
    DASHBOARDS, AdminDashboard, StudentDashboard, TeacherDashboard, dashboard_for
)

@pytest.mark.parametrize('role,expected', [
    (UserRole.STUDENT, StudentDashboard),
    (UserRole.TEACHER, TeacherDashboard),
    (UserRole.ADMIN, AdminDashboard),
    (UserRole.COUNSELOR, AdminDashboard),
])
def test_dashboard_for_role(app, role, expected):
    assert isinstance(dashboard_for(role), expected)

def test_every_role_has_a_dashboard():
    assert set(DASHBOARDS) == set(UserRole)

def _dashboard(client, headers):
    response = client.get('/api/dashboard/', headers=headers)
    assert response.status_code == 200
    return json.loads(response.data)['data']

def test_teacher_dashboard(client, auth_headers, controller, teacher, class_session):
    controller.start(class_session.id)

    data = _dashboard(client, auth_headers(teacher))

    assert data['role'] == 'teacher'
    assert data['date'] == '2026-03-02'
    assert data['sessions'][0]['qr_code']
    assert data['summary'] == {'total_sessions': 1, 'active_sessions': 1, 'present': 0, 'expected': 3}

def test_student_dashboard(client, auth_headers, controller, students, class_session):
    token = controller.start(class_session.id).qr_code
    controller.redeem(class_session.id, students[0].id, token)

    present = _dashboard(client, auth_headers(students[0]))
    absent = _dashboard(client, auth_headers(students[1]))

    assert present['role'] == 'student'
    assert present['sessions'][0]['attendance']['is_present'] is True
    assert present['sessions'][0]['attendance']['method'] == 'qr'
    assert 'qr_code' not in present['sessions'][0]
    assert absent['sessions'][0]['attendance'] is None
    assert present['suggestions'] == []

def test_admin_and_counselor_dashboard(client, auth_headers, controller, admin, make_user, students, class_session):
    token = controller.start(class_session.id).qr_code
    controller.redeem(class_session.id, students[0].id, token)
    controller.redeem(class_session.id, students[1].id, token)
    counselor = make_user(UserRole.COUNSELOR, name='Counselor')

    data = _dashboard(client, auth_headers(admin))
    assert data['role'] == 'admin'
    assert data['stats'] == {
        'total_students': 3,
        'total_teachers': 1,
        'total_classes': 1,
        'today_attendance': 2
    }

    assert _dashboard(client, auth_headers(counselor))['role'] == 'counselor'
