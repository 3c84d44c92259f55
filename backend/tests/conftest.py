"""Shared fixtures."""
from datetime import datetime, time, timedelta

import pytest
from flask_jwt_extended import create_access_token

from classroll import create_app, db
from classroll.models.classroom import ClassEnrollment, SchoolClass
from classroll.models.user import User, UserRole
from classroll.services.session_controller import SessionController
from classroll.services.session_registry import SessionRegistry

class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)

@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 2, 9, 0, 0))

@pytest.fixture
def app(clock):
    """Create test app."""
    app = create_app('testing')
    app.config['CLOCK'] = clock
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(role=UserRole.STUDENT, name=None, **extra):
        counter['n'] += 1
        n = counter['n']
        user = User(
            email=f'{role.value}{n}@school.edu',
            name=name or f'{role.value.title()} {n}',
            role=role,
            **extra
        )
        user.set_password('password123')
        return user.save()

    return _make_user

@pytest.fixture
def teacher(make_user):
    return make_user(UserRole.TEACHER, name='Dr. Smith')

@pytest.fixture
def other_teacher(make_user):
    return make_user(UserRole.TEACHER, name='Ms. Jones')

@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, name='Admin')

@pytest.fixture
def students(make_user):
    return [
        make_user(UserRole.STUDENT, name=name, roll_number=roll)
        for name, roll in (('Ada Lovelace', 'R001'), ('Alan Turing', 'R002'), ('Grace Hopper', 'R003'))
    ]

@pytest.fixture
def school_class(teacher, students):
    school_class = SchoolClass(name='Section A', subject='Mathematics', teacher_id=teacher.id, room_number='101')
    school_class.save()
    for student in students:
        db.session.add(ClassEnrollment(class_id=school_class.id, student_id=student.id))
    db.session.commit()
    return school_class

@pytest.fixture
def registry(app):
    return SessionRegistry()

@pytest.fixture
def class_session(registry, school_class, teacher, clock):
    return registry.create(
        owner_id=teacher.id,
        class_id=school_class.id,
        session_date=clock().date(),
        start_time=time(9, 0),
        end_time=time(10, 0),
        location='Room 101'
    )

@pytest.fixture
def controller(registry, clock):
    return SessionController(registry=registry, clock=clock)

@pytest.fixture
def auth_headers(app):
    def _headers(user):
        return {'Authorization': f'Bearer {create_access_token(identity=user.id)}'}
    return _headers
