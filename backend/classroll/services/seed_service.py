"""Database seeding service for demo data."""
from datetime import time

from classroll import db
from classroll.models.activity import Activity, ActivityType, StudentInterest
from classroll.models.classroom import ClassEnrollment, SchoolClass
from classroll.models.session import Session, SessionStatus
from classroll.models.user import User, UserRole
from classroll.utils.helpers import utcnow

DEMO_PASSWORD = 'password123'

class SeedService:
    """Service to seed database with demo data."""

    @staticmethod
    def seed_all() -> dict:
        """Seed all demo data. Safe to run twice."""
        teachers = SeedService.seed_teachers()
        students = SeedService.seed_students()
        classes = SeedService.seed_classes(teachers, students)
        sessions = SeedService.seed_today_sessions(classes)
        activities = SeedService.seed_activities()
        db.session.commit()
        return {
            'teachers': len(teachers),
            'students': len(students),
            'classes': len(classes),
            'sessions': len(sessions),
            'activities': len(activities)
        }

    @staticmethod
    def _get_or_create_user(email: str, name: str, role: UserRole, **extra) -> User:
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=name, role=role, **extra)
            user.set_password(DEMO_PASSWORD)
            db.session.add(user)
            db.session.flush()
        return user

    @staticmethod
    def seed_teachers():
        return [
            SeedService._get_or_create_user('smith@school.edu', 'Dr. Smith', UserRole.TEACHER, department='Mathematics'),
            SeedService._get_or_create_user('jones@school.edu', 'Ms. Jones', UserRole.TEACHER, department='Physics'),
        ]

    @staticmethod
    def seed_students():
        students = []
        for index, (name, interests) in enumerate([
            ('Ada Lovelace', ['programming', 'mathematics']),
            ('Alan Turing', ['programming', 'puzzles']),
            ('Marie Curie', ['chemistry', 'physics']),
        ], start=1):
            student = SeedService._get_or_create_user(
                f'student{index}@school.edu', name, UserRole.STUDENT,
                roll_number=f'R{index:03d}', department='Science', semester=3
            )
            if student.interests.count() == 0:
                for level, interest in enumerate(interests, start=3):
                    db.session.add(StudentInterest(user_id=student.id, interest=interest, strength_level=level))
            students.append(student)
        return students

    @staticmethod
    def seed_classes(teachers, students):
        specs = [
            ('Section A', 'Mathematics', teachers[0], '101'),
            ('Section A', 'Physics', teachers[1], '204'),
        ]
        classes = []
        for name, subject, teacher, room in specs:
            school_class = SchoolClass.query.filter_by(name=name, subject=subject).first()
            if school_class is None:
                school_class = SchoolClass(name=name, subject=subject, teacher_id=teacher.id,
                                           room_number=room, capacity=40, semester=3)
                db.session.add(school_class)
                db.session.flush()
                for student in students:
                    db.session.add(ClassEnrollment(class_id=school_class.id, student_id=student.id))
            classes.append(school_class)
        db.session.flush()
        return classes

    @staticmethod
    def seed_today_sessions(classes):
        today = utcnow().date()
        sessions = []
        for index, school_class in enumerate(classes):
            start = time(9 + index * 2, 0)
            session = Session.query.filter_by(class_id=school_class.id, session_date=today).first()
            if session is None:
                session = Session(
                    class_id=school_class.id,
                    teacher_id=school_class.teacher_id,
                    session_date=today,
                    start_time=start,
                    end_time=time(start.hour + 1, 0),
                    location=f'Room {school_class.room_number}',
                    status=SessionStatus.SCHEDULED,
                    total_students=school_class.enrolled_count()
                )
                db.session.add(session)
            sessions.append(session)
        return sessions

    @staticmethod
    def seed_activities():
        specs = [
            ('Intro to Python katas', ActivityType.PRACTICE, 2, 30, ['programming']),
            ('Algebra quick quiz', ActivityType.QUIZ, 1, 15, ['mathematics']),
            ('Periodic table flashcards', ActivityType.STUDY, 1, 20, ['chemistry']),
            ('Read a career profile', ActivityType.CAREER, 1, 20, []),
        ]
        activities = []
        for title, activity_type, difficulty, minutes, interests in specs:
            activity = Activity.query.filter_by(title=title).first()
            if activity is None:
                activity = Activity(title=title, activity_type=activity_type,
                                    difficulty_level=difficulty, estimated_minutes=minutes,
                                    required_interests=interests)
                db.session.add(activity)
            activities.append(activity)
        return activities
