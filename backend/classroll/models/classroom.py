"""Class and enrollment models."""
from classroll import db
from classroll.models.base import BaseModel
from classroll.utils.helpers import utcnow

class SchoolClass(BaseModel):
    """A taught class, e.g. one subject for one group of students."""

    __tablename__ = 'classes'

    name = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    teacher_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    department = db.Column(db.String(100), nullable=True)
    semester = db.Column(db.Integer, nullable=True)
    room_number = db.Column(db.String(50), nullable=True)
    capacity = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=True)

    # Relationships
    teacher = db.relationship('User', backref=db.backref('taught_classes', lazy='dynamic'))
    enrollments = db.relationship('ClassEnrollment', backref='school_class', lazy='dynamic',
                                  cascade='all, delete-orphan')
    sessions = db.relationship('Session', backref='school_class', lazy='dynamic',
                               cascade='all, delete-orphan')

    def enrolled_count(self) -> int:
        return self.enrollments.count()

    def is_enrolled(self, student_id: str) -> bool:
        return self.enrollments.filter_by(student_id=student_id).first() is not None

    def to_dict(self, exclude: list = None) -> dict:
        data = super().to_dict(exclude=exclude)
        data['teacher_name'] = self.teacher.name if self.teacher else None
        data['enrolled_count'] = self.enrolled_count()
        return data

    def __repr__(self):
        return f'<SchoolClass {self.subject} {self.name}>'

class ClassEnrollment(BaseModel):
    """Membership of a student in a class."""

    __tablename__ = 'class_enrollments'
    __table_args__ = (
        db.UniqueConstraint('class_id', 'student_id', name='uq_enrollment_class_student'),
    )

    class_id = db.Column(db.String(36), db.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False)
    student_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    enrolled_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    student = db.relationship('User', backref=db.backref('enrollments', lazy='dynamic'))
