"""Attendance record (one redemption per session and student)."""
from enum import Enum
from classroll import db
from classroll.models.base import BaseModel

class AttendanceMethod(Enum):
    """How a presence was recorded."""
    QR = 'qr'
    FACE = 'face'
    BLUETOOTH = 'bluetooth'
    MANUAL = 'manual'

class AttendanceRecord(BaseModel):
    """Attendance record model."""

    __tablename__ = 'attendance'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )

    session_id = db.Column(db.String(36), db.ForeignKey('sessions.id', ondelete='CASCADE'), nullable=False)
    student_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    is_present = db.Column(db.Boolean, nullable=False, default=False)
    method = db.Column(db.Enum(AttendanceMethod), nullable=True)
    marked_at = db.Column(db.DateTime, nullable=True)
    # Set once, when the student is first marked present; drives present_count
    first_present_at = db.Column(db.DateTime, nullable=True)

    # Location where check-in happened
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    student = db.relationship('User')

    def to_dict(self, exclude: list = None) -> dict:
        data = super().to_dict(exclude=exclude)
        if self.student is not None:
            data['student'] = {
                'name': self.student.name,
                'roll_number': self.student.roll_number
            }
        return data

    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.session_id}>'
