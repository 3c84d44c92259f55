"""Attendance session with a time-boxed QR token."""
from enum import Enum
from classroll import db
from classroll.models.base import BaseModel

class SessionStatus(Enum):
    """Lifecycle of an attendance session."""
    SCHEDULED = 'scheduled'
    ACTIVE = 'active'
    CLOSED = 'closed'

class Session(BaseModel):
    """One class meeting during which attendance codes are accepted.

    ``qr_code`` and ``qr_expires_at`` are written together by the session
    registry only; either both are set or both are null.
    """

    __tablename__ = 'sessions'
    __table_args__ = (
        db.CheckConstraint(
            '(qr_code IS NULL AND qr_expires_at IS NULL) OR '
            '(qr_code IS NOT NULL AND qr_expires_at IS NOT NULL)',
            name='ck_session_token_pair'
        ),
    )

    class_id = db.Column(db.String(36), db.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False)
    teacher_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    session_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    location = db.Column(db.String(255), nullable=True)

    status = db.Column(db.Enum(SessionStatus), nullable=False, default=SessionStatus.SCHEDULED)
    qr_code = db.Column(db.String(64), unique=True, nullable=True)
    qr_expires_at = db.Column(db.DateTime, nullable=True)

    # Stats
    total_students = db.Column(db.Integer, nullable=False, default=0)
    present_count = db.Column(db.Integer, nullable=False, default=0)

    # Relationships
    teacher = db.relationship('User')
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic',
                              cascade='all, delete-orphan')

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def is_owned_by(self, user_id: str) -> bool:
        return self.teacher_id == user_id

    def token_expired(self, now) -> bool:
        """True when no token is live at ``now``."""
        return self.qr_expires_at is None or now >= self.qr_expires_at

    def to_dict(self, include_token: bool = False) -> dict:
        """Convert to dictionary; the token is only shown to its owner."""
        exclude = [] if include_token else ['qr_code']
        data = super().to_dict(exclude=exclude)
        data['is_active'] = self.is_active
        if self.school_class is not None:
            data['class'] = {
                'name': self.school_class.name,
                'subject': self.school_class.subject,
                'room_number': self.school_class.room_number
            }
        return data

    def __repr__(self):
        return f'<Session {self.id} {self.status.value}>'
