"""Activities, suggestions and the student profile data that drives them."""
from enum import Enum
from classroll import db
from classroll.models.base import BaseModel

class ActivityType(Enum):
    STUDY = 'study'
    PRACTICE = 'practice'
    QUIZ = 'quiz'
    PROJECT = 'project'
    CAREER = 'career'
    SKILL = 'skill'

class Activity(BaseModel):
    """Something a student can do during a free period."""

    __tablename__ = 'activities'

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    activity_type = db.Column(db.Enum(ActivityType), nullable=False)
    difficulty_level = db.Column(db.Integer, nullable=False, default=1)
    estimated_minutes = db.Column(db.Integer, nullable=False, default=30)
    required_interests = db.Column(db.JSON, nullable=False, default=list)
    content_url = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    def __repr__(self):
        return f'<Activity {self.title}>'

class ActivitySuggestion(BaseModel):
    """An activity proposed to a student for a given day."""

    __tablename__ = 'activity_suggestions'

    student_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    activity_id = db.Column(db.String(36), db.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False)
    suggested_for_date = db.Column(db.Date, nullable=False)
    free_period_start = db.Column(db.Time, nullable=True)
    free_period_end = db.Column(db.Time, nullable=True)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    rating = db.Column(db.Integer, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    activity = db.relationship('Activity')

    def to_dict(self, exclude: list = None) -> dict:
        data = super().to_dict(exclude=exclude)
        data['activity'] = self.activity.to_dict() if self.activity else None
        return data

class StudentInterest(BaseModel):
    __tablename__ = 'student_interests'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    interest = db.Column(db.String(100), nullable=False)
    strength_level = db.Column(db.Integer, nullable=False, default=1)

class StudentGoal(BaseModel):
    __tablename__ = 'student_goals'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    goal = db.Column(db.Text, nullable=False)
    target_date = db.Column(db.Date, nullable=True)
    priority = db.Column(db.Integer, nullable=False, default=1)
    completed = db.Column(db.Boolean, nullable=False, default=False)
