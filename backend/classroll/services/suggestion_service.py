"""Personalized activity suggestions for students' free periods."""
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from classroll import db
from classroll.exceptions import NotFound, Unauthorized, ValidationError
from classroll.models.activity import (
    Activity, ActivitySuggestion, ActivityType, StudentGoal, StudentInterest
)
from classroll.models.session import Session
from classroll.services.session_registry import SessionRegistry
from classroll.utils.helpers import utcnow
from classroll.utils.validators import Validator

logger = logging.getLogger(__name__)

FreePeriod = Tuple[time, time]

def free_periods(sessions: List[Session], day_start: time, day_end: time) -> List[FreePeriod]:
    """Gaps between ``sessions`` inside the school day, in order."""
    periods = []
    cursor = day_start
    for session in sorted(sessions, key=lambda s: s.start_time):
        if session.start_time > cursor:
            periods.append((cursor, min(session.start_time, day_end)))
        cursor = max(cursor, session.end_time)
        if cursor >= day_end:
            break
    if cursor < day_end:
        periods.append((cursor, day_end))
    return [(start, end) for start, end in periods if start < end]

def _minutes_between(start: time, end: time) -> int:
    anchor = date.min
    return int((datetime.combine(anchor, end) - datetime.combine(anchor, start)).total_seconds() // 60)

def _add_minutes(at: time, minutes: int) -> time:
    return (datetime.combine(date.min, at) + timedelta(minutes=minutes)).time()

class SuggestionService:
    """Matches active activities against a student's interests."""

    def __init__(self, registry: SessionRegistry = None, per_day: int = 3,
                 day_start: time = time(8, 0), day_end: time = time(17, 0)):
        self.registry = registry or SessionRegistry()
        self.per_day = per_day
        self.day_start = day_start
        self.day_end = day_end

    @classmethod
    def from_config(cls, config) -> 'SuggestionService':
        return cls(
            per_day=config.get('SUGGESTIONS_PER_DAY', 3),
            day_start=time.fromisoformat(config.get('SCHOOL_DAY_START', '08:00')),
            day_end=time.fromisoformat(config.get('SCHOOL_DAY_END', '17:00'))
        )

    # Suggestions

    def list_open(self, student_id: str, day: date) -> List[ActivitySuggestion]:
        """Today's suggestions the student has not completed yet."""
        return (ActivitySuggestion.query
                .filter_by(student_id=student_id, suggested_for_date=day, completed=False)
                .order_by(ActivitySuggestion.free_period_start)
                .all())

    def complete(self, suggestion_id: str, student_id: str,
                 rating: int = None, feedback: str = None) -> ActivitySuggestion:
        suggestion = db.session.get(ActivitySuggestion, suggestion_id)
        if suggestion is None:
            raise NotFound(f"Suggestion {suggestion_id} not found")
        if suggestion.student_id != student_id:
            raise Unauthorized("Suggestion belongs to another student")

        rating = Validator.parse_rating(rating)
        suggestion.completed = True
        suggestion.completed_at = utcnow()
        suggestion.rating = rating
        if feedback is not None:
            suggestion.feedback = feedback
        db.session.commit()
        return suggestion

    def generate(self, student_id: str, day: date) -> List[ActivitySuggestion]:
        """Create up to ``per_day`` suggestions for ``day``, placed in free periods."""
        existing = ActivitySuggestion.query.filter_by(student_id=student_id, suggested_for_date=day).all()
        remaining = self.per_day - len(existing)
        if remaining <= 0:
            return []

        already = {suggestion.activity_id for suggestion in existing}
        ranked = [activity for activity in self.rank_activities(student_id) if activity.id not in already]

        sessions = self.registry.list_for_student_on(student_id, day)
        periods = [[start, end] for start, end in free_periods(sessions, self.day_start, self.day_end)]

        created = []
        for activity in ranked[:remaining]:
            slot = self._place(periods, activity.estimated_minutes)
            suggestion = ActivitySuggestion(
                student_id=student_id,
                activity_id=activity.id,
                suggested_for_date=day,
                free_period_start=slot[0] if slot else None,
                free_period_end=slot[1] if slot else None
            )
            db.session.add(suggestion)
            created.append(suggestion)

        db.session.commit()
        logger.info("Generated %d suggestions for student %s on %s", len(created), student_id, day)
        return created

    def rank_activities(self, student_id: str) -> List[Activity]:
        """Active activities ordered by interest match, then easier first.

        An activity with required interests is only eligible if the student
        shares at least one of them; one without requirements always is.
        """
        strengths = {
            interest.interest.lower(): interest.strength_level
            for interest in StudentInterest.query.filter_by(user_id=student_id)
        }

        scored = []
        for activity in Activity.query.filter_by(is_active=True):
            required = [name.lower() for name in (activity.required_interests or [])]
            if required:
                score = sum(strengths.get(name, 0) for name in required)
                if not any(name in strengths for name in required):
                    continue
            else:
                score = 0
            scored.append((score, activity))

        scored.sort(key=lambda pair: (-pair[0], pair[1].difficulty_level, pair[1].title))
        return [activity for _, activity in scored]

    @staticmethod
    def _place(periods: List[list], minutes: int) -> Optional[FreePeriod]:
        """Reserve ``minutes`` at the start of the first period long enough."""
        for period in periods:
            if _minutes_between(period[0], period[1]) >= minutes:
                start = period[0]
                end = _add_minutes(start, minutes)
                period[0] = end
                return start, end
        return None

    # Activities and student profile

    def create_activity(self, creator_id: str, data: Dict) -> Activity:
        Validator.require_fields(data, ['title', 'activity_type'])
        try:
            activity_type = ActivityType(str(data['activity_type']).lower())
        except ValueError:
            raise ValidationError(f"Unknown activity type: {data['activity_type']}")

        interests = data.get('required_interests') or []
        if not isinstance(interests, list):
            raise ValidationError("required_interests must be a list")

        estimated = data.get('estimated_minutes', 30)
        if not isinstance(estimated, int) or estimated <= 0:
            raise ValidationError("estimated_minutes must be a positive integer")

        activity = Activity(
            title=data['title'].strip(),
            description=data.get('description'),
            activity_type=activity_type,
            difficulty_level=Validator.parse_rating(data.get('difficulty_level'), 'difficulty_level') or 1,
            estimated_minutes=estimated,
            required_interests=[str(name) for name in interests],
            content_url=data.get('content_url'),
            created_by=creator_id
        )
        return activity.save()

    def list_activities(self) -> List[Activity]:
        return Activity.query.filter_by(is_active=True).order_by(Activity.title).all()

    def add_interest(self, student_id: str, interest: str, strength_level: int = 1) -> StudentInterest:
        if not interest or not interest.strip():
            raise ValidationError("Interest is required")
        record = StudentInterest(
            user_id=student_id,
            interest=interest.strip(),
            strength_level=Validator.parse_rating(strength_level, 'strength_level') or 1
        )
        return record.save()

    def add_goal(self, student_id: str, goal: str, target_date: date = None, priority: int = 1) -> StudentGoal:
        if not goal or not goal.strip():
            raise ValidationError("Goal is required")
        record = StudentGoal(
            user_id=student_id,
            goal=goal.strip(),
            target_date=target_date,
            priority=Validator.parse_rating(priority, 'priority') or 1
        )
        return record.save()
