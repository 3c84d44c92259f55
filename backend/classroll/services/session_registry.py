"""Session registry: the only writer of a session's token fields."""
import logging
from datetime import date, time
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from classroll import db
from classroll.exceptions import Conflict, InvalidState, NotFound, ValidationError
from classroll.models.classroom import ClassEnrollment, SchoolClass
from classroll.models.session import Session, SessionStatus
from classroll.services.token_issuer import Token
from classroll.utils.helpers import utcnow

logger = logging.getLogger(__name__)

class SessionRegistry:
    """Create, look up and mutate attendance sessions.

    Token rotation and counter updates are single UPDATE statements, so two
    concurrent ``set_active`` calls resolve last-writer-wins at the store.
    """

    def create(
        self,
        owner_id: str,
        class_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        expected_count: Optional[int] = None,
        location: str = None
    ) -> Session:
        school_class = self.get_class(class_id)

        if end_time <= start_time:
            raise ValidationError("Session must end after it starts")

        if expected_count is None:
            expected_count = school_class.enrolled_count()
        elif expected_count < 0:
            raise ValidationError("Expected student count cannot be negative")

        session = Session(
            class_id=class_id,
            teacher_id=owner_id,
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            location=location,
            status=SessionStatus.SCHEDULED,
            total_students=expected_count,
            present_count=0
        )
        db.session.add(session)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise Conflict(f"Could not create session: {e.orig}")

        logger.info("Session %s scheduled for class %s on %s", session.id, class_id, session_date)
        return session

    def get(self, session_id: str) -> Session:
        session = db.session.get(Session, session_id)
        if session is None:
            raise NotFound(f"Session {session_id} not found")
        return session

    def get_class(self, class_id: str) -> SchoolClass:
        school_class = db.session.get(SchoolClass, class_id)
        if school_class is None:
            raise NotFound(f"Class {class_id} not found")
        return school_class

    def find_by_token(self, value: str) -> Optional[Session]:
        if not value:
            return None
        return Session.query.filter_by(qr_code=value).first()

    def set_active(self, session_id: str, token: Token) -> Session:
        """Install ``token`` as the current one, replacing any previous token.

        The old token stops matching as soon as this commits; there is no
        grace period for it.
        """
        if token.session_id != session_id:
            raise InvalidState(f"Token was issued for session {token.session_id}, not {session_id}")

        self._write(session_id, {
            'status': SessionStatus.ACTIVE,
            'qr_code': token.value,
            'qr_expires_at': token.expires_at,
        })
        return self.get(session_id)

    def set_inactive(self, session_id: str) -> Session:
        """Clear the token and close the session. Idempotent."""
        self._write(session_id, {
            'status': SessionStatus.CLOSED,
            'qr_code': None,
            'qr_expires_at': None,
        })
        return self.get(session_id)

    def increment_redeemed(self, session_id: str) -> None:
        self._write(session_id, {'present_count': Session.present_count + 1})

    def delete(self, session_id: str) -> None:
        session = self.get(session_id)
        db.session.delete(session)
        db.session.commit()
        logger.info("Session %s deleted", session_id)

    def list_for_owner_on(self, owner_id: str, day: date) -> List[Session]:
        return (Session.query
                .filter_by(teacher_id=owner_id, session_date=day)
                .order_by(Session.start_time)
                .all())

    def list_for_student_on(self, student_id: str, day: date) -> List[Session]:
        class_ids = db.select(ClassEnrollment.class_id).where(ClassEnrollment.student_id == student_id)
        return (Session.query
                .filter(Session.session_date == day, Session.class_id.in_(class_ids))
                .order_by(Session.start_time)
                .all())

    def _write(self, session_id: str, values: dict) -> None:
        values = dict(values, updated_at=utcnow())
        try:
            updated = (Session.query
                       .filter_by(id=session_id)
                       .update(values, synchronize_session=False))
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise Conflict(f"Conflicting update on session {session_id}: {e.orig}")

        if not updated:
            raise NotFound(f"Session {session_id} not found")
