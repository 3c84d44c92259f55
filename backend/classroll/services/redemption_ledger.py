"""Redemption ledger: at most one attendance record per (session, student)."""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from classroll import db
from classroll.exceptions import Conflict, NotFound, Unauthorized
from classroll.models.attendance import AttendanceMethod, AttendanceRecord
from classroll.models.session import Session
from classroll.models.user import User, UserRole

logger = logging.getLogger(__name__)

class RedemptionLedger:
    """Records redemptions as an idempotent upsert keyed by (session, student).

    Uniqueness is enforced by the ``uq_attendance_session_student``
    constraint, not by locking: a concurrent duplicate insert loses at the
    store and is turned into an update of the winning row.

    Writes return ``(record, created, first_present)``. ``first_present`` is
    true for exactly one call per pair: the one that first marked the student
    present, whether it inserted the row or updated an absent one.
    """

    def redeem(
        self,
        session_id: str,
        subject_id: str,
        method: AttendanceMethod,
        occurred_at: datetime,
        latitude: float = None,
        longitude: float = None,
        notes: str = None
    ) -> Tuple[AttendanceRecord, bool, bool]:
        """Mark ``subject_id`` present."""
        session = self._require_session(session_id)
        self._require_subject(session, subject_id)

        values = {
            'is_present': True,
            'method': method,
            'marked_at': occurred_at,
        }
        if latitude is not None and longitude is not None:
            values['latitude'] = latitude
            values['longitude'] = longitude
        if notes is not None:
            values['notes'] = notes

        return self._upsert(session_id, subject_id, values)

    def override(
        self,
        session_id: str,
        actor_id: str,
        subject_id: str,
        occurred_at: datetime,
        present: Optional[bool] = None,
        notes: str = None
    ) -> Tuple[AttendanceRecord, bool, bool]:
        """Manually set a student's presence, skipping token checks.

        ``present=None`` toggles the current value; a student with no record
        yet is marked present. Only the session owner may override; wider
        capability checks (admins) happen before this is called.
        """
        session = self._require_session(session_id)
        if not session.is_owned_by(actor_id):
            raise Unauthorized("Only the session owner can override attendance")
        self._require_subject(session, subject_id)

        existing = self.get(session_id, subject_id)
        if present is None:
            present = not existing.is_present if existing else True

        values = {
            'is_present': present,
            'method': AttendanceMethod.MANUAL,
            'marked_at': occurred_at,
        }
        if notes is not None:
            values['notes'] = notes

        record, created, first_present = self._upsert(session_id, subject_id, values)
        logger.info("Attendance override on session %s: student %s present=%s by %s",
                    session_id, subject_id, present, actor_id)
        return record, created, first_present

    def get(self, session_id: str, subject_id: str) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter_by(
            session_id=session_id,
            student_id=subject_id
        ).first()

    def list_for_session(self, session_id: str, search: str = None) -> List[AttendanceRecord]:
        """Records for a session joined with the student, filtered by name or roll number."""
        query = (AttendanceRecord.query
                 .join(User, AttendanceRecord.student_id == User.id)
                 .filter(AttendanceRecord.session_id == session_id))

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(db.or_(User.name.ilike(pattern), User.roll_number.ilike(pattern)))

        return query.order_by(User.name).all()

    def list_for_student(self, subject_id: str, limit: int = 50) -> List[AttendanceRecord]:
        return (AttendanceRecord.query
                .filter_by(student_id=subject_id)
                .order_by(AttendanceRecord.marked_at.desc())
                .limit(limit)
                .all())

    def _upsert(self, session_id: str, subject_id: str, values: dict) -> Tuple[AttendanceRecord, bool, bool]:
        record = self.get(session_id, subject_id)
        if record is None:
            record = AttendanceRecord(
                session_id=session_id,
                student_id=subject_id,
                first_present_at=values['marked_at'] if values['is_present'] else None,
                **values
            )
            db.session.add(record)
            try:
                db.session.commit()
                return record, True, record.is_present
            except IntegrityError:
                # Lost the race to a concurrent insert for the same pair
                db.session.rollback()
                record = self.get(session_id, subject_id)
                if record is None:
                    raise Conflict(
                        f"Attendance for student {subject_id} in session {session_id} "
                        "could not be inserted or updated"
                    )

        for key, value in values.items():
            setattr(record, key, value)

        first_present = False
        if values['is_present'] and record.first_present_at is None:
            # Conditional UPDATE: only one concurrent writer can claim the first presence
            first_present = bool(AttendanceRecord.query
                                 .filter_by(id=record.id, first_present_at=None)
                                 .update({'first_present_at': values['marked_at']},
                                         synchronize_session=False))
        db.session.commit()
        return record, False, first_present

    @staticmethod
    def _require_session(session_id: str) -> Session:
        session = db.session.get(Session, session_id)
        if session is None:
            raise NotFound(f"Session {session_id} not found")
        return session

    @staticmethod
    def _require_subject(session: Session, subject_id: str) -> User:
        """A student enrolled in the session's class."""
        subject = db.session.get(User, subject_id)
        if subject is None or subject.role != UserRole.STUDENT:
            raise NotFound(f"Student {subject_id} not found")
        if not session.school_class.is_enrolled(subject_id):
            raise Unauthorized(f"Student {subject_id} is not enrolled in this class")
        return subject
