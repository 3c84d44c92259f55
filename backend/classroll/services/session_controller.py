"""Session controller: start/stop sessions and redeem attendance codes."""
import hmac
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from classroll.exceptions import InvalidState, TokenInvalid, Unauthorized, ValidationError
from classroll.models.attendance import AttendanceMethod, AttendanceRecord
from classroll.models.session import Session, SessionStatus
from classroll.services.redemption_ledger import RedemptionLedger
from classroll.services.session_registry import SessionRegistry
from classroll.services.token_issuer import TokenIssuer
from classroll.utils.helpers import utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=30)
MAX_TTL = timedelta(hours=4)

class SessionController:
    """Drives the session state machine.

    ``scheduled -> active -> closed -> active -> ...``: a session can be
    restarted any number of times and every start issues a fresh token. A
    restart invalidates the previous token at once, even when it has not
    expired yet; students still holding it must rescan.
    """

    def __init__(
        self,
        registry: SessionRegistry = None,
        ledger: RedemptionLedger = None,
        issuer: TokenIssuer = None,
        clock: Callable[[], datetime] = utcnow,
        default_ttl: timedelta = DEFAULT_TTL,
        max_ttl: timedelta = MAX_TTL
    ):
        self.registry = registry or SessionRegistry()
        self.ledger = ledger or RedemptionLedger()
        self.issuer = issuer or TokenIssuer()
        self.clock = clock
        self.default_ttl = default_ttl
        self.max_ttl = max_ttl

    @classmethod
    def from_config(cls, config, **kwargs) -> 'SessionController':
        return cls(
            default_ttl=timedelta(minutes=config.get('SESSION_TOKEN_TTL_MINUTES', 30)),
            max_ttl=timedelta(minutes=config.get('SESSION_TOKEN_MAX_TTL_MINUTES', 240)),
            **kwargs
        )

    def start(self, session_id: str, ttl: timedelta = None, actor_id: str = None) -> Session:
        """Issue a new token and make the session active."""
        session = self.registry.get(session_id)
        self._check_owner(session, actor_id)

        if ttl is None:
            ttl = self.default_ttl
        if ttl > self.max_ttl:
            raise ValidationError(
                f"Token lifetime cannot exceed {int(self.max_ttl.total_seconds() // 60)} minutes"
            )

        replacing = session.status == SessionStatus.ACTIVE
        token = self.issuer.issue(session_id, ttl, self.clock())
        session = self.registry.set_active(session_id, token)

        logger.info("Session %s %s, token expires at %s", session_id,
                    'restarted' if replacing else 'started', token.expires_at.isoformat())
        return session

    def stop(self, session_id: str, actor_id: str = None) -> Session:
        """Close the session and clear its token."""
        session = self.registry.get(session_id)
        self._check_owner(session, actor_id)

        session = self.registry.set_inactive(session_id)
        logger.info("Session %s stopped with %d/%d present", session_id,
                    session.present_count, session.total_students)
        return session

    def redeem(
        self,
        session_id: str,
        subject_id: str,
        candidate_token: str,
        method: AttendanceMethod = AttendanceMethod.QR,
        latitude: float = None,
        longitude: float = None
    ) -> Tuple[AttendanceRecord, bool]:
        """Redeem ``candidate_token`` for ``subject_id``.

        Returns ``(record, created)``. The redeemed counter only moves the first
        time a student is marked present; repeats refresh the record's timestamp.
        """
        session = self.registry.get(session_id)

        if session.status != SessionStatus.ACTIVE:
            raise InvalidState(f"Session is {session.status.value}, attendance is not open")

        if not session.qr_code or not hmac.compare_digest(
            session.qr_code.encode(), (candidate_token or '').encode()
        ):
            logger.warning("Rejected code for session %s from %s: %s",
                           session_id, subject_id, TokenInvalid.MISMATCH)
            raise TokenInvalid(TokenInvalid.MISMATCH)

        now = self.clock()
        if session.token_expired(now):
            logger.warning("Rejected code for session %s from %s: %s",
                           session_id, subject_id, TokenInvalid.EXPIRED)
            raise TokenInvalid(TokenInvalid.EXPIRED)

        record, created, first_present = self.ledger.redeem(
            session_id, subject_id, method, now,
            latitude=latitude, longitude=longitude
        )
        if first_present:
            self.registry.increment_redeemed(session_id)
        return record, created

    def redeem_code(
        self,
        subject_id: str,
        code: str,
        session_id: str = None,
        method: AttendanceMethod = AttendanceMethod.QR,
        latitude: float = None,
        longitude: float = None
    ) -> Tuple[AttendanceRecord, bool]:
        """Scanner path: resolve the session from the code itself."""
        if session_id is None:
            session = self.registry.find_by_token(code)
            if session is None:
                logger.warning("Rejected unknown code from %s", subject_id)
                raise TokenInvalid(TokenInvalid.MISMATCH)
            session_id = session.id

        return self.redeem(session_id, subject_id, code, method=method,
                           latitude=latitude, longitude=longitude)

    def override(
        self,
        session_id: str,
        actor_id: str,
        subject_id: str,
        present: Optional[bool] = None,
        notes: str = None
    ) -> Tuple[AttendanceRecord, bool]:
        record, created, first_present = self.ledger.override(
            session_id, actor_id, subject_id, self.clock(),
            present=present, notes=notes
        )
        if first_present:
            self.registry.increment_redeemed(session_id)
        return record, created

    @staticmethod
    def _check_owner(session: Session, actor_id: Optional[str]) -> None:
        if actor_id is not None and not session.is_owned_by(actor_id):
            raise Unauthorized("Only the session owner can start or stop it")
