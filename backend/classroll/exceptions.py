"""Error taxonomy for attendance operations.

Every failure is scoped to one operation and raised to the caller. The Flask
error handler turns an ``AttendanceError`` into the standard JSON envelope
using ``status_code``.
"""


class AttendanceError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)


class ValidationError(AttendanceError):
    """Invalid input data."""

    status_code = 400


class NotFound(AttendanceError):
    """Requested resource was not found."""

    status_code = 404


class InvalidState(AttendanceError):
    """Operation not allowed in the session's current state."""

    status_code = 409


class TokenInvalid(AttendanceError):
    """Attendance code is invalid or expired."""

    status_code = 400

    MISMATCH = 'mismatch'
    EXPIRED = 'expired'

    def __init__(self, reason: str, message: str = None):
        self.reason = reason
        if message is None:
            message = ('Attendance code has expired' if reason == self.EXPIRED
                       else 'Attendance code is not valid for any active session')
        super().__init__(message)


class Unauthorized(AttendanceError):
    """Caller lacks the capability for this action."""

    status_code = 403


class Conflict(AttendanceError):
    """Conflicting write detected by the store."""

    status_code = 409
