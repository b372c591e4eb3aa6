"""Typed errors raised by the check-in protocol."""
from typing import Optional

class CheckInError(Exception):
    """Base class for check-in failures surfaced to the client."""

    code = 'CheckInError'
    status_code = 400
    field: Optional[str] = None
    retryable = False
    default_message = 'Check-in failed'

    def __init__(self, message: str = None, field: str = None):
        self.message = message or self.default_message
        if field is not None:
            self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            'error': True,
            'code': self.code,
            'message': self.message,
            'field': self.field,
            'retryable': self.retryable,
            'status_code': self.status_code
        }

class SessionNotFound(CheckInError):
    code = 'SessionNotFound'
    status_code = 404
    field = 'session_reference'
    default_message = 'Session not found or not open'

class ClassNotFound(CheckInError):
    code = 'ClassNotFound'
    status_code = 404
    field = 'class_code'
    default_message = 'No active class with this code'

class NoOpenSession(CheckInError):
    code = 'NoOpenSession'
    status_code = 404
    field = 'class_code'
    default_message = 'There is no open session for this class'

class InvalidEntryCode(CheckInError):
    code = 'InvalidEntryCode'
    status_code = 401
    field = 'entry_code'
    default_message = 'Incorrect entry code'

class IdentityNotFound(CheckInError):
    code = 'IdentityNotFound'
    status_code = 404
    field = 'enrollment'
    default_message = 'Enrollment not found or inactive'

class NotEnrolled(CheckInError):
    code = 'NotEnrolled'
    status_code = 403
    field = 'enrollment'
    default_message = 'Student is not enrolled in this class'

class AlreadyCheckedIn(CheckInError):
    code = 'AlreadyCheckedIn'
    status_code = 409
    default_message = 'Attendance already registered for this session'

class EvidenceStorageFailed(CheckInError):
    """Logged only; a failed upload leaves the evidence field empty."""
    code = 'EvidenceStorageFailed'
    status_code = 500
    default_message = 'Could not store evidence'

class PersistenceFailed(CheckInError):
    code = 'PersistenceFailed'
    status_code = 503
    retryable = True
    default_message = 'Could not save attendance, please try again'

class InvalidTransition(CheckInError):
    code = 'InvalidTransition'
    status_code = 409
    default_message = 'Operation not allowed at this step'
