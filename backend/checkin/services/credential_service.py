"""Entry code generation and verification."""
import hmac
import logging
import secrets
from checkin.models.attendance_session import AttendanceSession
from checkin.utils.errors import InvalidEntryCode

logger = logging.getLogger(__name__)

# No 0/O or 1/I
ENTRY_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'

def normalize_entry_code(code: str) -> str:
    return (code or '').strip().upper()

def hash_entry_code(code: str) -> str:
    """SHA-256 hex digest of the normalized code."""
    return AttendanceSession.hash_entry_code(normalize_entry_code(code))

def generate_entry_code(length: int = 6) -> str:
    """Generate a short code that is easy to read out loud."""
    return ''.join(secrets.choice(ENTRY_CODE_ALPHABET) for _ in range(length))

def verify_entry_code(session: AttendanceSession, code: str) -> None:
    """Raise InvalidEntryCode unless ``code`` matches the session's stored hash."""
    candidate = hash_entry_code(code)
    stored = session.entry_code_hash or ''

    if not hmac.compare_digest(candidate.encode('ascii'), stored.encode('ascii')):
        logger.warning("Wrong entry code for session %s", session.id)
        raise InvalidEntryCode()
