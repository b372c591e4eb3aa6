"""Final status determination and the terminal attendance write."""
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Tuple

from checkin.models.attendance import AttendanceRecord, AttendanceStatus, AttendanceSource
from checkin.services.attempt import CheckInAttempt, IdentityMode
from checkin.services.duplicate_guard import DuplicateGuard

logger = logging.getLogger(__name__)

BASE36 = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
REVIEW_REASON_SEPARATOR = '; '

@dataclass(frozen=True)
class CheckInResult:
    protocol_number: str
    needs_review: bool
    final_status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            'protocol_number': self.protocol_number,
            'needs_review': self.needs_review,
            'final_status': self.final_status.value
        }

def to_base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36[remainder])
    return ''.join(reversed(digits))

class TrustService:
    """Turns a confirmed attempt into a persisted attendance record."""

    @staticmethod
    def determine(review_reasons: Iterable[str]) -> Tuple[bool, AttendanceStatus]:
        """Any review reason demotes the check-in to ABSENT pending review."""
        needs_review = any(review_reasons)
        status = AttendanceStatus.ABSENT if needs_review else AttendanceStatus.PRESENT
        return needs_review, status

    @staticmethod
    def generate_protocol_number(prefix: str = 'FREQ', now_ms: int = None) -> str:
        """``PREFIX-<base36 ms timestamp><6 random base36 chars>``."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        suffix = ''.join(secrets.choice(BASE36) for _ in range(6))
        return f"{prefix}-{to_base36(now_ms)}{suffix}"

    @staticmethod
    def build_record(attempt: CheckInAttempt, protocol_number: str) -> AttendanceRecord:
        needs_review, status = TrustService.determine(attempt.review_reasons)
        geo = attempt.geo
        coordinate = geo.coordinate if geo else None
        source = (
            AttendanceSource.SELF_AUTHENTICATED
            if attempt.mode == IdentityMode.AUTHENTICATED
            else AttendanceSource.SELF_ANONYMOUS
        )

        return AttendanceRecord(
            session_id=attempt.session.id,
            student_id=attempt.student.id,
            protocol=protocol_number,
            final_status=status,
            needs_review=needs_review,
            review_reason=REVIEW_REASON_SEPARATOR.join(attempt.review_reasons) or None,
            selfie_path=attempt.photo.ref if attempt.photo else None,
            signature_path=attempt.signature.ref if attempt.signature else None,
            geo_lat=coordinate.latitude if coordinate else None,
            geo_lng=coordinate.longitude if coordinate else None,
            geo_ok=geo.is_inside if coordinate else None,
            device_fingerprint=attempt.device_digest,
            user_agent=attempt.user_agent,
            ip_address=attempt.ip_address,
            source=source,
            registered_at=datetime.utcnow()
        )

    @classmethod
    def finalize(cls, attempt: CheckInAttempt, protocol_prefix: str = 'FREQ') -> CheckInResult:
        """Persist the record through the duplicate guard and return the receipt."""
        record = cls.build_record(attempt, cls.generate_protocol_number(protocol_prefix))
        DuplicateGuard.insert_once(record)

        logger.info(
            "Check-in %s saved for session %s as %s%s",
            record.protocol, record.session_id, record.final_status.value,
            " (needs review)" if record.needs_review else ""
        )
        return CheckInResult(
            protocol_number=record.protocol,
            needs_review=record.needs_review,
            final_status=record.final_status
        )
