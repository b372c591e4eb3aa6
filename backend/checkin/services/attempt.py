"""Check-in attempt state and the pure functions that advance it.

An attempt is never persisted. Each step takes an attempt and returns a new
one, so every validator can be exercised on its own.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from checkin.models.academic import Student
from checkin.models.attendance_session import AttendanceSession
from checkin.services.credential_service import verify_entry_code
from checkin.services.device_digest import DeviceSignals, compute_digest
from checkin.services.duplicate_guard import DuplicateGuard
from checkin.services.enrollment_service import EnrollmentService
from checkin.services.gps_service import Coordinate, GeofenceResult, GPSService, DEFAULT_RADIUS_M
from checkin.services.session_resolver import SessionResolver

class IdentityMode(Enum):
    AUTHENTICATED = 'authenticated'
    ANONYMOUS = 'anonymous'

@dataclass(frozen=True)
class EvidenceCapture:
    """A stored evidence reference, or the reason it is missing."""
    ref: Optional[str] = None
    skip_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None

@dataclass(frozen=True)
class CheckInAttempt:
    mode: IdentityMode = IdentityMode.ANONYMOUS
    user_id: Optional[int] = None
    session: Optional[AttendanceSession] = None
    student: Optional[Student] = None
    geo: Optional[GeofenceResult] = None
    photo: Optional[EvidenceCapture] = None
    signature: Optional[EvidenceCapture] = None
    device_digest: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    review_reasons: Tuple[str, ...] = ()

    @property
    def needs_review(self) -> bool:
        return bool(self.review_reasons)

def with_review_reason(attempt: CheckInAttempt, reason: Optional[str]) -> CheckInAttempt:
    if not reason:
        return attempt
    return replace(attempt, review_reasons=attempt.review_reasons + (reason,))

def select_mode(attempt: CheckInAttempt, user_id=None) -> CheckInAttempt:
    """Authenticated when a user id is carried from the request context."""
    if user_id is not None:
        return replace(attempt, mode=IdentityMode.AUTHENTICATED, user_id=user_id)
    return replace(attempt, mode=IdentityMode.ANONYMOUS, user_id=None)

def validate_entry(
    attempt: CheckInAttempt,
    session_reference: Dict,
    entry_code: str,
    enrollment: str = None
) -> CheckInAttempt:
    """Resolve the session, check the code, the enrollment and prior check-ins.

    Checks run in that order and the first failure is raised, so a wrong
    entry code never reaches the duplicate check.
    """
    session = SessionResolver.resolve(session_reference)
    verify_entry_code(session, entry_code)

    if attempt.mode == IdentityMode.AUTHENTICATED:
        student = EnrollmentService.validate(session, user_id=attempt.user_id)
    else:
        student = EnrollmentService.validate(session, enrollment=enrollment)

    DuplicateGuard.ensure_not_checked_in(session.id, student.id)
    return replace(attempt, session=session, student=student)

def record_location(
    attempt: CheckInAttempt,
    coordinate: Optional[Coordinate],
    default_radius_m: float = DEFAULT_RADIUS_M
) -> CheckInAttempt:
    result = GPSService.evaluate(attempt.session, coordinate, default_radius_m)
    return with_review_reason(replace(attempt, geo=result), result.review_reason)

def record_photo(attempt: CheckInAttempt, capture: EvidenceCapture) -> CheckInAttempt:
    attempt = replace(attempt, photo=capture)
    if capture.skipped:
        attempt = with_review_reason(attempt, f"photo skipped: {capture.skip_reason}")
    return attempt

def record_signature(attempt: CheckInAttempt, capture: EvidenceCapture) -> CheckInAttempt:
    attempt = replace(attempt, signature=capture)
    if capture.skipped:
        attempt = with_review_reason(attempt, f"signature skipped: {capture.skip_reason}")
    return attempt

def record_device(
    attempt: CheckInAttempt,
    signals: Optional[DeviceSignals],
    user_agent: str = None,
    ip_address: str = None
) -> CheckInAttempt:
    """Provenance only; never changes the review reasons."""
    digest = compute_digest(signals) if signals is not None else None
    return replace(attempt, device_digest=digest, user_agent=user_agent, ip_address=ip_address)
