"""Step-by-step check-in workflow."""
import logging
from enum import Enum
from typing import Dict, List, Optional

from checkin.services import attempt as steps
from checkin.services.attempt import CheckInAttempt, EvidenceCapture
from checkin.services.device_digest import DeviceSignals
from checkin.services.evidence_storage import EvidenceStorage
from checkin.services.gps_service import Coordinate, DEFAULT_RADIUS_M
from checkin.services.trust_service import TrustService, CheckInResult
from checkin.utils.errors import (
    CheckInError, EvidenceStorageFailed, InvalidTransition
)

logger = logging.getLogger(__name__)

class CheckInStep(Enum):
    """Workflow states."""
    MODE_SELECT = "mode_select"
    DATA_ENTRY = "data_entry"
    GEO_CHECK = "geo_check"
    PHOTO_CAPTURE = "photo_capture"
    SIGNATURE_CAPTURE = "signature_capture"
    CONFIRM = "confirm"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"

TERMINAL_STATES = (CheckInStep.SUCCESS, CheckInStep.FAILED)

def steps_for(session) -> List[CheckInStep]:
    """Ordered states a client goes through for ``session``."""
    path = [CheckInStep.MODE_SELECT, CheckInStep.DATA_ENTRY]
    if session is not None and session.requires_geofence():
        path.append(CheckInStep.GEO_CHECK)
    path += [
        CheckInStep.PHOTO_CAPTURE,
        CheckInStep.SIGNATURE_CAPTURE,
        CheckInStep.CONFIRM,
        CheckInStep.SUBMITTING,
        CheckInStep.SUCCESS
    ]
    return path

class CheckInWorkflow:
    """
    Check-in state machine.

    Flow:
    1. MODE_SELECT - authenticated or anonymous identity
    2. DATA_ENTRY - session, entry code, enrollment and duplicate pre-check (must pass)
    3. GEO_CHECK - only for geofenced sessions (never blocks)
    4. PHOTO_CAPTURE - photo or skip (skip demotes trust)
    5. SIGNATURE_CAPTURE - signature or skip (skip demotes trust)
    6. CONFIRM -> SUBMITTING -> SUCCESS, back to CONFIRM on a retryable failure,
       or FAILED when the attempt cannot succeed (already checked in)

    Nothing is written before SUBMITTING, so the workflow can be dropped at
    any earlier state. ``back()`` returns to the previous state and discards
    whatever that state had captured.
    """

    def __init__(
        self,
        storage: Optional[EvidenceStorage] = None,
        default_radius_m: float = DEFAULT_RADIUS_M,
        protocol_prefix: str = 'FREQ'
    ):
        self.storage = storage
        self.default_radius_m = default_radius_m
        self.protocol_prefix = protocol_prefix

        self.state = CheckInStep.MODE_SELECT
        self.attempt = CheckInAttempt()
        self.result: Optional[CheckInResult] = None
        # (state, attempt as it was on entering that state)
        self._history = []

    # =================== NAVIGATION ===================

    @property
    def path(self) -> List[CheckInStep]:
        return steps_for(self.attempt.session)

    def _expect(self, *states: CheckInStep) -> None:
        if self.state not in states:
            raise InvalidTransition(
                f"Cannot do this at step {self.state.value}"
            )

    def _advance(self, attempt: CheckInAttempt, next_state: CheckInStep) -> None:
        self._history.append((self.state, self.attempt))
        self.attempt = attempt
        self.state = next_state

    def back(self) -> CheckInStep:
        """Return to the previous state without side effects."""
        if self.state in TERMINAL_STATES + (CheckInStep.SUBMITTING,) or not self._history:
            raise InvalidTransition(f"Cannot go back from step {self.state.value}")

        self.state, self.attempt = self._history.pop()
        return self.state

    # =================== STEPS ===================

    def select_mode(self, user_id=None) -> CheckInStep:
        self._expect(CheckInStep.MODE_SELECT)
        self._advance(steps.select_mode(self.attempt, user_id), CheckInStep.DATA_ENTRY)
        return self.state

    def enter_data(self, session_reference: Dict, entry_code: str, enrollment: str = None) -> CheckInStep:
        """Validate the claim. Any failure leaves the workflow at DATA_ENTRY."""
        self._expect(CheckInStep.DATA_ENTRY)
        attempt = steps.validate_entry(self.attempt, session_reference, entry_code, enrollment)
        path = steps_for(attempt.session)
        self._advance(attempt, path[path.index(CheckInStep.DATA_ENTRY) + 1])
        return self.state

    def capture_location(self, coordinate: Optional[Coordinate] = None) -> CheckInStep:
        """Record a coordinate, or None when unavailable, denied, timed out or skipped."""
        self._expect(CheckInStep.GEO_CHECK)
        attempt = steps.record_location(self.attempt, coordinate, self.default_radius_m)
        self._advance(attempt, CheckInStep.PHOTO_CAPTURE)
        return self.state

    def capture_photo(self, blob: bytes = None, extension: str = 'png', skip_reason: str = None) -> CheckInStep:
        self._expect(CheckInStep.PHOTO_CAPTURE)
        capture = self._capture('photo', blob, extension, skip_reason)
        self._advance(steps.record_photo(self.attempt, capture), CheckInStep.SIGNATURE_CAPTURE)
        return self.state

    def capture_signature(self, blob: bytes = None, extension: str = 'png', skip_reason: str = None) -> CheckInStep:
        self._expect(CheckInStep.SIGNATURE_CAPTURE)
        capture = self._capture('signature', blob, extension, skip_reason)
        self._advance(steps.record_signature(self.attempt, capture), CheckInStep.CONFIRM)
        return self.state

    def attach_device(self, signals: Optional[DeviceSignals], user_agent: str = None, ip_address: str = None) -> None:
        """Attach provenance; allowed any time before submission."""
        if self.state == CheckInStep.SUBMITTING or self.state in TERMINAL_STATES:
            raise InvalidTransition("Device signals must be attached before submission")
        self.attempt = steps.record_device(self.attempt, signals, user_agent, ip_address)

    def submit(self) -> CheckInResult:
        """Write the record.

        Retryable failures return the workflow to CONFIRM; any other failure
        ends the attempt in FAILED.
        """
        self._expect(CheckInStep.CONFIRM)
        self.state = CheckInStep.SUBMITTING

        try:
            result = TrustService.finalize(self.attempt, self.protocol_prefix)
        except CheckInError as e:
            logger.info("Submission failed: %s (retryable=%s)", e.code, e.retryable)
            self.state = CheckInStep.CONFIRM if e.retryable else CheckInStep.FAILED
            raise

        self.result = result
        self.state = CheckInStep.SUCCESS
        return result

    # =================== EVIDENCE ===================

    def _capture(self, kind: str, blob: Optional[bytes], extension: str, skip_reason: Optional[str]) -> EvidenceCapture:
        if blob is None:
            return EvidenceCapture(skip_reason=skip_reason or "not provided")

        if self.storage is None:
            return EvidenceCapture()

        try:
            return EvidenceCapture(ref=self.storage.store(blob, kind, extension))
        except EvidenceStorageFailed:
            logger.warning("Session %s: continuing without stored %s", self.attempt.session.id, kind)
            return EvidenceCapture()
