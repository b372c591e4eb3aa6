"""Locate the open session a check-in claim refers to."""
import logging
from typing import Dict
from checkin.models.academic import ClassGroup
from checkin.models.attendance_session import AttendanceSession, SessionStatus
from checkin.utils.errors import SessionNotFound, ClassNotFound, NoOpenSession
from checkin.utils.validators import ValidationError

logger = logging.getLogger(__name__)

class SessionResolver:
    """Resolves sessions by public token or by class code. Read only."""

    @staticmethod
    def by_token(token: str) -> AttendanceSession:
        """Open session for a public token."""
        token = (token or '').strip()
        session = None
        if token:
            session = AttendanceSession.query.filter_by(public_token=token).first()

        if not session or not session.is_open():
            logger.warning("Session lookup failed for token %s", token[:8])
            raise SessionNotFound()

        return session

    @staticmethod
    def by_class_code(class_code: str) -> AttendanceSession:
        """Most recently opened OPEN session of the active class with this code."""
        class_group = ClassGroup.find_active_by_code(class_code)
        if not class_group:
            logger.warning("No active class for code %r", class_code)
            raise ClassNotFound()

        session = (
            AttendanceSession.query
            .filter_by(class_id=class_group.id, status=SessionStatus.OPEN)
            .order_by(AttendanceSession.opened_at.desc(), AttendanceSession.id.desc())
            .first()
        )
        if not session:
            logger.info("Class %s has no open session", class_group.code)
            raise NoOpenSession()

        return session

    @classmethod
    def resolve(cls, reference: Dict) -> AttendanceSession:
        """Resolve ``{"token": ...}`` or ``{"class_code": ...}``."""
        if not isinstance(reference, dict):
            raise ValidationError("Session reference is required")

        if reference.get('token'):
            return cls.by_token(reference['token'])
        if reference.get('class_code'):
            return cls.by_class_code(reference['class_code'])

        raise ValidationError("Session reference needs a token or a class code")
