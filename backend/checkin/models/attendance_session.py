"""Attendance session opened by a teacher for one class meeting."""
from datetime import datetime
from enum import Enum
import hashlib
import secrets
from checkin import db
from checkin.models.base import BaseModel

class SessionStatus(Enum):
    """Session lifecycle. Only OPEN sessions accept check-ins."""
    OPEN = 'open'
    CLOSED = 'closed'
    AUDIT_FINALIZED = 'audit_finalized'
    LOCKED = 'locked'

class AttendanceSession(BaseModel):
    """Session for tracking attendance with a public token and an entry code."""

    __tablename__ = 'attendance_sessions'

    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=False, index=True)
    subject_code = db.Column(db.String(30), nullable=True)
    professor_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    public_token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    entry_code_hash = db.Column(db.String(64), nullable=False)  # sha256 hex, never plaintext

    # Geofence
    require_geo = db.Column(db.Boolean, default=False, nullable=False)
    geo_lat = db.Column(db.Float, nullable=True)
    geo_lng = db.Column(db.Float, nullable=True)
    geo_radius_m = db.Column(db.Integer, nullable=True)

    status = db.Column(db.Enum(SessionStatus), nullable=False, default=SessionStatus.OPEN, index=True)
    opened_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    closed_at = db.Column(db.DateTime, nullable=True)

    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    @staticmethod
    def generate_public_token() -> str:
        """Generate unique public token."""
        return secrets.token_urlsafe(24)

    @staticmethod
    def hash_entry_code(code: str) -> str:
        """SHA-256 hex of the normalized (trimmed, uppercased) entry code."""
        normalized = (code or '').strip().upper()
        return hashlib.sha256(normalized.encode('utf-8')).hexdigest()

    def set_entry_code(self, code: str) -> None:
        """Store only the hash of the entry code."""
        self.entry_code_hash = self.hash_entry_code(code)

    def is_open(self) -> bool:
        return self.status == SessionStatus.OPEN

    def requires_geofence(self) -> bool:
        return bool(self.require_geo)

    def has_reference_location(self) -> bool:
        return self.geo_lat is not None and self.geo_lng is not None

    def to_dict(self):
        """Public view of the session; the entry code hash never leaves the model."""
        data = super().to_dict(exclude=['entry_code_hash'])
        data['class_code'] = self.class_group.code if self.class_group else None
        data['class_name'] = self.class_group.name if self.class_group else None
        return data

    def __repr__(self):
        return f'<AttendanceSession {self.id} {self.status.value if self.status else None}>'
