"""Attendance record produced by the check-in protocol."""
from datetime import datetime
from enum import Enum
from checkin import db
from checkin.models.base import BaseModel

class AttendanceStatus(Enum):
    """Final attendance status. Check-in only writes PRESENT or ABSENT."""
    PRESENT = 'present'
    ABSENT = 'absent'
    JUSTIFIED = 'justified'

class AttendanceSource(Enum):
    """How the record was created."""
    SELF_AUTHENTICATED = 'self_authenticated'
    SELF_ANONYMOUS = 'self_anonymous'

class AttendanceRecord(BaseModel):
    """Attendance record with evidence and provenance."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )

    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    protocol = db.Column(db.String(40), unique=True, nullable=False, index=True)

    final_status = db.Column(db.Enum(AttendanceStatus), nullable=False)
    needs_review = db.Column(db.Boolean, default=False, nullable=False)
    review_reason = db.Column(db.Text, nullable=True)

    # Evidence
    selfie_path = db.Column(db.String(255), nullable=True)
    signature_path = db.Column(db.String(255), nullable=True)
    geo_lat = db.Column(db.Float, nullable=True)
    geo_lng = db.Column(db.Float, nullable=True)
    geo_ok = db.Column(db.Boolean, nullable=True)

    # Provenance
    device_fingerprint = db.Column(db.String(64), nullable=True, index=True)
    user_agent = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    source = db.Column(db.Enum(AttendanceSource), nullable=False)
    registered_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship('Student', backref=db.backref('attendance_records', lazy='dynamic'))

    def __repr__(self):
        return f'<AttendanceRecord {self.protocol} {self.session_id}-{self.student_id}>'
