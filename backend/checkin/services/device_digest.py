"""Non-identifying device fingerprint for fraud analytics."""
import hashlib
from collections import defaultdict
from dataclasses import dataclass, fields
from typing import Dict, List, Optional
from checkin.models.attendance import AttendanceRecord

DELIMITER = '|'

@dataclass(frozen=True)
class DeviceSignals:
    """Environment signals in hashing order. Missing signals stay None."""
    user_agent: Optional[str] = None
    language: Optional[str] = None
    screen: Optional[str] = None
    hardware_concurrency: Optional[str] = None
    timezone: Optional[str] = None
    canvas: Optional[str] = None
    webgl: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'DeviceSignals':
        """Build from a loosely typed payload, ignoring unknown keys."""
        data = data or {}
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            values[f.name] = None if value is None else str(value)
        return cls(**values)

    def ordered(self) -> List[tuple]:
        return [(f.name, getattr(self, f.name)) for f in fields(self)]

def compute_digest(signals: DeviceSignals) -> Optional[str]:
    """SHA-256 hex over the present signals, or None when there are none.

    Each present signal is encoded as ``name=value`` so that dropping one
    signal cannot make two different tuples collide. Values are hashed as
    sent; only None counts as missing.
    """
    parts = [
        f"{name}={value}"
        for name, value in signals.ordered()
        if value is not None
    ]
    if not parts:
        return None
    return hashlib.sha256(DELIMITER.join(parts).encode('utf-8')).hexdigest()

def shared_device_report(session_id: int) -> List[Dict]:
    """Digests used by more than one record of a session."""
    records = (
        AttendanceRecord.query
        .filter(
            AttendanceRecord.session_id == session_id,
            AttendanceRecord.device_fingerprint.isnot(None)
        )
        .order_by(AttendanceRecord.registered_at)
        .all()
    )

    groups = defaultdict(list)
    for record in records:
        groups[record.device_fingerprint].append(record)

    return [
        {
            'device_fingerprint': fingerprint,
            'count': len(group),
            'protocols': [r.protocol for r in group],
            'student_ids': [r.student_id for r in group]
        }
        for fingerprint, group in groups.items()
        if len(group) > 1
    ]
