"""Check-in API endpoints."""
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from flask_limiter.util import get_remote_address
from checkin import limiter
from checkin.models.attendance_session import AttendanceSession
from checkin.services.checkin_workflow import CheckInWorkflow, CheckInStep, steps_for
from checkin.services.device_digest import DeviceSignals, shared_device_report
from checkin.services.evidence_storage import EvidenceStorage, decode_blob
from checkin.services.gps_service import Coordinate
from checkin.services.qr_service import QRService
from checkin.services.session_resolver import SessionResolver
from checkin.utils.decorators import teacher_required
from checkin.utils.errors import CheckInError, InvalidEntryCode
from checkin.utils.helpers import success_response, error_response, client_ip
from checkin.utils.validators import Validator, ValidationError

checkin_bp = Blueprint('checkin', __name__)

MAX_SKIP_REASON_LENGTH = 200

def checkin_rate_limit() -> str:
    return current_app.config.get('CHECKIN_RATE_LIMIT', '20 per minute')

def session_read_limit() -> str:
    return current_app.config.get('CHECKIN_READ_RATE_LIMIT', '120 per minute')

def checkin_rate_key() -> str:
    """Client address plus the session being checked in to.

    A classroom behind one NAT address shares a key per session, so only
    wrong entry codes are charged to it (see ``is_wrong_entry_code``).
    """
    data = request.get_json(silent=True)
    reference = data.get('session_reference') if isinstance(data, dict) else None
    target = ''
    if isinstance(reference, dict):
        if reference.get('token'):
            target = str(reference['token']).strip()
        elif reference.get('class_code'):
            target = str(reference['class_code']).strip().upper()
    return f"{get_remote_address()}|{target}"

def is_wrong_entry_code(response) -> bool:
    """Deduct from the limit only when the entry code was rejected."""
    if response.status_code != InvalidEntryCode.status_code:
        return False
    body = response.get_json(silent=True) or {}
    return body.get('code') == InvalidEntryCode.code

# /validate and /submit draw on one budget
checkin_limit = limiter.shared_limit(
    checkin_rate_limit,
    scope='checkin',
    key_func=checkin_rate_key,
    deduct_when=is_wrong_entry_code
)

@checkin_bp.errorhandler(CheckInError)
def handle_checkin_error(error: CheckInError):
    """Typed protocol errors carry their own status and field."""
    return jsonify(error.to_dict()), error.status_code

# =================== HELPERS ===================

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON")
    return data

def _requirements(session: AttendanceSession) -> dict:
    """What the client must collect for ``session``."""
    config = current_app.config
    radius = None
    if session.requires_geofence():
        radius = session.geo_radius_m
        if radius is None:
            radius = config['CHECKIN_DEFAULT_GEOFENCE_RADIUS_M']

    return {
        'session': session.to_dict(),
        'require_geo': session.requires_geofence(),
        'radius_m': radius,
        'geolocation_timeout_seconds': config['GEOLOCATION_TIMEOUT_SECONDS'],
        'steps': [step.value for step in steps_for(session)],
        'evidence': {
            'photo': {'required': False, 'skippable': True},
            'signature': {'required': False, 'skippable': True}
        }
    }

def _new_workflow() -> CheckInWorkflow:
    config = current_app.config
    return CheckInWorkflow(
        storage=EvidenceStorage(config['EVIDENCE_UPLOAD_FOLDER']),
        default_radius_m=config['CHECKIN_DEFAULT_GEOFENCE_RADIUS_M'],
        protocol_prefix=config['PROTOCOL_PREFIX']
    )

def _enrollment_from(claim) -> str:
    """Identity claim is either a bare enrollment string or ``{"enrollment": ...}``."""
    if isinstance(claim, dict):
        claim = claim.get('enrollment')
    return Validator.validate_enrollment(claim)

def _start(workflow: CheckInWorkflow, data: dict) -> None:
    """MODE_SELECT and DATA_ENTRY for a request body."""
    session_reference = data.get('session_reference')
    entry_code = Validator.validate_entry_code(data.get('entry_code'))

    user_id = get_jwt_identity()
    enrollment = None if user_id is not None else _enrollment_from(data.get('identity_claim'))

    workflow.select_mode(user_id)
    workflow.enter_data(session_reference, entry_code, enrollment)

def _coordinate_from(geo) -> Coordinate:
    """Coordinate, or None when denied, unsupported, timed out or skipped."""
    if not isinstance(geo, dict) or geo.get('skipped') or geo.get('error'):
        return None
    if geo.get('latitude') is None or geo.get('longitude') is None:
        return None

    elapsed_ms = geo.get('elapsed_ms')
    timeout_ms = current_app.config['GEOLOCATION_TIMEOUT_SECONDS'] * 1000
    if elapsed_ms is not None:
        try:
            if float(elapsed_ms) >= timeout_ms:
                return None
        except (TypeError, ValueError):
            raise ValidationError("elapsed_ms must be a number")

    latitude, longitude = Validator.validate_coordinates(geo['latitude'], geo['longitude'])
    return Coordinate(latitude, longitude)

def _capture_from(payload) -> dict:
    """Keyword arguments for ``capture_photo``/``capture_signature``."""
    if isinstance(payload, str):
        payload = {'data': payload}
    if not isinstance(payload, dict) or not payload:
        return {'skip_reason': 'not provided'}
    if payload.get('skipped') or not payload.get('data'):
        reason = str(payload.get('reason') or 'skipped by user')
        return {'skip_reason': reason[:MAX_SKIP_REASON_LENGTH]}

    try:
        blob, extension = decode_blob(payload['data'])
    except ValueError:
        return {'skip_reason': 'capture failed'}
    return {'blob': blob, 'extension': extension}

# =================== ENDPOINTS ===================

@checkin_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Check-in service is running')

@checkin_bp.route('/sessions/<token>', methods=['GET'])
@limiter.limit(session_read_limit)
def session_requirements(token):
    """Is this session open and what does it require."""
    session = SessionResolver.by_token(token)
    return success_response(data=_requirements(session))

@checkin_bp.route('/sessions/lookup', methods=['POST'])
@limiter.limit(session_read_limit)
def lookup_session():
    """Same as above, by class code."""
    data = _json_body()
    session = SessionResolver.by_class_code(data.get('class_code'))
    return success_response(data=_requirements(session))

@checkin_bp.route('/sessions/<token>/qr', methods=['GET'])
@limiter.limit(session_read_limit)
def session_qr(token):
    """QR code for the public check-in link of an open session."""
    session = SessionResolver.by_token(token)
    url = QRService.checkin_url(current_app.config['PUBLIC_CHECKIN_URL'], session.public_token)
    return success_response(data={
        'url': url,
        'qr_image': QRService.generate_qr_image(url)
    })

@checkin_bp.route('/validate', methods=['POST'])
@checkin_limit
@jwt_required(optional=True)
def validate():
    """DATA_ENTRY pre-check before the client starts capturing evidence."""
    data = _json_body()
    workflow = _new_workflow()
    _start(workflow, data)

    attempt = workflow.attempt
    payload = _requirements(attempt.session)
    payload['student'] = attempt.student.to_summary()
    payload['identity_mode'] = attempt.mode.value
    payload['next_step'] = workflow.state.value

    return success_response(data=payload, message='Check-in data is valid')

@checkin_bp.route('/submit', methods=['POST'])
@checkin_limit
@jwt_required(optional=True)
def submit():
    """Run the whole check-in protocol for one submission."""
    data = _json_body()
    evidence = data.get('evidence') or {}
    if not isinstance(evidence, dict):
        raise ValidationError("Evidence must be an object")

    workflow = _new_workflow()
    workflow.attach_device(
        DeviceSignals.from_dict(data.get('device_signals')),
        user_agent=request.headers.get('User-Agent'),
        ip_address=client_ip()
    )
    _start(workflow, data)

    if workflow.state == CheckInStep.GEO_CHECK:
        workflow.capture_location(_coordinate_from(evidence.get('geo')))

    workflow.capture_photo(**_capture_from(evidence.get('photo')))
    workflow.capture_signature(**_capture_from(evidence.get('signature')))

    result = workflow.submit()
    message = (
        'Attendance registered and sent for review'
        if result.needs_review else 'Attendance registered'
    )
    return success_response(data=result.to_dict(), message=message, status_code=201)

@checkin_bp.route('/sessions/<int:session_id>/shared-devices', methods=['GET'])
@jwt_required()
@teacher_required
def shared_devices(session_id):
    """Device digests used by more than one record in a session."""
    session = AttendanceSession.get_by_id(session_id)
    if not session:
        return error_response("Session not found", 404)

    return success_response(data={
        'session_id': session.id,
        'shared_devices': shared_device_report(session.id)
    })
