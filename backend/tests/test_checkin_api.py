"""Test check-in endpoints."""
import pytest
from checkin.models import AttendanceRecord
from conftest import ENTRY_CODE, GEO_ENTRY_CODE, data_url, login

SIGNALS = {'user_agent': 'Mozilla/5.0', 'language': 'pt-BR', 'screen': '390x844', 'timezone': 'America/Sao_Paulo'}

def submit_body(enrollment='2024001', token='open-token', code=ENTRY_CODE, **evidence):
    body = {
        'session_reference': {'token': token},
        'entry_code': code,
        'identity_claim': {'enrollment': enrollment},
        'evidence': {
            'photo': {'data': data_url(b'selfie')},
            'signature': data_url(b'signature'),
        }
    }
    body['evidence'].update(evidence)
    return body

def test_health_check(client):
    response = client.get('/api/checkin/health')
    assert response.status_code == 200
    assert response.get_json()['message'] == 'Check-in service is running'

def test_session_requirements(client, classroom):
    response = client.get('/api/checkin/sessions/geo-token')

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['require_geo'] is True
    assert data['radius_m'] == 100
    assert data['session']['class_code'] == 'TURMA2'
    assert 'geo_check' in data['steps']
    assert 'entry_code_hash' not in data['session']
    assert data['session']['class_name'] == 'Turma 2'
    assert data['session']['status'] == 'open'

def test_closed_session_is_not_found(client, classroom):
    response = client.get('/api/checkin/sessions/closed-token')

    assert response.status_code == 404
    assert response.get_json()['code'] == 'SessionNotFound'

def test_lookup_by_class_code(client, classroom):
    response = client.post('/api/checkin/sessions/lookup', json={'class_code': ' turma1 '})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['session']['public_token'] == 'open-token'
    assert 'geo_check' not in data['steps']

@pytest.mark.parametrize('class_code, code', [
    ('IDLE01', 'NoOpenSession'),
    ('OLD01', 'ClassNotFound'),
    ('NOPE', 'ClassNotFound'),
])
def test_lookup_failures(client, classroom, class_code, code):
    response = client.post('/api/checkin/sessions/lookup', json={'class_code': class_code})
    assert response.status_code == 404
    assert response.get_json()['code'] == code

def test_session_qr(client, classroom):
    response = client.get('/api/checkin/sessions/open-token/qr')

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['url'].endswith('?s=open-token')
    assert data['qr_image'].startswith('data:image/png;base64,')

def test_validate_ok(client, classroom):
    response = client.post('/api/checkin/validate', json={
        'session_reference': {'token': 'open-token'},
        'entry_code': ' abc123 ',
        'identity_claim': '2024001'
    })

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['student']['enrollment'] == '2024001'
    assert data['identity_mode'] == 'anonymous'
    assert data['next_step'] == 'photo_capture'
    assert AttendanceRecord.query.count() == 0

def test_validate_wrong_code(client, classroom):
    response = client.post('/api/checkin/validate', json={
        'session_reference': {'token': 'open-token'},
        'entry_code': 'XYZ999',
        'identity_claim': {'enrollment': '2024001'}
    })

    assert response.status_code == 401
    data = response.get_json()
    assert data['code'] == 'InvalidEntryCode'
    assert data['field'] == 'entry_code'
    assert data['retryable'] is False

def test_validate_not_enrolled(client, classroom):
    response = client.post('/api/checkin/validate', json={
        'session_reference': {'token': 'open-token'},
        'entry_code': ENTRY_CODE,
        'identity_claim': {'enrollment': '2024004'}
    })
    assert response.status_code == 403
    assert response.get_json()['code'] == 'NotEnrolled'

def test_submit_all_evidence(client, classroom, tmp_path):
    response = client.post('/api/checkin/submit', json=submit_body())

    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'Attendance registered'
    data = body['data']
    assert data['final_status'] == 'present'
    assert data['needs_review'] is False
    assert data['protocol_number'].startswith('FREQ-')

    record = AttendanceRecord.query.filter_by(protocol=data['protocol_number']).one()
    assert record.source.value == 'self_anonymous'
    assert record.selfie_path.startswith('photo/')
    assert record.signature_path.startswith('signature/')
    assert (tmp_path / 'evidence' / record.selfie_path).read_bytes() == b'selfie'

def test_submit_declined_location(client, classroom):
    body = submit_body(token='geo-token', code=GEO_ENTRY_CODE, geo={'error': 'permission denied'})

    response = client.post('/api/checkin/submit', json=body)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['final_status'] == 'absent'
    assert data['needs_review'] is True
    assert response.get_json()['message'] == 'Attendance registered and sent for review'

def test_submit_inside_geofence(client, classroom):
    body = submit_body(token='geo-token', code=GEO_ENTRY_CODE, geo={'latitude': 0.0, 'longitude': 0.0})

    response = client.post('/api/checkin/submit', json=body)

    assert response.get_json()['data']['final_status'] == 'present'

def test_slow_location_counts_as_timeout(client, classroom):
    body = submit_body(
        token='geo-token', code=GEO_ENTRY_CODE,
        geo={'latitude': 0.0, 'longitude': 0.0, 'elapsed_ms': 15000}
    )

    response = client.post('/api/checkin/submit', json=body)

    protocol = response.get_json()['data']['protocol_number']
    record = AttendanceRecord.query.filter_by(protocol=protocol).one()
    assert record.review_reason == 'location unavailable/skipped'
    assert record.geo_lat is None

def test_skipped_photo_is_reviewed(client, classroom):
    body = submit_body(photo={'skipped': True, 'reason': 'camera denied'})

    response = client.post('/api/checkin/submit', json=body)

    protocol = response.get_json()['data']['protocol_number']
    record = AttendanceRecord.query.filter_by(protocol=protocol).one()
    assert record.review_reason == 'photo skipped: camera denied'
    assert record.selfie_path is None

def test_duplicate_submission(client, classroom):
    assert client.post('/api/checkin/submit', json=submit_body()).status_code == 201

    response = client.post('/api/checkin/submit', json=submit_body())

    assert response.status_code == 409
    assert response.get_json()['code'] == 'AlreadyCheckedIn'
    assert AttendanceRecord.query.count() == 1

def test_missing_entry_code(client, classroom):
    body = submit_body()
    del body['entry_code']

    response = client.post('/api/checkin/submit', json=body)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Entry code is required'

def test_non_json_body(client, classroom):
    response = client.post('/api/checkin/submit', data='nope', content_type='text/plain')
    assert response.status_code == 400

def test_authenticated_submit(client, classroom, student_user):
    token = login(client, 'ana@example.com', 'password123')
    body = submit_body()
    del body['identity_claim']

    response = client.post('/api/checkin/submit', json=body,
        headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 201
    protocol = response.get_json()['data']['protocol_number']
    record = AttendanceRecord.query.filter_by(protocol=protocol).one()
    assert record.source.value == 'self_authenticated'
    assert record.student_id == classroom.student.id

def test_shared_devices_report(client, classroom, teacher_user):
    for enrollment in ('2024001', '2024002'):
        body = submit_body(enrollment=enrollment)
        body['device_signals'] = SIGNALS
        response = client.post('/api/checkin/submit', json=body,
            headers={'X-Forwarded-For': '10.0.0.7, 10.0.0.1'})
        assert response.status_code == 201

    token = login(client, 'teacher@example.com', 'teacher123')
    response = client.get(f'/api/checkin/sessions/{classroom.session.id}/shared-devices',
        headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    shared = response.get_json()['data']['shared_devices']
    assert len(shared) == 1
    assert shared[0]['count'] == 2
    assert sorted(shared[0]['student_ids']) == sorted([classroom.student.id, classroom.classmate.id])
    assert AttendanceRecord.query.first().ip_address == '10.0.0.7'

def test_shared_devices_requires_token(client, classroom):
    response = client.get(f'/api/checkin/sessions/{classroom.session.id}/shared-devices')
    assert response.status_code == 401

def test_shared_devices_requires_teacher(client, classroom, student_user):
    token = login(client, 'ana@example.com', 'password123')
    response = client.get(f'/api/checkin/sessions/{classroom.session.id}/shared-devices',
        headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 403
