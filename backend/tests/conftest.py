"""Shared fixtures for the check-in test suite."""
import base64
from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from checkin import create_app, db
from checkin.models import (
    User, UserRole, ClassGroup, Student, ClassMembership, EntityStatus,
    AttendanceSession, SessionStatus
)

ENTRY_CODE = 'ABC123'
GEO_ENTRY_CODE = 'GEO777'

def data_url(content: bytes = b'fake-image-bytes', mime: str = 'image/png') -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode()}"

@pytest.fixture
def app_config():
    """Config overrides for the test app; override in a module to change them."""
    return {}

@pytest.fixture
def app(app_config, tmp_path):
    """Create test app."""
    overrides = {'EVIDENCE_UPLOAD_FOLDER': str(tmp_path / 'evidence')}
    overrides.update(app_config)
    app = create_app('testing', overrides)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

def _session(class_group, token, code, **kwargs):
    session = AttendanceSession(
        class_id=class_group.id,
        public_token=token,
        subject_code='MAT101',
        **kwargs
    )
    session.set_entry_code(code)
    db.session.add(session)
    return session

@pytest.fixture
def classroom(app):
    """Two classes, a handful of students and sessions in every state that matters."""
    turma = ClassGroup(code='TURMA1', name='Turma 1', period='morning')
    geo_turma = ClassGroup(code='TURMA2', name='Turma 2', period='evening')
    idle_turma = ClassGroup(code='IDLE01', name='No session')
    old_turma = ClassGroup(code='OLD01', name='Inactive', status=EntityStatus.INACTIVE)
    db.session.add_all([turma, geo_turma, idle_turma, old_turma])
    db.session.flush()

    student = Student(enrollment='2024001', name='Ana Souza')
    classmate = Student(enrollment='2024002', name='Bruno Lima')
    inactive = Student(enrollment='2024003', name='Caio Reis', status=EntityStatus.INACTIVE)
    outsider = Student(enrollment='2024004', name='Duda Alves')
    lapsed = Student(enrollment='2024005', name='Eva Rocha')
    graduated = Student(enrollment='2024006', name='Fabio Melo')
    db.session.add_all([student, classmate, inactive, outsider, lapsed, graduated])
    db.session.flush()

    db.session.add_all([
        ClassMembership(class_id=turma.id, student_id=student.id),
        ClassMembership(class_id=turma.id, student_id=classmate.id),
        ClassMembership(class_id=turma.id, student_id=inactive.id),
        ClassMembership(class_id=turma.id, student_id=lapsed.id, status=EntityStatus.INACTIVE),
        ClassMembership(
            class_id=turma.id, student_id=graduated.id,
            start_date=date.today() - timedelta(days=200),
            end_date=date.today() - timedelta(days=1)
        ),
        ClassMembership(class_id=geo_turma.id, student_id=student.id),
    ])

    open_session = _session(turma, 'open-token', ENTRY_CODE, require_geo=False)
    closed_session = _session(turma, 'closed-token', ENTRY_CODE, status=SessionStatus.CLOSED)
    geo_session = _session(
        geo_turma, 'geo-token', GEO_ENTRY_CODE,
        require_geo=True, geo_lat=0.0, geo_lng=0.0, geo_radius_m=100
    )
    db.session.commit()

    return SimpleNamespace(
        turma=turma, geo_turma=geo_turma, idle_turma=idle_turma, old_turma=old_turma,
        student=student, classmate=classmate, inactive=inactive, outsider=outsider,
        lapsed=lapsed, graduated=graduated,
        session=open_session, closed_session=closed_session, geo_session=geo_session
    )

@pytest.fixture
def student_user(app, classroom):
    """Login linked to the enrolled student."""
    user = User(email='ana@example.com', name='Ana Souza', role=UserRole.STUDENT)
    user.set_password('password123')
    user.save()
    classroom.student.user_id = user.id
    db.session.commit()
    return user

@pytest.fixture
def teacher_user(app):
    user = User(email='teacher@example.com', name='Teacher', role=UserRole.TEACHER)
    user.set_password('teacher123')
    return user.save()

def login(client, email, password):
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200
    return response.get_json()['data']['access_token']
