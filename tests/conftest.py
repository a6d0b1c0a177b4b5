"""
Hostel Complaint Desk - Test Configuration and Fixtures
"""
import itertools
import re
from datetime import datetime, timedelta

import pytest
import pytz

import db_config
from app import create_app
from auth_utils import generate_jwt_token, hash_password

PASSWORD = 'password123'
JWT_TEST_SECRET = 'test-jwt-secret-key-for-complaint-desk-tests'

OTP_PATTERN = re.compile(r'\b(\d{6})\b')


class FakeMailer:
    """Records outgoing mail instead of calling SendGrid"""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.raise_error = False

    def send_email(self, to_email, subject, body):
        if self.raise_error:
            raise RuntimeError('mail transport down')
        self.sent.append({'to': to_email, 'subject': subject, 'body': body})
        if self.fail:
            return {'success': False, 'message': 'mailer offline'}
        return {'success': True, 'message': f'Email sent successfully to {to_email}'}

    def messages_to(self, email):
        return [m for m in self.sent if m['to'] == email]

    def last_otp(self, email):
        messages = self.messages_to(email)
        assert messages, f'no mail sent to {email}'
        return OTP_PATTERN.search(messages[-1]['body']).group(1)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(tmp_path, mailer):
    """Fresh app on a temporary database with a synchronous outbox"""
    app = create_app({
        'TESTING': True,
        'DATABASE_PATH': str(tmp_path / 'complaints.db'),
        'UPLOAD_DIR': str(tmp_path / 'uploads'),
        'JWT_SECRET_KEY': JWT_TEST_SECRET,
        'OUTBOX_SYNC': True,
        'EMAIL_DOMAIN': 'bitmesra.ac.in',
        'COOKIE_SECURE': False,
    }, mailer=mailer)
    yield app
    app.extensions['complaint_desk'].outbox.stop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions['complaint_desk']


@pytest.fixture
def make_student(services):
    """Create a verified student directly in the store"""
    counter = itertools.count(1)

    def _make(email=None, roll_no=None, name='Test Student', hostel_no=None, room_no=None, verified=True):
        n = next(counter)
        fields = {
            'name': name,
            'roll_no': roll_no or f'BTECH{n:05d}',
            'email': email or f'student{n}@bitmesra.ac.in',
            'mobile': '9876543210',
            'session': '2023-24',
            'department': 'Computer Science',
            'hostel_no': hostel_no,
            'room_no': room_no,
        }
        student_id = services.identities.create_student(fields, hash_password(PASSWORD), None, None)
        if verified:
            services.identities.mark_verified('student', student_id)
        return services.identities.get('student', student_id)

    return _make


@pytest.fixture
def make_authority(services):
    """Create a verified authority directly in the store"""
    counter = itertools.count(1)

    def _make(designation='Hostel Clerk', hostel_no=None, email=None, name=None):
        n = next(counter)
        fields = {
            'name': name or f'{designation} {n}',
            'email': email or f'authority{n}@bitmesra.ac.in',
            'mobile': '9123456780',
            'designation': designation,
            'department': 'Network' if designation == 'Network Department' else None,
            'hostel_no': hostel_no,
        }
        authority_id = services.identities.create_authority(fields, hash_password(PASSWORD), None, None)
        services.identities.mark_verified('authority', authority_id)
        return services.identities.get('authority', authority_id)

    return _make


@pytest.fixture
def make_admin(services):
    def _make(email='admin@bitmesra.ac.in'):
        admin_id = services.identities.create_admin(email, hash_password(PASSWORD))
        return services.identities.get('admin', admin_id)

    return _make


@pytest.fixture
def auth_headers(app, services):
    """Bearer header for an account record"""
    def _headers(role, record):
        with app.app_context():
            principal = services.identities.load_principal(role, record['id'])
            token = generate_jwt_token(record['id'], role, principal.token_claims())
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture
def file_complaint(client, auth_headers):
    """POST a complaint as a student and return the response JSON"""
    def _file(student, expected_status=201, **payload):
        body = {'type': 'Hostel', 'subType': 'Electrical', 'description': 'Light not working',
                'hostelNo': 4, 'roomNo': '12'}
        body.update(payload)
        body = {k: v for k, v in body.items() if v is not None}
        response = client.post('/api/complaints', json=body, headers=auth_headers('student', student))
        assert response.status_code == expected_status, response.get_json()
        return response.get_json()

    return _file


@pytest.fixture
def advance_clock(monkeypatch):
    """Move db_config.utc_now forward (OTP expiry, rate limit windows)"""
    def _advance(**delta):
        moved = datetime.now(pytz.utc) + timedelta(**delta)
        monkeypatch.setattr(db_config, 'utc_now', lambda: moved)

    return _advance
