"""
Authentication utilities for the complaint desk
Handles JWT tokens, password hashing, OTP generation, rate limiting and the
role-checked route decorator
"""
import jwt
import secrets
import string
import logging
from datetime import timedelta
from functools import wraps
from threading import Lock

from flask import current_app, request, jsonify
from werkzeug.security import generate_password_hash, check_password_hash

import db_config

logger = logging.getLogger('auth_utils')


def hash_password(password):
    """Hash a password using werkzeug's security features"""
    return generate_password_hash(password, method='pbkdf2:sha256')


def verify_password(password_hash, password):
    """Verify a password against its hash"""
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def generate_jwt_token(user_id, role, claims=None):
    """
    Generate a JWT token for an authenticated identity.

    Authorities also carry their routing attributes (designation,
    department, hostelNo) as extra claims; None-valued claims are dropped.
    """
    now = db_config.utc_now()
    payload = {
        'id': user_id,
        'role': role,
        'exp': now + timedelta(hours=current_app.config['JWT_EXPIRY_HOURS']),
        'iat': now
    }
    for key, value in (claims or {}).items():
        if value is not None:
            payload[key] = value

    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def decode_jwt_token(token):
    """Decode and validate a JWT token"""
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def generate_otp():
    """Generate a 6-digit OTP code"""
    return ''.join(secrets.choice(string.digits) for _ in range(6))


def otp_expiry(minutes=None):
    """Expiry timestamp for an OTP issued now"""
    if minutes is None:
        minutes = current_app.config['OTP_EXPIRY_MINUTES']
    return db_config.to_timestamp(db_config.utc_now() + timedelta(minutes=minutes))


def otp_is_valid(stored_otp, stored_expires, submitted_otp):
    """Exact match against the stored OTP, which must not have expired"""
    if not stored_otp or not stored_expires or not submitted_otp:
        return False
    if not secrets.compare_digest(str(stored_otp), str(submitted_otp).strip()):
        return False
    return db_config.utc_now() <= db_config.parse_timestamp(stored_expires)


class RateLimiter:
    """
    Sliding-window rate limiting and resend cooldowns.
    In-memory, per process; one instance is created by the app factory.
    """

    def __init__(self):
        self._requests = {}
        self._last_sent = {}
        self._lock = Lock()

    def check(self, identifier, max_requests=5, window_minutes=15):
        """Returns (allowed, remaining, reset_time)"""
        now = db_config.utc_now()
        window_start = now - timedelta(minutes=window_minutes)

        with self._lock:
            history = [t for t in self._requests.get(identifier, []) if t > window_start]

            if len(history) >= max_requests:
                self._requests[identifier] = history
                reset_time = min(history) + timedelta(minutes=window_minutes)
                return False, 0, reset_time

            history.append(now)
            self._requests[identifier] = history

        remaining = max_requests - len(history)
        return True, remaining, now + timedelta(minutes=window_minutes)

    def cooldown(self, identifier, cooldown_seconds=60):
        """Returns (allowed, wait_seconds); starts a new cooldown when allowed"""
        now = db_config.utc_now()

        with self._lock:
            last_sent = self._last_sent.get(identifier)
            if last_sent is not None:
                elapsed = (now - last_sent).total_seconds()
                if elapsed < cooldown_seconds:
                    return False, int(cooldown_seconds - elapsed)
            self._last_sent[identifier] = now

        return True, 0


def get_request_token():
    """Token from the Authorization header, falling back to the auth cookie"""
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1].strip()
    return request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])


def _unauthorized(message='Not authorized to access this route', status=401):
    return jsonify({'success': False, 'message': message}), status


def require_auth(allowed_roles=None):
    """
    Decorator to protect routes with JWT authentication.

    The identity is re-read from the store on every request so that
    account changes and deletions take effect immediately.
    Sets request.principal (routing view) and request.current_user (record).
    """
    if isinstance(allowed_roles, str):
        allowed_roles = [allowed_roles]

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            token = get_request_token()
            if not token:
                return _unauthorized()

            payload = decode_jwt_token(token)
            if not payload:
                return _unauthorized('Invalid or expired token')

            role = payload.get('role')
            if allowed_roles and role not in allowed_roles:
                return _unauthorized(status=403)

            identities = current_app.extensions['complaint_desk'].identities
            principal = identities.load_principal(role, payload.get('id'))
            if principal is None:
                logger.warning(f"AUTH_STALE_TOKEN | role={role} | id={payload.get('id')}")
                return _unauthorized('User not found')

            request.principal = principal
            request.current_user = principal.record
            return f(*args, **kwargs)

        return decorated_function
    return decorator
