"""
Account Service
Registration with email OTP verification, login, password reset and the
admin user-management operations.
"""
import logging
from typing import Dict, Tuple

from auth_utils import (
    hash_password, verify_password, generate_jwt_token, generate_otp, otp_expiry, otp_is_valid
)
from services.complaint_config import ROLE_STUDENT, ROLE_AUTHORITY, ROLE_ADMIN, ROLES
from services.email_service import otp_email, reset_email
from services.errors import AuthenticationError, NotFoundError, RateLimited, ValidationError
from services.identity_store import IdentityStore, serialize_identity
from services.validation import (
    check_password, validate_account_update, validate_authority_signup, validate_student_signup
)

logger = logging.getLogger('account_service')

# Resend limits: 5 OTPs per email per 15 minutes, 60 seconds between sends
OTP_MAX_REQUESTS = 5
OTP_WINDOW_MINUTES = 15
OTP_RESEND_COOLDOWN_SECONDS = 60


def _email_and_otp(data: dict) -> Tuple[str, str]:
    email = str(data.get('email') or '').strip().lower()
    otp = str(data.get('otp') or '').strip()
    if not email or not otp:
        raise ValidationError(message='Email and OTP are required')
    return email, otp


def _role(data: dict, default=None) -> str:
    role = str(data.get('role') or default or '').strip().lower()
    if role not in ROLES:
        raise ValidationError([{'field': 'role', 'message': 'Invalid role specified'}])
    return role


def user_summary(role: str, record: dict) -> dict:
    """Role-scoped identity snapshot returned on login and check-auth"""
    view = serialize_identity(role, record)
    if role == ROLE_ADMIN:
        return {'id': view['id'], 'email': view['email'], 'role': role}
    return view


class AccountService:
    """Handles sign-up, verification, login and password reset for all roles"""

    def __init__(self, identities: IdentityStore, mailer, rate_limiter,
                 email_domain: str, otp_expiry_minutes: int):
        self.identities = identities
        self.mailer = mailer
        self.rate_limiter = rate_limiter
        self.email_domain = email_domain
        self.otp_expiry_minutes = otp_expiry_minutes

    def _send_otp(self, email: str, name, otp: str) -> bool:
        subject, body = otp_email(name, otp, self.otp_expiry_minutes)
        result = self.mailer.send_email(email, subject, body)
        if not result.get('success'):
            logger.warning(f"OTP_SEND_FAIL | {email} | {result.get('message')}")
        return bool(result.get('success'))

    def _issue_token(self, role: str, record: dict) -> str:
        principal = self.identities.load_principal(role, record['id'])
        return generate_jwt_token(record['id'], role, principal.token_claims())

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_student(self, data: dict) -> Dict:
        fields = validate_student_signup(data or {}, self.email_domain)

        conflict = self.identities.student_conflict(fields['email'], fields['roll_no'])
        if conflict:
            raise ValidationError(message=conflict)

        otp = generate_otp()
        self.identities.create_student(
            fields, hash_password(fields['password']), otp, otp_expiry(self.otp_expiry_minutes)
        )
        otp_sent = self._send_otp(fields['email'], fields['name'], otp)
        return {'email': fields['email'], 'otpSent': otp_sent}

    def register_authority(self, data: dict) -> Dict:
        fields = validate_authority_signup(data or {}, self.email_domain)

        if self.identities.get_by_email(ROLE_AUTHORITY, fields['email']):
            raise ValidationError(message='Authority with this email already exists')

        conflict = self.identities.routing_conflict(fields['designation'], fields['hostel_no'])
        if conflict:
            raise ValidationError([{'field': 'designation', 'message': conflict}])

        otp = generate_otp()
        self.identities.create_authority(
            fields, hash_password(fields['password']), otp, otp_expiry(self.otp_expiry_minutes)
        )
        otp_sent = self._send_otp(fields['email'], fields['name'], otp)
        return {'email': fields['email'], 'otpSent': otp_sent}

    def verify_email(self, role: str, data: dict) -> Dict:
        """Check the verification OTP, mark the account verified and log it in"""
        email, otp = _email_and_otp(data or {})
        record = self.identities.get_by_email(role, email)

        if record is None or not otp_is_valid(
                record['verification_otp'], record['verification_otp_expires'], otp):
            logger.warning(f"OTP_REJECTED | {role} | {email}")
            raise ValidationError(message='Invalid or expired OTP')

        self.identities.mark_verified(role, record['id'])
        record = self.identities.get(role, record['id'])
        return {'token': self._issue_token(role, record), 'role': role, 'user': user_summary(role, record)}

    def resend_otp(self, data: dict) -> Dict:
        data = data or {}
        role = _role(data, default=ROLE_STUDENT)
        if role == ROLE_ADMIN:
            raise ValidationError([{'field': 'role', 'message': 'Admins do not verify by email'}])

        email = str(data.get('email') or '').strip().lower()
        if not email:
            raise ValidationError([{'field': 'email', 'message': 'Email is required'}])

        record = self.identities.get_by_email(role, email)
        if record is None:
            raise ValidationError(message='Email not registered')
        if record['is_verified']:
            raise ValidationError(message='Email already verified')

        allowed, _, _ = self.rate_limiter.check(
            f"otp_{email}", max_requests=OTP_MAX_REQUESTS, window_minutes=OTP_WINDOW_MINUTES
        )
        if not allowed:
            logger.warning(f"LIMIT_HIT | {email} | otp_resend")
            raise RateLimited(f'Too many OTP requests. Try again in {OTP_WINDOW_MINUTES} minutes.')

        can_resend, wait_seconds = self.rate_limiter.cooldown(
            f"resend_{email}", cooldown_seconds=OTP_RESEND_COOLDOWN_SECONDS
        )
        if not can_resend:
            raise RateLimited(f'Please wait {wait_seconds} seconds before resending OTP')

        otp = generate_otp()
        self.identities.set_verification_otp(role, record['id'], otp, otp_expiry(self.otp_expiry_minutes))
        return {'email': email, 'otpSent': self._send_otp(email, record.get('name'), otp)}

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, role: str, data: dict) -> Dict:
        data = data or {}
        email = str(data.get('email') or '').strip().lower()
        password = data.get('password') or ''

        record = self.identities.get_by_email(role, email) if email else None
        if record is None or not verify_password(record['password_hash'], password):
            logger.warning(f"LOGIN_FAIL | {role} | {email}")
            raise AuthenticationError('Invalid credentials')

        if role != ROLE_ADMIN and not record['is_verified']:
            raise AuthenticationError('Please verify your email first')

        logger.info(f"LOGIN_OK | {role} | id={record['id']}")
        return {'token': self._issue_token(role, record), 'role': role, 'user': user_summary(role, record)}

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def forgot_password(self, data: dict) -> Dict:
        data = data or {}
        role = _role(data)
        email = str(data.get('email') or '').strip().lower()

        record = self.identities.get_by_email(role, email) if email else None
        if record is None:
            raise NotFoundError('User not found')

        otp = generate_otp()
        self.identities.set_reset_otp(role, record['id'], otp, otp_expiry(self.otp_expiry_minutes))

        subject, body = reset_email(otp, self.otp_expiry_minutes)
        result = self.mailer.send_email(email, subject, body)
        if not result.get('success'):
            logger.warning(f"RESET_OTP_SEND_FAIL | {email} | {result.get('message')}")
        return {'email': email, 'otpSent': bool(result.get('success'))}

    def reset_password(self, data: dict) -> None:
        data = data or {}
        role = _role(data)
        email, otp = _email_and_otp(data)

        errors = []
        new_password = data.get('newPassword')
        check_password(new_password, 'newPassword', errors)
        if errors:
            raise ValidationError(errors)

        record = self.identities.get_by_email(role, email)
        if record is None or not otp_is_valid(record['reset_otp'], record['reset_otp_expires'], otp):
            raise ValidationError(message='Invalid or expired OTP')

        self.identities.update_password(role, record['id'], hash_password(new_password))

    # ------------------------------------------------------------------
    # Admin user management
    # ------------------------------------------------------------------

    def list_users(self) -> Dict:
        return {
            'students': [serialize_identity(ROLE_STUDENT, r) for r in self.identities.list_accounts(ROLE_STUDENT)],
            'authorities': [serialize_identity(ROLE_AUTHORITY, r) for r in self.identities.list_accounts(ROLE_AUTHORITY)],
        }

    def update_user(self, role: str, user_id: int, data: dict) -> Dict:
        if role not in (ROLE_STUDENT, ROLE_AUTHORITY):
            raise NotFoundError('User not found')

        current = self.identities.get(role, user_id)
        if current is None:
            raise NotFoundError('User not found')

        updates = validate_account_update(role, data or {}, current)
        if role == ROLE_AUTHORITY and 'designation' in updates:
            conflict = self.identities.routing_conflict(
                updates['designation'], updates['hostel_no'], exclude_id=user_id
            )
            if conflict:
                raise ValidationError([{'field': 'designation', 'message': conflict}])

        record = self.identities.update_account(role, user_id, updates)
        logger.info(f"ACCOUNT_UPDATED | {role} | id={user_id} | fields={','.join(sorted(updates)) or '-'}")
        return serialize_identity(role, record)

    def delete_user(self, role: str, user_id: int) -> None:
        if role not in (ROLE_STUDENT, ROLE_AUTHORITY) or not self.identities.delete_account(role, user_id):
            raise NotFoundError('User not found')
