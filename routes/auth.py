"""
Authentication Endpoints
Sign-up with OTP verification, login (bearer token + HTTP-only cookie),
logout, password reset and the current-identity check.
"""
from flask import Blueprint, current_app, jsonify, request

from auth_utils import require_auth
from routes import error_response, get_services, json_body
from services.account_service import user_summary
from services.complaint_config import ROLE_STUDENT, ROLE_AUTHORITY, ROLE_ADMIN

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _otp_message(result):
    if result['otpSent']:
        return 'OTP sent to your email. Please verify to complete registration.'
    return 'Account created, but the OTP email could not be sent. Use resend OTP to try again.'


def _with_auth_cookie(payload, token):
    response = jsonify(payload)
    response.set_cookie(
        current_app.config['AUTH_COOKIE_NAME'],
        token,
        httponly=True,
        secure=current_app.config['COOKIE_SECURE'],
        samesite='Lax',
        max_age=current_app.config['JWT_EXPIRY_HOURS'] * 3600
    )
    return response


# ============================================
# Sign-up & verification
# ============================================

@auth_bp.route('/student-signup', methods=['POST'])
def student_signup():
    """Register a student and email a verification OTP"""
    try:
        result = get_services().accounts.register_student(json_body())
        return jsonify({'success': True, 'message': _otp_message(result), **result}), 201
    except Exception as e:
        return error_response(e, 'signup')


@auth_bp.route('/authority-signup', methods=['POST'])
def authority_signup():
    """Register an authority and email a verification OTP"""
    try:
        result = get_services().accounts.register_authority(json_body())
        return jsonify({'success': True, 'message': _otp_message(result), **result}), 201
    except Exception as e:
        return error_response(e, 'signup')


def _verify(role):
    try:
        result = get_services().accounts.verify_email(role, json_body())
        payload = {
            'success': True,
            'message': 'Email verified successfully. You are now logged in.',
            **result
        }
        return _with_auth_cookie(payload, result['token'])
    except Exception as e:
        return error_response(e, 'email verification')


@auth_bp.route('/verify-email', methods=['POST'])
def verify_student_email():
    return _verify(ROLE_STUDENT)


@auth_bp.route('/verify-authority-email', methods=['POST'])
def verify_authority_email():
    return _verify(ROLE_AUTHORITY)


@auth_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    """Re-issue a verification OTP (rate limited, 60s cooldown)"""
    try:
        result = get_services().accounts.resend_otp(json_body())
        if not result['otpSent']:
            return jsonify({'success': False, 'message': 'Failed to send OTP email. Please try again.'}), 500
        return jsonify({'success': True, 'message': 'OTP sent successfully to your email', **result})
    except Exception as e:
        return error_response(e, 'OTP resend')


# ============================================
# Login / logout
# ============================================

def _login(role):
    try:
        result = get_services().accounts.login(role, json_body())
        return _with_auth_cookie({'success': True, 'message': 'Login successful', **result}, result['token'])
    except Exception as e:
        return error_response(e, 'login')


@auth_bp.route('/student-login', methods=['POST'])
def student_login():
    return _login(ROLE_STUDENT)


@auth_bp.route('/authority-login', methods=['POST'])
def authority_login():
    return _login(ROLE_AUTHORITY)


@auth_bp.route('/admin-login', methods=['POST'])
def admin_login():
    return _login(ROLE_ADMIN)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = jsonify({'success': True, 'message': 'Logged out successfully'})
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'])
    return response


# ============================================
# Password reset
# ============================================

@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    try:
        result = get_services().accounts.forgot_password(json_body())
        message = 'OTP sent to your email for password reset' if result['otpSent'] \
            else 'Reset code issued, but the email could not be sent. Please try again.'
        return jsonify({'success': True, 'message': message, **result})
    except Exception as e:
        return error_response(e, 'password reset')


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    try:
        get_services().accounts.reset_password(json_body())
        return jsonify({
            'success': True,
            'message': 'Password reset successfully. You can now login with your new password.'
        })
    except Exception as e:
        return error_response(e, 'password reset')


@auth_bp.route('/check-auth', methods=['GET'])
@require_auth()
def check_auth():
    """Current authenticated identity"""
    principal = request.principal
    return jsonify({'success': True, 'user': user_summary(principal.role, principal.record)})
