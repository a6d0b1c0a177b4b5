# Configuration for Hostel Complaint Desk
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# JWT Authentication Configuration
JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'complaint-desk-secret-key-change-in-production')
JWT_ALGORITHM = 'HS256'
JWT_EXPIRY_HOURS = int(os.getenv('JWT_EXPIRY_HOURS', 24))

# Auth cookie (sent alongside the bearer token on login)
AUTH_COOKIE_NAME = 'token'
COOKIE_SECURE = os.getenv('COOKIE_SECURE', 'false').lower() == 'true'

# SendGrid API Key for outgoing mail (OTP + resolution notices)
SENDGRID_API_KEY = os.getenv('SENDGRID_API_KEY')
if not SENDGRID_API_KEY:
    print("[⚠] SENDGRID: API key not set, outgoing emails will be reported as failed")

# Email Configuration
NOTIFICATION_EMAIL_FROM = os.getenv('NOTIFICATION_EMAIL_FROM', 'complaints@bitmesra.ac.in')
EMAIL_DOMAIN = os.getenv('EMAIL_DOMAIN', 'bitmesra.ac.in')

# OTP lifetime for email verification and password reset
OTP_EXPIRY_MINUTES = int(os.getenv('OTP_EXPIRY_MINUTES', 10))

# Deliver outbox jobs inline instead of on the background worker
OUTBOX_SYNC = os.getenv('OUTBOX_SYNC', 'false').lower() == 'true'

# Frontend Configuration (for CORS)
FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:5173')

# Database Configuration
DATABASE_PATH = os.getenv('DATABASE_PATH', 'data/complaints.db')

# Notification attachments
UPLOAD_DIR = os.getenv('UPLOAD_DIR', 'uploads')
ALLOWED_ATTACHMENT_TYPES = ['pdf']
MAX_UPLOAD_MB = int(os.getenv('MAX_UPLOAD_MB', 5))


def as_dict():
    """Snapshot of the settings above, copied into app.config by create_app"""
    return {
        'JWT_SECRET_KEY': JWT_SECRET_KEY,
        'JWT_ALGORITHM': JWT_ALGORITHM,
        'JWT_EXPIRY_HOURS': JWT_EXPIRY_HOURS,
        'AUTH_COOKIE_NAME': AUTH_COOKIE_NAME,
        'COOKIE_SECURE': COOKIE_SECURE,
        'SENDGRID_API_KEY': SENDGRID_API_KEY,
        'NOTIFICATION_EMAIL_FROM': NOTIFICATION_EMAIL_FROM,
        'EMAIL_DOMAIN': EMAIL_DOMAIN,
        'OTP_EXPIRY_MINUTES': OTP_EXPIRY_MINUTES,
        'OUTBOX_SYNC': OUTBOX_SYNC,
        'FRONTEND_URL': FRONTEND_URL,
        'DATABASE_PATH': DATABASE_PATH,
        'UPLOAD_DIR': UPLOAD_DIR,
        'ALLOWED_ATTACHMENT_TYPES': ALLOWED_ATTACHMENT_TYPES,
        'MAX_UPLOAD_MB': MAX_UPLOAD_MB,
    }
