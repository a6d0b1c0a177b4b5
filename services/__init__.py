"""
Complaint Desk Services Package
Stores, mail delivery and the complaint/feedback/notification/account services.
build_services() wires them once per app; routes reach them through
current_app.extensions['complaint_desk'].
"""
from dataclasses import dataclass

from auth_utils import RateLimiter
from services.account_service import AccountService
from services.complaint_db import ComplaintDatabase
from services.complaint_service import ComplaintService
from services.email_service import EmailService
from services.feedback_service import FeedbackService
from services.identity_store import IdentityStore
from services.notification_service import NotificationService
from services.outbox import NotificationOutbox
from services.stats_service import StatsService


@dataclass
class AppServices:
    identities: IdentityStore
    accounts: AccountService
    complaints: ComplaintService
    feedback: FeedbackService
    notifications: NotificationService
    stats: StatsService
    mailer: object
    outbox: NotificationOutbox


def build_services(config, mailer=None) -> AppServices:
    """Create every service from a Flask config mapping"""
    db_path = config['DATABASE_PATH']

    if mailer is None:
        mailer = EmailService(config['SENDGRID_API_KEY'], config['NOTIFICATION_EMAIL_FROM'])

    identities = IdentityStore(db_path)
    complaint_db = ComplaintDatabase(db_path)
    outbox = NotificationOutbox(mailer, sync=config['OUTBOX_SYNC'])

    return AppServices(
        identities=identities,
        accounts=AccountService(
            identities, mailer, RateLimiter(),
            email_domain=config['EMAIL_DOMAIN'],
            otp_expiry_minutes=config['OTP_EXPIRY_MINUTES']
        ),
        complaints=ComplaintService(complaint_db, identities, outbox),
        feedback=FeedbackService(db_path, complaint_db),
        notifications=NotificationService(db_path, config['UPLOAD_DIR'], config['ALLOWED_ATTACHMENT_TYPES']),
        stats=StatsService(db_path),
        mailer=mailer,
        outbox=outbox,
    )


__all__ = [
    'AppServices', 'build_services',
    'AccountService', 'ComplaintService', 'FeedbackService',
    'NotificationService', 'StatsService', 'IdentityStore',
    'EmailService', 'NotificationOutbox',
]
