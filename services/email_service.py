"""
Email Service - Sends emails using the SendGrid API
Also builds the OTP, password-reset and resolution messages.
"""
import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger('email_service')


def otp_email(name, otp, expiry_minutes):
    subject = "Verify your email - Hostel Complaint Desk"
    body = (
        f"Hello {name or 'there'},\n\n"
        f"Your verification code is: {otp}\n\n"
        f"This code expires in {expiry_minutes} minutes. "
        f"If you did not create an account, you can ignore this email."
    )
    return subject, body


def reset_email(otp, expiry_minutes):
    subject = "Password reset code - Hostel Complaint Desk"
    body = (
        f"Your password reset code is: {otp}\n\n"
        f"This code expires in {expiry_minutes} minutes. "
        f"If you did not request a reset, you can ignore this email."
    )
    return subject, body


def resolution_email(token, remarks):
    subject = f"Complaint {token} resolved"
    body = (
        f"Your complaint with token {token} has been marked as Resolved.\n\n"
        f"Remarks: {remarks or 'None'}\n\n"
        f"You can now leave feedback for this complaint."
    )
    return subject, body


class EmailService:
    """Thin SendGrid wrapper; every call returns a result dict and never raises"""

    def __init__(self, api_key, from_email):
        self.from_email = from_email
        self.client = SendGridAPIClient(api_key) if api_key else None

        if self.client is None:
            logger.warning("SENDGRID_DISABLED | no API key, emails will be reported as failed")

    def send_email(self, to_email: str, subject: str, body: str) -> dict:
        """
        Send a plain-text email (rendered as simple HTML).

        Returns:
            dict with success, message and, on success, the SendGrid status code
        """
        if not to_email or '@' not in str(to_email):
            logger.warning(f"EMAIL_BLOCKED | invalid recipient '{to_email}'")
            return {
                "success": False,
                "error": "invalid_recipient",
                "message": "Cannot send email: Invalid recipient email address."
            }

        if self.client is None:
            logger.warning(f"EMAIL_NOT_SENT | {to_email} | SendGrid not configured")
            return {
                "success": False,
                "error": "not_configured",
                "message": "SendGrid not configured. Set SENDGRID_API_KEY to enable email sending."
            }

        html_body = body.replace('\n\n', '</p><p>').replace('\n', '<br>')
        message = Mail(
            from_email=self.from_email,
            to_emails=to_email.strip(),
            subject=subject,
            html_content=f'<p>{html_body}</p>'
        )

        try:
            response = self.client.send(message)
        except Exception as e:
            logger.error(f"EMAIL_FAILED | {to_email} | {type(e).__name__}: {e}")
            return {
                "success": False,
                "error": type(e).__name__,
                "message": f"Failed to send email to {to_email}"
            }

        logger.info(f"EMAIL_SENT | {to_email} | status={response.status_code}")
        return {
            "success": True,
            "status_code": response.status_code,
            "message": f"Email sent successfully to {to_email}"
        }
