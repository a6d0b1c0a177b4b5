"""
SendGrid wrapper and message templates
"""
from services.email_service import EmailService, otp_email, resolution_email


def test_unconfigured_sender_reports_failure():
    result = EmailService(None, 'noreply@bitmesra.ac.in').send_email('a@bitmesra.ac.in', 'Hi', 'Body')
    assert result['success'] is False
    assert result['error'] == 'not_configured'


def test_invalid_recipient_is_blocked():
    result = EmailService(None, 'noreply@bitmesra.ac.in').send_email('not-an-email', 'Hi', 'Body')
    assert result['error'] == 'invalid_recipient'


def test_templates():
    subject, body = otp_email('Rahul', '123456', 10)
    assert '123456' in body
    assert '10 minutes' in body
    assert 'Verify' in subject

    subject, body = resolution_email('CMP-ABC-123456', None)
    assert subject == 'Complaint CMP-ABC-123456 resolved'
    assert 'Remarks: None' in body
