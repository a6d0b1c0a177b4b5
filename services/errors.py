"""
Service-layer exceptions
Routes translate these into the {success: false, message} JSON envelope.
"""


class ComplaintDeskError(Exception):
    """Base class for errors raised by the services package"""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'message': self.message}


class ValidationError(ComplaintDeskError):
    """Malformed or missing fields; carries itemized field errors"""
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors=None, message=None):
        self.errors = list(errors or [])
        if message is None and len(self.errors) == 1:
            message = self.errors[0]['message']
        super().__init__(message)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.errors:
            payload['errors'] = self.errors
        return payload


class AuthenticationError(ComplaintDeskError):
    status_code = 401
    message = "Not authorized to access this route"


class PermissionDenied(ComplaintDeskError):
    status_code = 403
    message = "Not authorized to access this resource"


class NotFoundError(ComplaintDeskError):
    status_code = 404
    message = "Resource not found"


class RateLimited(ComplaintDeskError):
    status_code = 429
    message = "Too many requests"
