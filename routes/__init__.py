"""
API blueprints (all mounted under /api)
"""
import logging

from flask import current_app, jsonify, request

from services.errors import ComplaintDeskError, ValidationError

logger = logging.getLogger('routes')


def get_services():
    """The AppServices container built by create_app"""
    return current_app.extensions['complaint_desk']


def json_body() -> dict:
    """The request's JSON object, {} when the body is missing or unparseable"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(message='Request body must be a JSON object')
    return data


def error_response(error: Exception, action: str):
    """
    JSON envelope for an exception raised while handling a request.
    Service errors keep their status and message; anything else is a 500
    whose detail only goes to the log.
    """
    if isinstance(error, ComplaintDeskError):
        return jsonify(error.to_dict()), error.status_code

    logger.exception(f"SERVER_ERROR | {action} | {type(error).__name__}: {error}")
    return jsonify({'success': False, 'message': f'Server error during {action}'}), 500


def register_blueprints(app):
    from routes.admin import admin_bp
    from routes.auth import auth_bp
    from routes.complaints import complaints_bp
    from routes.feedback import feedback_bp
    from routes.notifications import notifications_bp

    for blueprint in (auth_bp, complaints_bp, feedback_bp, notifications_bp, admin_bp):
        app.register_blueprint(blueprint)
