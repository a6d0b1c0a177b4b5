"""
Notification Endpoints
Notices are posted as multipart forms (optional 'pdf' file) or plain JSON.
"""
from flask import Blueprint, jsonify, request

from auth_utils import require_auth
from routes import error_response, get_services, json_body

notifications_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')


@notifications_bp.route('', methods=['POST'])
@require_auth(['authority', 'admin'])
def create_notification():
    try:
        form = request.form.to_dict() if request.form else json_body()
        notification = get_services().notifications.create(
            request.principal, form, request.files.get('pdf')
        )
        return jsonify({'success': True, 'message': 'Notification created', 'data': notification}), 201
    except Exception as e:
        return error_response(e, 'notification creation')


@notifications_bp.route('/<hostel>', methods=['GET'])
@require_auth(['student', 'authority', 'admin'])
def hostel_notifications(hostel):
    """Notices for one hostel plus those sent to all hostels"""
    try:
        notifications = get_services().notifications.list_for_hostel(hostel)
        return jsonify({'success': True, 'count': len(notifications), 'data': notifications})
    except Exception as e:
        return error_response(e, 'fetching notifications')


@notifications_bp.route('/<int:notification_id>', methods=['DELETE'])
@require_auth(['authority', 'admin'])
def delete_notification(notification_id):
    try:
        if not get_services().notifications.delete(notification_id):
            return jsonify({'success': False, 'message': 'Notification not found'}), 404
        return jsonify({'success': True, 'message': 'Deleted'})
    except Exception as e:
        return error_response(e, 'notification delete')
