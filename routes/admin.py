"""
Admin Console Endpoints
System statistics and student/authority management.
"""
from flask import Blueprint, jsonify

from auth_utils import require_auth
from routes import error_response, get_services, json_body

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


@admin_bp.route('/stats', methods=['GET'])
@require_auth(['admin'])
def system_stats():
    try:
        stats = get_services().stats
        data = stats.get_system_stats()
        data['weekly'] = stats.get_weekly_chart_data()
        return jsonify({'success': True, 'data': data})
    except Exception as e:
        return error_response(e, 'fetching system stats')


@admin_bp.route('/users', methods=['GET'])
@require_auth(['admin'])
def list_users():
    try:
        return jsonify({'success': True, 'data': get_services().accounts.list_users()})
    except Exception as e:
        return error_response(e, 'fetching users')


@admin_bp.route('/users/<role>/<int:user_id>', methods=['PUT'])
@require_auth(['admin'])
def update_user(role, user_id):
    try:
        user = get_services().accounts.update_user(role, user_id, json_body())
        return jsonify({'success': True, 'data': user})
    except Exception as e:
        return error_response(e, 'updating user')


@admin_bp.route('/users/<role>/<int:user_id>', methods=['DELETE'])
@require_auth(['admin'])
def delete_user(role, user_id):
    """Delete a student (with their complaints and feedback) or an authority"""
    try:
        get_services().accounts.delete_user(role, user_id)
        return jsonify({'success': True, 'message': 'User deleted successfully'})
    except Exception as e:
        return error_response(e, 'deleting user')
