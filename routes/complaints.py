"""
Complaint Endpoints
"""
from flask import Blueprint, jsonify, request

from auth_utils import require_auth
from routes import error_response, get_services, json_body

complaints_bp = Blueprint('complaints', __name__, url_prefix='/api/complaints')


@complaints_bp.route('', methods=['POST'])
@require_auth(['student'])
def create_complaint():
    """File a complaint; it is routed to an authority when one matches"""
    try:
        complaint = get_services().complaints.create_complaint(request.principal, json_body())
        return jsonify({
            'success': True,
            'message': 'Complaint registered successfully',
            'token': complaint['token'],
            'data': complaint
        }), 201
    except Exception as e:
        return error_response(e, 'complaint creation')


@complaints_bp.route('/student', methods=['GET'])
@require_auth(['student'])
def student_complaints():
    try:
        complaints = get_services().complaints.list_for_student(request.principal)
        return jsonify({'success': True, 'count': len(complaints), 'data': complaints})
    except Exception as e:
        return error_response(e, 'fetching complaints')


@complaints_bp.route('/authority', methods=['GET'])
@require_auth(['authority'])
def authority_complaints():
    try:
        complaints = get_services().complaints.list_for_authority(request.principal)
        return jsonify({'success': True, 'count': len(complaints), 'data': complaints})
    except Exception as e:
        return error_response(e, 'fetching complaints')


@complaints_bp.route('/admin/all', methods=['GET'])
@require_auth(['admin'])
def all_complaints():
    """Admin listing, filterable by type, hostelNo, status and unassigned"""
    try:
        complaints = get_services().complaints.list_for_admin(request.args.to_dict())
        return jsonify({'success': True, 'count': len(complaints), 'data': complaints})
    except Exception as e:
        return error_response(e, 'fetching complaints')


@complaints_bp.route('/<token>', methods=['GET'])
@require_auth(['student', 'authority', 'admin'])
def complaint_by_token(token):
    try:
        complaint = get_services().complaints.get_by_token(request.principal, token)
        return jsonify({'success': True, 'data': complaint})
    except Exception as e:
        return error_response(e, 'fetching complaint')


@complaints_bp.route('/<int:complaint_id>', methods=['PUT'])
@require_auth(['authority', 'admin'])
def update_complaint_status(complaint_id):
    try:
        complaint = get_services().complaints.update_status(
            request.principal, complaint_id, json_body()
        )
        return jsonify({'success': True, 'message': 'Complaint status updated', 'data': complaint})
    except Exception as e:
        return error_response(e, 'status update')
