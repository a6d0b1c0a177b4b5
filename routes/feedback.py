"""
Feedback Endpoints
"""
from flask import Blueprint, jsonify, request

from auth_utils import require_auth
from routes import error_response, get_services, json_body

feedback_bp = Blueprint('feedback', __name__, url_prefix='/api/feedback')


@feedback_bp.route('', methods=['POST'])
@require_auth(['student'])
def submit_feedback():
    try:
        feedback = get_services().feedback.submit(request.principal, json_body())
        return jsonify({'success': True, 'message': 'Feedback submitted successfully', 'data': feedback}), 201
    except Exception as e:
        return error_response(e, 'feedback submission')


@feedback_bp.route('', methods=['GET'])
@require_auth(['admin'])
def all_feedback():
    """All feedback with the average rating"""
    try:
        return jsonify({'success': True, **get_services().feedback.list_all()})
    except Exception as e:
        return error_response(e, 'fetching feedback')


@feedback_bp.route('/student', methods=['GET'])
@require_auth(['student'])
def student_feedback():
    try:
        feedback = get_services().feedback.list_for_student(request.principal)
        return jsonify({'success': True, 'count': len(feedback), 'data': feedback})
    except Exception as e:
        return error_response(e, 'fetching feedback')
