"""
Feedback Service
Student ratings for resolved complaints and the admin aggregate view.
"""
import logging
import sqlite3
from typing import Dict, List

from db_config import db_connection, now_timestamp
from services.complaint_config import RESOLVED_STATUS
from services.complaint_db import ComplaintDatabase
from services.errors import NotFoundError, PermissionDenied, ValidationError
from services.identity_store import Principal
from services.validation import validate_feedback

logger = logging.getLogger('feedback_service')

FEEDBACK_SELECT = '''
    SELECT f.*,
           c.token AS complaint_token, c.type AS complaint_type,
           c.sub_type AS complaint_sub_type, c.status AS complaint_status,
           s.name AS student_name, s.roll_no AS student_roll_no, s.email AS student_email
    FROM feedback f
    JOIN complaints c ON c.id = f.complaint_id
    JOIN students s ON s.id = f.student_id
'''


def serialize_feedback(row: dict) -> dict:
    return {
        'id': row['id'],
        'rating': row['rating'],
        'comments': row['comments'],
        'complaint': {
            'id': row['complaint_id'],
            'token': row['complaint_token'],
            'type': row['complaint_type'],
            'subType': row['complaint_sub_type'],
            'status': row['complaint_status']
        },
        'student': {
            'id': row['student_id'],
            'name': row['student_name'],
            'rollNo': row['student_roll_no'],
            'email': row['student_email']
        },
        'createdAt': row['created_at']
    }


def average_rating(rows: List[dict]) -> float:
    """Mean rating rounded to one decimal, 0.0 when there is no feedback"""
    if not rows:
        return 0.0
    return round(sum(row['rating'] for row in rows) / len(rows), 1)


class FeedbackService:
    """Handles feedback submission and listing"""

    def __init__(self, db_path: str, complaints: ComplaintDatabase):
        self.db_path = db_path
        self.complaints = complaints

    def _fetch(self, where_clause: str = '', params=()) -> List[Dict]:
        query = FEEDBACK_SELECT
        if where_clause:
            query += f' WHERE {where_clause}'
        query += ' ORDER BY f.created_at DESC, f.id DESC'

        with db_connection(self.db_path) as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def submit(self, principal: Principal, data: dict) -> Dict:
        """
        Record a rating for one of the student's own resolved complaints.
        Each complaint accepts a single feedback entry.
        """
        fields = validate_feedback(data or {})

        if fields['complaint_id'] is not None:
            complaint = self.complaints.get_by_id(fields['complaint_id'])
        else:
            complaint = self.complaints.get_by_token(fields['token'])

        if complaint is None:
            raise NotFoundError('Complaint not found')
        if complaint['student_id'] != principal.id:
            raise PermissionDenied('You can only give feedback on your own complaints')
        if complaint['status'] != RESOLVED_STATUS:
            raise ValidationError(message='Feedback can only be given once the complaint is resolved')

        try:
            with db_connection(self.db_path) as conn:
                cursor = conn.execute('''
                    INSERT INTO feedback (student_id, complaint_id, rating, comments, created_at)
                    VALUES (?, ?, ?, ?, ?)
                ''', (principal.id, complaint['id'], fields['rating'], fields['comments'], now_timestamp()))
                feedback_id = cursor.lastrowid
        except sqlite3.IntegrityError:
            raise ValidationError(message='Feedback already submitted for this complaint')

        logger.info(f"FEEDBACK_SUBMITTED | {complaint['token']} | student={principal.id} | rating={fields['rating']}")
        return serialize_feedback(self._fetch('f.id = ?', (feedback_id,))[0])

    def list_for_student(self, principal: Principal) -> List[Dict]:
        return [serialize_feedback(row) for row in self._fetch('f.student_id = ?', (principal.id,))]

    def list_all(self) -> Dict:
        """All feedback with the count and average rating"""
        rows = self._fetch()
        return {
            'data': [serialize_feedback(row) for row in rows],
            'count': len(rows),
            'averageRating': average_rating(rows)
        }
