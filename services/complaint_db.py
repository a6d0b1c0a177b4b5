"""
Complaint Database Handler
Complaint persistence, token generation and the role-scoped listing queries.
"""
import logging
import secrets
import sqlite3
import string
import time
from typing import Dict, List, Optional

from db_config import db_connection, now_timestamp
from services.complaint_config import (
    TOKEN_PREFIX, INITIAL_STATUS, NETWORK_SUB_TYPES, is_network_complaint
)
from services.validation import ComplaintDraft

logger = logging.getLogger('complaint_db')

MAX_TOKEN_ATTEMPTS = 5

BASE36_ALPHABET = string.digits + string.ascii_uppercase

# Complaint row joined with the owning student and the assigned authority
POPULATED_SELECT = '''
    SELECT c.*,
           s.name AS student_name, s.roll_no AS student_roll_no,
           s.email AS student_email, s.room_no AS student_room_no,
           a.name AS authority_name, a.designation AS authority_designation
    FROM complaints c
    JOIN students s ON s.id = c.student_id
    LEFT JOIN authorities a ON a.id = c.assigned_to
'''

WORKFLOW_ORDER = 'c.status ASC, c.created_at DESC, c.id DESC'
NEWEST_FIRST = 'c.created_at DESC, c.id DESC'


def _base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


def generate_complaint_token() -> str:
    """Token in format CMP-<base36 microsecond clock>-<6 random hex chars>"""
    time_part = _base36(time.time_ns() // 1000)
    random_part = secrets.token_hex(3).upper()
    return f"{TOKEN_PREFIX}-{time_part}-{random_part}"


def serialize_complaint(row: Optional[dict]) -> Optional[dict]:
    """camelCase complaint with student/authority names in place of raw ids"""
    if row is None:
        return None

    assigned_to = None
    if row.get('assigned_to') is not None:
        assigned_to = {
            'id': row['assigned_to'],
            'name': row.get('authority_name'),
            'designation': row.get('authority_designation')
        }

    return {
        'id': row['id'],
        'token': row['token'],
        'type': row['type'],
        'subType': row['sub_type'],
        'hostelNo': row['hostel_no'],
        'roomNo': row['room_no'],
        'description': row['description'],
        'status': row['status'],
        'remarks': row['remarks'],
        'student': {
            'id': row['student_id'],
            'name': row.get('student_name'),
            'rollNo': row.get('student_roll_no'),
            'email': row.get('student_email'),
            'roomNo': row.get('student_room_no')
        },
        'assignedTo': assigned_to,
        'createdAt': row['created_at'],
        'updatedAt': row['updated_at']
    }


class ComplaintDatabase:
    """Handles all database operations for complaints"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _select(self, where_clauses: List[str], params: List, order_by: str) -> List[Dict]:
        query = POPULATED_SELECT
        if where_clauses:
            query += ' WHERE ' + ' AND '.join(where_clauses)
        query += f' ORDER BY {order_by}'

        with db_connection(self.db_path) as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def _select_one(self, where_clause: str, params) -> Optional[Dict]:
        with db_connection(self.db_path) as conn:
            row = conn.execute(f'{POPULATED_SELECT} WHERE {where_clause}', params).fetchone()
        return dict(row) if row else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_complaint(self, student_id: int, draft: ComplaintDraft,
                         assigned_to: Optional[int]) -> Dict:
        """
        Persist a new complaint with a freshly generated token.

        Network complaints are stored without hostel/room numbers whatever
        the draft says; a token collision regenerates the token.
        """
        hostel_no = draft.hostel_no
        room_no = draft.room_no
        if is_network_complaint(draft.complaint_type, draft.sub_type):
            hostel_no = None
            room_no = None

        timestamp = now_timestamp()
        last_error = None

        for attempt in range(MAX_TOKEN_ATTEMPTS):
            token = generate_complaint_token()
            try:
                with db_connection(self.db_path) as conn:
                    cursor = conn.execute('''
                        INSERT INTO complaints (
                            token, student_id, type, hostel_no, room_no, sub_type,
                            description, status, assigned_to, created_at, updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ''', (
                        token, student_id, draft.complaint_type, hostel_no, room_no,
                        draft.sub_type, draft.description, INITIAL_STATUS, assigned_to,
                        timestamp, timestamp
                    ))
                    complaint_id = cursor.lastrowid
                return self.get_by_id(complaint_id)
            except sqlite3.IntegrityError as e:
                if 'token' not in str(e):
                    raise
                last_error = e
                logger.warning(f"TOKEN_COLLISION | {token} | attempt {attempt + 1}/{MAX_TOKEN_ATTEMPTS}")

        raise last_error

    def update_status(self, complaint_id: int, status: str, remarks: Optional[str],
                      assigned_to: Optional[int]) -> Optional[Dict]:
        """
        Set status (and remarks when given) and stamp the owning authority.
        Returns the updated complaint or None when the id is unknown.
        """
        assignments = ['status = ?', 'updated_at = ?']
        params = [status, now_timestamp()]

        if remarks is not None:
            assignments.append('remarks = ?')
            params.append(remarks)
        if assigned_to is not None:
            assignments.append('assigned_to = ?')
            params.append(assigned_to)

        with db_connection(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE complaints SET {', '.join(assignments)} WHERE id = ?",
                params + [complaint_id]
            )
            if cursor.rowcount == 0:
                return None

        return self.get_by_id(complaint_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, complaint_id: int) -> Optional[Dict]:
        return self._select_one('c.id = ?', (complaint_id,))

    def get_by_token(self, token: str) -> Optional[Dict]:
        return self._select_one('c.token = ?', ((token or '').strip(),))

    def list_for_student(self, student_id: int) -> List[Dict]:
        return self._select(['c.student_id = ?'], [student_id], NEWEST_FIRST)

    def list_assigned(self, authority_id: int, scope: Optional[str] = None) -> List[Dict]:
        """
        Complaints assigned to an authority.

        scope='network' keeps network-like complaints only, scope='hostel'
        keeps hostel complaints only, None keeps everything assigned.
        """
        where = ['c.assigned_to = ?']
        params = [authority_id]

        if scope == 'network':
            placeholders = ', '.join('?' for _ in NETWORK_SUB_TYPES)
            where.append(f"(c.type = 'Network' OR c.sub_type IN ({placeholders}))")
            params.extend(NETWORK_SUB_TYPES)
        elif scope == 'hostel':
            where.append("c.type = 'Hostel'")

        return self._select(where, params, WORKFLOW_ORDER)

    def list_all(self, complaint_type: Optional[str] = None, hostel_no: Optional[int] = None,
                 status: Optional[str] = None, unassigned: bool = False) -> List[Dict]:
        """Admin listing with optional equality filters"""
        where = []
        params = []

        if complaint_type == 'Network':
            where.append("(c.type = 'Network' OR c.sub_type = 'Network')")
        elif complaint_type:
            where.append('c.type = ?')
            params.append(complaint_type)

        if hostel_no is not None:
            where.append('c.hostel_no = ?')
            params.append(hostel_no)

        if status:
            where.append('c.status = ?')
            params.append(status)

        if unassigned:
            where.append('c.assigned_to IS NULL')

        return self._select(where, params, WORKFLOW_ORDER)
