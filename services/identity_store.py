"""
Identity Store
Student, Authority and Admin accounts kept in three tables behind one store.
Handles verification/reset OTP state and authority routing-key uniqueness.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from db_config import db_connection, now_timestamp, row_to_dict
from services.complaint_config import (
    ROLE_STUDENT, ROLE_AUTHORITY, ROLE_ADMIN, NETWORK_DEPARTMENT, NETWORK_DESIGNATION
)

logger = logging.getLogger('identity_store')

TABLES = {
    ROLE_STUDENT: 'students',
    ROLE_AUTHORITY: 'authorities',
    ROLE_ADMIN: 'admins',
}

# Columns never returned to clients
PRIVATE_COLUMNS = {
    'password_hash', 'verification_otp', 'verification_otp_expires',
    'reset_otp', 'reset_otp_expires'
}

STUDENT_EDITABLE = {'name', 'mobile', 'department', 'session', 'hostel_no', 'room_no'}
AUTHORITY_EDITABLE = {'name', 'mobile', 'designation', 'department', 'hostel_no'}


@dataclass
class Principal:
    """The authenticated identity as the complaint services see it"""
    id: int
    role: str
    email: str
    name: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    hostel_no: Optional[int] = None
    record: Dict = field(default_factory=dict, repr=False)

    @property
    def is_network(self) -> bool:
        return self.role == ROLE_AUTHORITY and self.department == NETWORK_DEPARTMENT

    def token_claims(self) -> dict:
        if self.role != ROLE_AUTHORITY:
            return {}
        return {
            'designation': self.designation,
            'department': self.department,
            'hostelNo': None if self.designation == NETWORK_DESIGNATION else self.hostel_no
        }


def serialize_identity(role: str, record: Optional[dict]) -> Optional[dict]:
    """Public camelCase view of an account record"""
    if record is None:
        return None

    view = {
        'id': record['id'],
        'email': record['email'],
        'role': role,
        'createdAt': record.get('created_at'),
    }
    if role == ROLE_STUDENT:
        view.update({
            'name': record['name'],
            'rollNo': record['roll_no'],
            'mobile': record['mobile'],
            'session': record['session'],
            'department': record['department'],
            'hostelNo': record['hostel_no'],
            'roomNo': record['room_no'],
            'isVerified': bool(record['is_verified']),
        })
    elif role == ROLE_AUTHORITY:
        view.update({
            'name': record['name'],
            'mobile': record['mobile'],
            'designation': record['designation'],
            'department': record['department'],
            'hostelNo': record['hostel_no'],
            'isVerified': bool(record['is_verified']),
        })
    return view


class IdentityStore:
    """Handles all database operations for the three account collections"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, role: str, user_id) -> Optional[dict]:
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            row = conn.execute(f'SELECT * FROM {table} WHERE id = ?', (user_id,)).fetchone()
        return row_to_dict(row)

    def get_by_email(self, role: str, email: str) -> Optional[dict]:
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            row = conn.execute(
                f'SELECT * FROM {table} WHERE email = ?', ((email or '').strip().lower(),)
            ).fetchone()
        return row_to_dict(row)

    def load_principal(self, role: str, user_id) -> Optional[Principal]:
        """Fresh principal for a decoded token, or None if the account is gone"""
        if role not in TABLES or user_id is None:
            return None

        record = self.get(role, user_id)
        if record is None:
            return None

        return Principal(
            id=record['id'],
            role=role,
            email=record['email'],
            name=record.get('name'),
            designation=record.get('designation'),
            department=record.get('department'),
            hostel_no=record.get('hostel_no'),
            record=record
        )

    def list_accounts(self, role: str) -> List[dict]:
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            rows = conn.execute(f'SELECT * FROM {table} ORDER BY created_at DESC, id DESC').fetchall()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def student_conflict(self, email: str, roll_no: str) -> Optional[str]:
        """Message describing a clash with an existing student, or None"""
        with db_connection(self.db_path) as conn:
            row = conn.execute(
                'SELECT email, roll_no FROM students WHERE email = ? OR roll_no = ?',
                (email, roll_no)
            ).fetchone()

        if not row:
            return None
        if row['email'] == email and row['roll_no'] == roll_no:
            return 'This email and roll number are already registered. Please login instead.'
        if row['email'] == email:
            return 'This email is already registered. Please login instead.'
        return 'This roll number is already registered.'

    def create_student(self, fields: dict, password_hash: str, otp: str, otp_expires: str) -> int:
        with db_connection(self.db_path) as conn:
            cursor = conn.execute('''
                INSERT INTO students (
                    name, roll_no, email, mobile, session, department, password_hash,
                    hostel_no, room_no, is_verified, verification_otp, verification_otp_expires,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
            ''', (
                fields['name'], fields['roll_no'], fields['email'], fields['mobile'],
                fields['session'], fields['department'], password_hash,
                fields.get('hostel_no'), fields.get('room_no'), otp, otp_expires,
                now_timestamp()
            ))
            student_id = cursor.lastrowid

        logger.info(f"STUDENT_REGISTERED | {fields['email']} | id={student_id}")
        return student_id

    def routing_conflict(self, designation: str, hostel_no, exclude_id=None) -> Optional[str]:
        """
        At most one Network Department authority and one Hostel Clerk per
        hostel may exist; returns a message when another account holds the key.
        """
        if designation == NETWORK_DESIGNATION:
            query = 'SELECT id FROM authorities WHERE designation = ?'
            params = [NETWORK_DESIGNATION]
            message = 'A Network Department authority is already registered'
        elif designation == 'Hostel Clerk' and hostel_no is not None:
            query = 'SELECT id FROM authorities WHERE designation = ? AND hostel_no = ?'
            params = ['Hostel Clerk', hostel_no]
            message = f'A Hostel Clerk is already registered for hostel {hostel_no}'
        else:
            return None

        if exclude_id is not None:
            query += ' AND id != ?'
            params.append(exclude_id)

        with db_connection(self.db_path) as conn:
            row = conn.execute(query, params).fetchone()
        return message if row else None

    def create_authority(self, fields: dict, password_hash: str, otp: str, otp_expires: str) -> int:
        with db_connection(self.db_path) as conn:
            cursor = conn.execute('''
                INSERT INTO authorities (
                    name, email, mobile, designation, department, hostel_no, password_hash,
                    is_verified, verification_otp, verification_otp_expires, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?)
            ''', (
                fields['name'], fields['email'], fields['mobile'], fields['designation'],
                fields.get('department'), fields.get('hostel_no'), password_hash,
                otp, otp_expires, now_timestamp()
            ))
            authority_id = cursor.lastrowid

        logger.info(f"AUTHORITY_REGISTERED | {fields['email']} | {fields['designation']} | id={authority_id}")
        return authority_id

    def create_admin(self, email: str, password_hash: str) -> int:
        with db_connection(self.db_path) as conn:
            cursor = conn.execute(
                'INSERT INTO admins (email, password_hash, created_at) VALUES (?, ?, ?)',
                (email.strip().lower(), password_hash, now_timestamp())
            )
            return cursor.lastrowid

    # ------------------------------------------------------------------
    # OTP state
    # ------------------------------------------------------------------

    def set_verification_otp(self, role: str, user_id: int, otp: str, expires: str):
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            conn.execute(
                f'UPDATE {table} SET verification_otp = ?, verification_otp_expires = ? WHERE id = ?',
                (otp, expires, user_id)
            )

    def mark_verified(self, role: str, user_id: int):
        """Flip the verified flag and clear the OTP (single use)"""
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            conn.execute(f'''
                UPDATE {table}
                SET is_verified = 1, verification_otp = NULL, verification_otp_expires = NULL
                WHERE id = ?
            ''', (user_id,))
        logger.info(f"ACCOUNT_VERIFIED | {role} | id={user_id}")

    def set_reset_otp(self, role: str, user_id: int, otp: str, expires: str):
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            conn.execute(
                f'UPDATE {table} SET reset_otp = ?, reset_otp_expires = ? WHERE id = ?',
                (otp, expires, user_id)
            )

    def update_password(self, role: str, user_id: int, password_hash: str):
        """Replace the password and clear any pending reset OTP"""
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            conn.execute(f'''
                UPDATE {table}
                SET password_hash = ?, reset_otp = NULL, reset_otp_expires = NULL
                WHERE id = ?
            ''', (password_hash, user_id))
        logger.info(f"PASSWORD_RESET | {role} | id={user_id}")

    # ------------------------------------------------------------------
    # Admin management
    # ------------------------------------------------------------------

    def update_account(self, role: str, user_id: int, updates: dict) -> Optional[dict]:
        editable = STUDENT_EDITABLE if role == ROLE_STUDENT else AUTHORITY_EDITABLE
        updates = {k: v for k, v in updates.items() if k in editable}
        if updates:
            set_clause = ', '.join(f'{column} = ?' for column in updates)
            with db_connection(self.db_path) as conn:
                conn.execute(
                    f'UPDATE {TABLES[role]} SET {set_clause} WHERE id = ?',
                    list(updates.values()) + [user_id]
                )
        return self.get(role, user_id)

    def delete_account(self, role: str, user_id: int) -> bool:
        """
        Delete an account. Student complaints and feedback cascade; complaints
        assigned to a deleted authority fall back to unassigned.
        """
        table = TABLES[role]
        with db_connection(self.db_path) as conn:
            cursor = conn.execute(f'DELETE FROM {table} WHERE id = ?', (user_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"ACCOUNT_DELETED | {role} | id={user_id}")
        return deleted

    # ------------------------------------------------------------------
    # Routing lookups
    # ------------------------------------------------------------------

    def find_network_authority(self) -> Optional[dict]:
        with db_connection(self.db_path) as conn:
            row = conn.execute('''
                SELECT * FROM authorities WHERE department = ?
                ORDER BY created_at ASC, id ASC LIMIT 1
            ''', (NETWORK_DEPARTMENT,)).fetchone()
        return row_to_dict(row)

    def find_hostel_clerk(self, hostel_no: int) -> Optional[dict]:
        with db_connection(self.db_path) as conn:
            row = conn.execute('''
                SELECT * FROM authorities WHERE designation = 'Hostel Clerk' AND hostel_no = ?
                ORDER BY created_at ASC, id ASC LIMIT 1
            ''', (hostel_no,)).fetchone()
        return row_to_dict(row)
