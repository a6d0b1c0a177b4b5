"""
Notification Service
Broadcast notices per hostel (or 'all'), with an optional PDF stored in the
upload directory and served from /uploads/<filename>.
"""
import logging
import os
import time
import uuid
from typing import Dict, List, Optional

from werkzeug.utils import secure_filename

from db_config import db_connection, now_timestamp, row_to_dict
from services.complaint_config import ALL_HOSTELS
from services.errors import ValidationError
from services.identity_store import Principal
from services.validation import normalize_hostel_scope, validate_notification

logger = logging.getLogger('notification_service')

UPLOAD_URL_PREFIX = '/uploads/'


def serialize_notification(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    return {
        'id': row['id'],
        'title': row['title'],
        'message': row['message'],
        'hostel': row['hostel'],
        'pdfUrl': row['pdf_url'],
        'createdBy': row['created_by'],
        'createdAt': row['created_at']
    }


def allowed_file(filename: str, allowed_types) -> bool:
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_types


class NotificationService:
    """Handles notification storage and attachment files"""

    def __init__(self, db_path: str, upload_dir: str, allowed_types=('pdf',)):
        self.db_path = db_path
        self.upload_dir = upload_dir
        self.allowed_types = [t.lower() for t in allowed_types]

    def save_attachment(self, file_storage) -> Optional[str]:
        """Store an uploaded PDF and return its public URL (None when no file was sent)"""
        if file_storage is None or not file_storage.filename:
            return None

        original = secure_filename(file_storage.filename)
        if not original or not allowed_file(original, self.allowed_types):
            raise ValidationError([{
                'field': 'pdf',
                'message': f"Only {', '.join(self.allowed_types)} attachments are allowed"
            }])

        extension = original.rsplit('.', 1)[1].lower()
        filename = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{extension}"

        os.makedirs(self.upload_dir, exist_ok=True)
        file_storage.save(os.path.join(self.upload_dir, filename))
        logger.info(f"ATTACHMENT_SAVED | {original} -> {filename}")
        return UPLOAD_URL_PREFIX + filename

    def create(self, principal: Principal, form: dict, file_storage=None) -> Dict:
        fields = validate_notification(form or {})
        pdf_url = self.save_attachment(file_storage)

        with db_connection(self.db_path) as conn:
            cursor = conn.execute('''
                INSERT INTO notifications (title, message, hostel, pdf_url, created_by, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (fields['title'], fields['message'], fields['hostel'], pdf_url, principal.role, now_timestamp()))
            notification_id = cursor.lastrowid

        logger.info(f"NOTIFICATION_CREATED | id={notification_id} | hostel={fields['hostel']} | by={principal.role}:{principal.id}")
        return self.get(notification_id)

    def get(self, notification_id: int) -> Optional[Dict]:
        with db_connection(self.db_path) as conn:
            row = conn.execute('SELECT * FROM notifications WHERE id = ?', (notification_id,)).fetchone()
        return serialize_notification(row_to_dict(row))

    def list_for_hostel(self, hostel: str) -> List[Dict]:
        """Notices addressed to this hostel plus those addressed to everyone, newest first"""
        scope = normalize_hostel_scope(hostel)
        with db_connection(self.db_path) as conn:
            rows = conn.execute('''
                SELECT * FROM notifications
                WHERE hostel = ? OR hostel = ?
                ORDER BY created_at DESC, id DESC
            ''', (scope, ALL_HOSTELS)).fetchall()
        return [serialize_notification(dict(row)) for row in rows]

    def delete(self, notification_id: int) -> bool:
        notification = self.get(notification_id)
        if notification is None:
            return False

        with db_connection(self.db_path) as conn:
            conn.execute('DELETE FROM notifications WHERE id = ?', (notification_id,))

        pdf_url = notification['pdfUrl']
        if pdf_url and pdf_url.startswith(UPLOAD_URL_PREFIX):
            path = os.path.join(self.upload_dir, pdf_url[len(UPLOAD_URL_PREFIX):])
            try:
                os.remove(path)
            except FileNotFoundError:
                logger.warning(f"ATTACHMENT_MISSING | {path}")

        logger.info(f"NOTIFICATION_DELETED | id={notification_id}")
        return True
