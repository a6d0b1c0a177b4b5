"""
Complaint Service - Handles complaint creation, routing and status management
"""
import logging
from typing import Dict, List, Optional

from services.complaint_config import (
    ROLE_STUDENT, ROLE_AUTHORITY, ROLE_ADMIN, HOSTEL_DESIGNATIONS, RESOLVED_STATUS,
    COMPLAINT_TYPES, COMPLAINT_STATUS
)
from services.complaint_db import ComplaintDatabase, serialize_complaint
from services.email_service import resolution_email
from services.errors import NotFoundError, PermissionDenied, ValidationError
from services.identity_store import IdentityStore, Principal
from services.validation import (
    ComplaintDraft, parse_hostel_no, validate_complaint, validate_status_change
)

logger = logging.getLogger('complaint_service')


class AssignmentResolver:
    """
    Picks the authority responsible for a new complaint.

    Network-like complaints go to the Network department; hostel complaints go
    to the Hostel Clerk of that hostel; everything else stays unassigned.
    """

    def __init__(self, identities: IdentityStore):
        self.identities = identities

    def resolve(self, draft: ComplaintDraft) -> Optional[dict]:
        if draft.is_network:
            authority = self.identities.find_network_authority()
            rule = 'network'
        elif draft.complaint_type == 'Hostel' and draft.hostel_no is not None:
            authority = self.identities.find_hostel_clerk(draft.hostel_no)
            rule = f'hostel-clerk:{draft.hostel_no}'
        else:
            return None

        if authority is None:
            logger.warning(f"ASSIGNMENT_MISS | rule={rule} | type={draft.complaint_type} | sub_type={draft.sub_type}")
        return authority


def _authority_scope(principal: Principal) -> Optional[str]:
    if principal.is_network:
        return 'network'
    if principal.designation in HOSTEL_DESIGNATIONS:
        return 'hostel'
    return None


def _flag(value) -> bool:
    return str(value or '').strip().lower() in ('1', 'true', 'yes')


class ComplaintService:
    """Complaint lifecycle: submit, route, transition and list"""

    def __init__(self, complaints: ComplaintDatabase, identities: IdentityStore, outbox):
        self.complaints = complaints
        self.identities = identities
        self.outbox = outbox
        self.resolver = AssignmentResolver(identities)

    def create_complaint(self, principal: Principal, data: dict) -> Dict:
        """Validate, route and persist a student's complaint"""
        draft = validate_complaint(data or {})
        authority = self.resolver.resolve(draft)
        assigned_to = authority['id'] if authority else None

        complaint = self.complaints.create_complaint(principal.id, draft, assigned_to)
        logger.info(
            f"COMPLAINT_CREATED | {complaint['token']} | student={principal.id} | "
            f"type={draft.complaint_type}/{draft.sub_type} | assigned={assigned_to}"
        )
        return serialize_complaint(complaint)

    def update_status(self, principal: Principal, complaint_id: int, data: dict) -> Dict:
        """
        Apply a status transition.

        An authority takes ownership of the complaint it updates; an admin
        leaves ownership alone unless it names another authority in
        assignedTo. Resolving a complaint queues an email to its student.
        """
        if principal.role not in (ROLE_AUTHORITY, ROLE_ADMIN):
            raise PermissionDenied()

        change = validate_status_change(data or {})

        if self.complaints.get_by_id(complaint_id) is None:
            raise NotFoundError('Complaint not found')

        if principal.role == ROLE_AUTHORITY:
            assigned_to = principal.id
        else:
            assigned_to = change.assigned_to
            if assigned_to is not None and self.identities.get(ROLE_AUTHORITY, assigned_to) is None:
                raise ValidationError([{'field': 'assignedTo', 'message': 'Authority not found'}])

        updated = self.complaints.update_status(complaint_id, change.status, change.remarks, assigned_to)
        if updated is None:
            raise NotFoundError('Complaint not found')

        logger.info(
            f"STATUS_UPDATED | {updated['token']} | {change.status} | "
            f"by={principal.role}:{principal.id} | assigned={updated['assigned_to']}"
        )

        if change.status == RESOLVED_STATUS:
            subject, body = resolution_email(updated['token'], updated['remarks'])
            self.outbox.enqueue(updated['student_email'], subject, body, reference=updated['token'])

        return serialize_complaint(updated)

    def get_by_token(self, principal: Principal, token: str) -> Dict:
        complaint = self.complaints.get_by_token(token)
        if complaint is None:
            raise NotFoundError('Complaint not found')
        if principal.role == ROLE_STUDENT and complaint['student_id'] != principal.id:
            raise PermissionDenied('Not authorized to view this complaint')
        return serialize_complaint(complaint)

    def list_for_student(self, principal: Principal) -> List[Dict]:
        return [serialize_complaint(row) for row in self.complaints.list_for_student(principal.id)]

    def list_for_authority(self, principal: Principal) -> List[Dict]:
        rows = self.complaints.list_assigned(principal.id, _authority_scope(principal))
        return [serialize_complaint(row) for row in rows]

    def list_for_admin(self, filters: dict) -> List[Dict]:
        """All complaints with optional type/hostelNo/status/unassigned filters"""
        filters = filters or {}
        errors = []

        complaint_type = (filters.get('type') or '').strip() or None
        if complaint_type and complaint_type not in COMPLAINT_TYPES:
            errors.append({'field': 'type', 'message': f"Type must be one of: {', '.join(COMPLAINT_TYPES)}"})

        status = (filters.get('status') or '').strip() or None
        if status and status not in COMPLAINT_STATUS:
            errors.append({'field': 'status', 'message': f"Status must be one of: {', '.join(COMPLAINT_STATUS)}"})

        hostel_no = None
        if (filters.get('hostelNo') or '').strip():
            hostel_no = parse_hostel_no(filters.get('hostelNo'), 'hostelNo', errors)

        if errors:
            raise ValidationError(errors)

        rows = self.complaints.list_all(
            complaint_type=complaint_type,
            hostel_no=hostel_no,
            status=status,
            unassigned=_flag(filters.get('unassigned'))
        )
        return [serialize_complaint(row) for row in rows]
