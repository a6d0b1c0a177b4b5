"""
Request Validation
Turns raw JSON payloads into validated values, collecting itemized field
errors the way the client expects them ({field, message}).
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from services.complaint_config import (
    COMPLAINT_TYPES, SUB_TYPES, COMPLAINT_STATUS, DESIGNATIONS, DEPARTMENTS,
    HOSTEL_DESIGNATIONS, NETWORK_DESIGNATION, MIN_HOSTEL_NO, MAX_HOSTEL_NO,
    MAX_DESCRIPTION_LENGTH, MAX_REMARKS_LENGTH, MAX_COMMENTS_LENGTH,
    MAX_NAME_LENGTH, MIN_PASSWORD_LENGTH, MIN_RATING, MAX_RATING, ALL_HOSTELS, ROLE_STUDENT,
    NETWORK_SUB_TYPES,
    is_network_complaint, department_for
)
from services.errors import ValidationError

MOBILE_PATTERN = re.compile(r'^(\+91[\-\s]?)?[0]?(91)?[789]\d{9}$')
SESSION_PATTERN = re.compile(r'^\d{4}-\d{2}$')


@dataclass(frozen=True)
class HostelLocation:
    """Where a hostel (or optionally college) complaint happened"""
    hostel_no: int
    room_no: str


@dataclass(frozen=True)
class ComplaintDraft:
    """
    A validated complaint submission.

    Hostel drafts always carry a location; network drafts never do;
    college drafts may.
    """
    complaint_type: str
    sub_type: str
    description: str
    location: Optional[HostelLocation] = None

    @property
    def is_network(self) -> bool:
        return is_network_complaint(self.complaint_type, self.sub_type)

    @property
    def hostel_no(self) -> Optional[int]:
        return self.location.hostel_no if self.location else None

    @property
    def room_no(self) -> Optional[str]:
        return self.location.room_no if self.location else None


@dataclass(frozen=True)
class StatusChange:
    status: str
    remarks: Optional[str] = None
    assigned_to: Optional[int] = None


def _error(field: str, message: str) -> Dict[str, str]:
    return {'field': field, 'message': message}


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(data: dict, field: str) -> str:
    value = data.get(field)
    if value is None:
        return ''
    return str(value).strip()


def _parse_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


def parse_hostel_no(value, field: str, errors: List[dict]) -> Optional[int]:
    """Parse a hostel number (1-13); appends an error and returns None when invalid"""
    hostel_no = _parse_int(value)
    if hostel_no is None or not MIN_HOSTEL_NO <= hostel_no <= MAX_HOSTEL_NO:
        errors.append(_error(field, f'Hostel number must be between {MIN_HOSTEL_NO} and {MAX_HOSTEL_NO}'))
        return None
    return hostel_no


def institutional_email_pattern(domain: str):
    return re.compile(r'^[\w\-.]+@' + re.escape(domain) + r'$')


def _check_email(email: str, domain: str, errors: List[dict]):
    if not email:
        errors.append(_error('email', 'Email is required'))
    elif not institutional_email_pattern(domain).match(email):
        errors.append(_error('email', f'Please provide a valid {domain} email address'))


def _check_common_account_fields(data: dict, errors: List[dict]) -> dict:
    name = _text(data, 'name')
    mobile = _text(data, 'mobile')
    password = data.get('password') or ''

    if not name:
        errors.append(_error('name', 'Name is required'))
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(_error('name', f'Name cannot exceed {MAX_NAME_LENGTH} characters'))

    if not MOBILE_PATTERN.match(mobile):
        errors.append(_error('mobile', 'Please provide a valid Indian mobile number'))

    check_password(password, 'password', errors)
    return {'name': name, 'mobile': mobile, 'password': password}


def check_password(password, field: str, errors: List[dict]):
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors.append(_error(field, f'Password must be at least {MIN_PASSWORD_LENGTH} characters'))


def validate_student_signup(data: dict, email_domain: str) -> dict:
    """Validate a student registration payload; returns normalized fields"""
    errors = []
    fields = _check_common_account_fields(data, errors)

    roll_no = _text(data, 'rollNo').upper()
    email = _text(data, 'email').lower()
    session = _text(data, 'session')
    department = _text(data, 'department')

    if not roll_no:
        errors.append(_error('rollNo', 'Roll number is required'))
    _check_email(email, email_domain, errors)
    if not SESSION_PATTERN.match(session):
        errors.append(_error('session', 'Please provide session in format YYYY-YY (e.g., 2023-24)'))
    if department not in DEPARTMENTS:
        errors.append(_error('department', 'Please select your department'))

    hostel_no = None
    room_no = None
    if not _is_blank(data.get('hostelNo')):
        hostel_no = parse_hostel_no(data.get('hostelNo'), 'hostelNo', errors)
    if not _is_blank(data.get('roomNo')):
        room_no = _text(data, 'roomNo')

    if errors:
        raise ValidationError(errors)

    fields.update({
        'roll_no': roll_no,
        'email': email,
        'session': session,
        'department': department,
        'hostel_no': hostel_no,
        'room_no': room_no,
    })
    return fields


def resolve_authority_scope(designation: str, hostel_value, errors: List[dict]) -> dict:
    """
    Derive the routing attributes (department, hostel_no) from a designation.
    Hostel staff need a hostel number, the network department must not have one.
    """
    hostel_no = None
    if designation not in DESIGNATIONS:
        errors.append(_error('designation', 'Please select your designation'))
    elif designation in HOSTEL_DESIGNATIONS:
        if _is_blank(hostel_value):
            errors.append(_error('hostelNo', f'Hostel number is required for {designation}'))
        else:
            hostel_no = parse_hostel_no(hostel_value, 'hostelNo', errors)
    elif designation == NETWORK_DESIGNATION and not _is_blank(hostel_value):
        errors.append(_error('hostelNo', 'Hostel number should not be set for Network Department'))

    return {'department': department_for(designation), 'hostel_no': hostel_no}


def validate_authority_signup(data: dict, email_domain: str) -> dict:
    """Validate an authority registration payload; returns normalized fields"""
    errors = []
    fields = _check_common_account_fields(data, errors)

    email = _text(data, 'email').lower()
    designation = _text(data, 'designation')
    _check_email(email, email_domain, errors)
    scope = resolve_authority_scope(designation, data.get('hostelNo'), errors)

    if errors:
        raise ValidationError(errors)

    fields.update({'email': email, 'designation': designation, **scope})
    return fields


def validate_account_update(role: str, data: dict, current: dict) -> dict:
    """
    Validate an admin edit of a student or authority account.
    Only the fields present in the payload are checked; returns column updates.
    """
    errors = []
    updates = {}

    if 'name' in data:
        name = _text(data, 'name')
        if not name or len(name) > MAX_NAME_LENGTH:
            errors.append(_error('name', f'Name is required and cannot exceed {MAX_NAME_LENGTH} characters'))
        updates['name'] = name

    if 'mobile' in data:
        mobile = _text(data, 'mobile')
        if not MOBILE_PATTERN.match(mobile):
            errors.append(_error('mobile', 'Please provide a valid Indian mobile number'))
        updates['mobile'] = mobile

    if role == ROLE_STUDENT:
        if 'session' in data:
            session = _text(data, 'session')
            if not SESSION_PATTERN.match(session):
                errors.append(_error('session', 'Please provide session in format YYYY-YY (e.g., 2023-24)'))
            updates['session'] = session
        if 'department' in data:
            department = _text(data, 'department')
            if department not in DEPARTMENTS:
                errors.append(_error('department', 'Please select your department'))
            updates['department'] = department
        if 'hostelNo' in data:
            hostel_value = data.get('hostelNo')
            updates['hostel_no'] = None if _is_blank(hostel_value) else parse_hostel_no(hostel_value, 'hostelNo', errors)
        if 'roomNo' in data:
            updates['room_no'] = _text(data, 'roomNo') or None

    elif 'designation' in data or 'hostelNo' in data:
        designation = _text(data, 'designation') if 'designation' in data else current.get('designation')
        hostel_value = data.get('hostelNo') if 'hostelNo' in data else current.get('hostel_no')
        if designation == NETWORK_DESIGNATION and 'hostelNo' not in data:
            hostel_value = None
        scope = resolve_authority_scope(designation, hostel_value, errors)
        updates.update({'designation': designation, **scope})

    if errors:
        raise ValidationError(errors)
    return updates


def validate_complaint(data: dict) -> ComplaintDraft:
    """
    Validate a complaint submission into a ComplaintDraft.

    Network complaints (type Network, or sub-type Network/Internet) must not
    carry hostel or room numbers; hostel complaints must carry both and
    cannot use a network sub-type.
    """
    errors = []
    complaint_type = _text(data, 'type')
    sub_type = _text(data, 'subType')
    description = _text(data, 'description')
    hostel_value = data.get('hostelNo')
    room_value = data.get('roomNo')

    if complaint_type not in COMPLAINT_TYPES:
        errors.append(_error('type', f"Type must be one of: {', '.join(COMPLAINT_TYPES)}"))
    if sub_type not in SUB_TYPES:
        errors.append(_error('subType', f"Sub-type must be one of: {', '.join(SUB_TYPES)}"))
    if not description:
        errors.append(_error('description', 'Please provide a description'))
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(_error('description', f'Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters'))

    has_location = not _is_blank(hostel_value) or not _is_blank(room_value)
    location = None

    if complaint_type == 'Hostel' and sub_type in NETWORK_SUB_TYPES:
        errors.append(_error('subType', 'Network issues must be filed as Network or College complaints'))
    elif is_network_complaint(complaint_type, sub_type):
        if has_location:
            errors.append(_error('hostelNo', 'Network complaints should not include hostel or room number'))
    elif complaint_type == 'Hostel' or (complaint_type == 'College' and has_location):
        hostel_no = None
        if _is_blank(hostel_value):
            errors.append(_error('hostelNo', 'Hostel number is required for hostel complaints'))
        else:
            hostel_no = parse_hostel_no(hostel_value, 'hostelNo', errors)
        if _is_blank(room_value):
            errors.append(_error('roomNo', 'Room number is required for hostel complaints'))
        if hostel_no is not None and not _is_blank(room_value):
            location = HostelLocation(hostel_no=hostel_no, room_no=str(room_value).strip())

    if errors:
        raise ValidationError(errors)

    return ComplaintDraft(
        complaint_type=complaint_type,
        sub_type=sub_type,
        description=description,
        location=location
    )


def validate_status_change(data: dict) -> StatusChange:
    errors = []
    status = _text(data, 'status')
    remarks = data.get('remarks')
    assigned_to = None

    if status not in COMPLAINT_STATUS:
        errors.append(_error('status', f"Status must be one of: {', '.join(COMPLAINT_STATUS)}"))

    if remarks is not None:
        remarks = str(remarks).strip()
        if len(remarks) > MAX_REMARKS_LENGTH:
            errors.append(_error('remarks', f'Remarks cannot exceed {MAX_REMARKS_LENGTH} characters'))

    if not _is_blank(data.get('assignedTo')):
        assigned_to = _parse_int(data.get('assignedTo'))
        if assigned_to is None:
            errors.append(_error('assignedTo', 'assignedTo must be an authority id'))

    if errors:
        raise ValidationError(errors)

    return StatusChange(status=status, remarks=remarks, assigned_to=assigned_to)


def validate_feedback(data: dict) -> dict:
    errors = []
    complaint_id = None
    token = _text(data, 'token')

    if not _is_blank(data.get('complaintId')):
        complaint_id = _parse_int(data.get('complaintId'))
        if complaint_id is None:
            errors.append(_error('complaintId', 'complaintId must be a complaint id'))
    elif not token:
        errors.append(_error('complaintId', 'complaintId or token is required'))

    rating = _parse_int(data.get('rating'))
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        errors.append(_error('rating', f'Rating must be between {MIN_RATING} and {MAX_RATING}'))

    comments = data.get('comments')
    if comments is not None:
        comments = str(comments).strip()
        if len(comments) > MAX_COMMENTS_LENGTH:
            errors.append(_error('comments', f'Comments cannot exceed {MAX_COMMENTS_LENGTH} characters'))

    if errors:
        raise ValidationError(errors)

    return {'complaint_id': complaint_id, 'token': token or None, 'rating': rating, 'comments': comments or None}


def normalize_hostel_scope(value) -> str:
    """Notification scopes are hostel identifiers or 'all'"""
    scope = str(value or '').strip()
    return ALL_HOSTELS if scope.lower() == ALL_HOSTELS else scope


def validate_notification(data) -> dict:
    errors = []
    title = _text(data, 'title')
    message = _text(data, 'message')
    hostel = normalize_hostel_scope(data.get('hostel'))

    if not title:
        errors.append(_error('title', 'Title is required'))
    if not message:
        errors.append(_error('message', 'Message is required'))
    if not hostel:
        errors.append(_error('hostel', "Hostel is required (a hostel number or 'all')"))

    if errors:
        raise ValidationError(errors)

    return {'title': title, 'message': message, 'hostel': hostel}
