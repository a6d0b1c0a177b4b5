"""
Payload validation: complaint drafts, account sign-up, status changes, feedback
"""
import pytest

from services.errors import ValidationError
from services.validation import (
    HostelLocation, validate_account_update, validate_authority_signup, validate_complaint,
    validate_feedback, validate_notification, validate_status_change, validate_student_signup
)

DOMAIN = 'bitmesra.ac.in'


def _fields(excinfo):
    return {error['field'] for error in excinfo.value.errors}


class TestComplaintDraft:

    def test_hostel_complaint_carries_location(self):
        draft = validate_complaint({
            'type': 'Hostel', 'subType': 'Electrical', 'description': 'Fan broken',
            'hostelNo': '4', 'roomNo': ' 12 '
        })
        assert draft.location == HostelLocation(hostel_no=4, room_no='12')
        assert draft.hostel_no == 4
        assert not draft.is_network

    @pytest.mark.parametrize('missing', ['hostelNo', 'roomNo'])
    def test_hostel_complaint_requires_hostel_and_room(self, missing):
        payload = {'type': 'Hostel', 'subType': 'Plumbing', 'description': 'Leak',
                   'hostelNo': 3, 'roomNo': '101'}
        del payload[missing]
        with pytest.raises(ValidationError) as excinfo:
            validate_complaint(payload)
        assert missing in _fields(excinfo)

    @pytest.mark.parametrize('hostel_no', [0, 14, 'abc'])
    def test_hostel_number_range(self, hostel_no):
        with pytest.raises(ValidationError) as excinfo:
            validate_complaint({'type': 'Hostel', 'subType': 'Fan', 'description': 'Noisy',
                                'hostelNo': hostel_no, 'roomNo': '1'})
        assert 'hostelNo' in _fields(excinfo)

    def test_network_complaint_has_no_location(self):
        draft = validate_complaint({'type': 'Network', 'subType': 'Other', 'description': 'Wifi down'})
        assert draft.location is None
        assert draft.is_network

    @pytest.mark.parametrize('complaint_type,sub_type', [
        ('Network', 'Other'),
        ('College', 'Internet'),
        ('College', 'Network'),
    ])
    def test_network_like_complaint_rejects_location(self, complaint_type, sub_type):
        with pytest.raises(ValidationError) as excinfo:
            validate_complaint({'type': complaint_type, 'subType': sub_type, 'description': 'Slow',
                                'hostelNo': 4, 'roomNo': '12'})
        assert 'hostelNo' in _fields(excinfo)

    @pytest.mark.parametrize('sub_type', ['Internet', 'Network'])
    @pytest.mark.parametrize('location', [{'hostelNo': 4, 'roomNo': '12'}, {}])
    def test_hostel_complaint_with_network_sub_type_is_rejected(self, sub_type, location):
        with pytest.raises(ValidationError) as excinfo:
            validate_complaint({'type': 'Hostel', 'subType': sub_type, 'description': 'No LAN', **location})
        assert 'subType' in _fields(excinfo)

    def test_whole_number_floats_are_accepted(self):
        draft = validate_complaint({'type': 'Hostel', 'subType': 'Fan', 'description': 'Fan noisy',
                                    'hostelNo': 4.0, 'roomNo': '12'})
        assert draft.hostel_no == 4

        with pytest.raises(ValidationError) as excinfo:
            validate_complaint({'type': 'Hostel', 'subType': 'Fan', 'description': 'Fan noisy',
                                'hostelNo': 4.5, 'roomNo': '12'})
        assert 'hostelNo' in _fields(excinfo)

    def test_college_location_is_optional(self):
        assert validate_complaint({'type': 'College', 'subType': 'Chair',
                                   'description': 'Broken chair'}).location is None

        draft = validate_complaint({'type': 'College', 'subType': 'Chair', 'description': 'Broken chair',
                                    'hostelNo': 2, 'roomNo': 'LH-1'})
        assert draft.location == HostelLocation(hostel_no=2, room_no='LH-1')

    def test_description_limits(self):
        base = {'type': 'College', 'subType': 'Other'}
        with pytest.raises(ValidationError):
            validate_complaint({**base, 'description': '   '})
        with pytest.raises(ValidationError):
            validate_complaint({**base, 'description': 'x' * 501})
        assert validate_complaint({**base, 'description': 'x' * 500}).description == 'x' * 500

    def test_unknown_type_and_sub_type(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_complaint({'type': 'Library', 'subType': 'Books', 'description': 'Missing'})
        assert {'type', 'subType'} <= _fields(excinfo)


class TestAccountSignup:

    def _student(self, **overrides):
        payload = {
            'name': 'Rahul', 'rollNo': 'btech/10001/22', 'email': 'Rahul@bitmesra.ac.in',
            'mobile': '+91 9876543210', 'session': '2022-26', 'department': 'Computer Science',
            'password': 'password123'
        }
        payload.update(overrides)
        return payload

    def test_student_fields_are_normalized(self):
        fields = validate_student_signup(self._student(), DOMAIN)
        assert fields['email'] == 'rahul@bitmesra.ac.in'
        assert fields['roll_no'] == 'BTECH/10001/22'
        assert fields['hostel_no'] is None

    @pytest.mark.parametrize('field,value', [
        ('email', 'rahul@gmail.com'),
        ('mobile', '12345'),
        ('session', '2022'),
        ('department', 'Astrology'),
        ('password', 'short'),
        ('name', 'n' * 51),
    ])
    def test_student_field_rules(self, field, value):
        with pytest.raises(ValidationError) as excinfo:
            validate_student_signup(self._student(**{field: value}), DOMAIN)
        assert field in _fields(excinfo)

    def test_single_error_becomes_message(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_student_signup(self._student(password='short'), DOMAIN)
        assert excinfo.value.message == 'Password must be at least 8 characters'

    def _authority(self, **overrides):
        payload = {'name': 'Clerk', 'email': 'clerk4@bitmesra.ac.in', 'mobile': '9123456780',
                   'designation': 'Hostel Clerk', 'hostelNo': 4, 'password': 'password123'}
        payload.update(overrides)
        return payload

    def test_hostel_staff_need_hostel(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_authority_signup(self._authority(hostelNo=None), DOMAIN)
        assert 'hostelNo' in _fields(excinfo)

    def test_network_department_derives_department(self):
        fields = validate_authority_signup(
            self._authority(designation='Network Department', hostelNo=None), DOMAIN
        )
        assert fields['department'] == 'Network'
        assert fields['hostel_no'] is None

    def test_network_department_rejects_hostel(self):
        with pytest.raises(ValidationError):
            validate_authority_signup(self._authority(designation='Network Department'), DOMAIN)

    def test_other_designation_clears_hostel(self):
        fields = validate_authority_signup(self._authority(designation='Other'), DOMAIN)
        assert fields['hostel_no'] is None
        assert fields['department'] is None

    def test_authority_update_rederives_scope(self):
        current = {'designation': 'Hostel Clerk', 'hostel_no': 4}
        updates = validate_account_update('authority', {'designation': 'Network Department'}, current)
        assert updates == {'designation': 'Network Department', 'department': 'Network', 'hostel_no': None}

        updates = validate_account_update('authority', {'hostelNo': 7}, current)
        assert updates['hostel_no'] == 7


class TestStatusAndFeedback:

    def test_status_change(self):
        change = validate_status_change({'status': 'Resolved', 'remarks': ' fixed '})
        assert change.status == 'Resolved'
        assert change.remarks == 'fixed'
        assert change.assigned_to is None

    @pytest.mark.parametrize('payload', [
        {},
        {'status': 'Closed'},
        {'status': 'Resolved', 'remarks': 'r' * 201},
        {'status': 'Pending', 'assignedTo': 'someone'},
    ])
    def test_invalid_status_change(self, payload):
        with pytest.raises(ValidationError):
            validate_status_change(payload)

    def test_feedback_by_id_or_token(self):
        assert validate_feedback({'complaintId': '3', 'rating': 5})['complaint_id'] == 3
        fields = validate_feedback({'token': 'CMP-ABC-123456', 'rating': '4', 'comments': 'ok'})
        assert fields['token'] == 'CMP-ABC-123456'
        assert fields['rating'] == 4

    def test_whole_number_rating_float(self):
        assert validate_feedback({'complaintId': 3, 'rating': 5.0})['rating'] == 5
        with pytest.raises(ValidationError):
            validate_feedback({'complaintId': 3, 'rating': 4.5})

    @pytest.mark.parametrize('payload', [
        {'rating': 5},
        {'complaintId': 1, 'rating': 0},
        {'complaintId': 1, 'rating': 6},
        {'complaintId': 1, 'rating': 5, 'comments': 'c' * 501},
    ])
    def test_invalid_feedback(self, payload):
        with pytest.raises(ValidationError):
            validate_feedback(payload)

    def test_notification_scope_normalized(self):
        assert validate_notification({'title': 'T', 'message': 'M', 'hostel': 'ALL'})['hostel'] == 'all'
        with pytest.raises(ValidationError):
            validate_notification({'title': 'T', 'message': 'M'})
