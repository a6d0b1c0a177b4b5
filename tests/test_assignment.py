"""
Assignment: which authority a new complaint is routed to
"""
import logging

from services.complaint_service import AssignmentResolver
from services.validation import validate_complaint


def test_network_complaints_go_to_network_department(file_complaint, make_student, make_authority):
    network = make_authority('Network Department')
    make_authority('Hostel Clerk', hostel_no=4)
    student = make_student()

    by_type = file_complaint(student, type='Network', subType='Other', hostelNo=None, roomNo=None)
    by_sub_type = file_complaint(student, type='College', subType='Internet', hostelNo=None, roomNo=None)

    assert by_type['data']['assignedTo']['id'] == network['id']
    assert by_sub_type['data']['assignedTo']['id'] == network['id']
    assert by_type['data']['hostelNo'] is None


def test_network_assignment_is_deterministic(file_complaint, make_student, make_authority):
    network = make_authority('Network Department')
    student = make_student()

    assigned = {
        file_complaint(student, type='Network', subType='Network', hostelNo=None, roomNo=None)
        ['data']['assignedTo']['id']
        for _ in range(5)
    }
    assert assigned == {network['id']}


def test_hostel_complaint_goes_to_that_hostels_clerk(file_complaint, make_student, make_authority):
    make_authority('Hostel Clerk', hostel_no=3)
    clerk4 = make_authority('Hostel Clerk', hostel_no=4, name='Clerk Four')
    make_authority('Warden', hostel_no=4)
    student = make_student()

    result = file_complaint(student, hostelNo=4, roomNo='12')

    assert result['data']['assignedTo'] == {
        'id': clerk4['id'], 'name': 'Clerk Four', 'designation': 'Hostel Clerk'
    }


def test_no_matching_authority_leaves_complaint_unassigned(file_complaint, make_student, caplog):
    student = make_student()

    with caplog.at_level(logging.WARNING, logger='complaint_service'):
        result = file_complaint(student, hostelNo=9, roomNo='1')

    assert result['data']['assignedTo'] is None
    assert 'ASSIGNMENT_MISS' in caplog.text


def test_college_complaints_are_unassigned(file_complaint, make_student, make_authority):
    make_authority('Hostel Clerk', hostel_no=4)
    student = make_student()

    result = file_complaint(student, type='College', subType='Chair', hostelNo=4, roomNo='LH-2')
    assert result['data']['assignedTo'] is None


def test_earliest_authority_wins_on_legacy_duplicates(services, make_authority):
    first = make_authority('Hostel Clerk', hostel_no=6)
    # Duplicate written straight to the store, as legacy data would be
    make_authority('Hostel Clerk', hostel_no=6)

    resolver = AssignmentResolver(services.identities)
    draft = validate_complaint({'type': 'Hostel', 'subType': 'Fan', 'description': 'Fan',
                                'hostelNo': 6, 'roomNo': '2'})
    assert resolver.resolve(draft)['id'] == first['id']
