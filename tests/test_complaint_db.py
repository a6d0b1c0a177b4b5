"""
Complaint repository: tokens, persistence invariants, ordering
"""
import re

from services import complaint_db
from services.complaint_db import ComplaintDatabase, generate_complaint_token
from services.validation import ComplaintDraft, HostelLocation

TOKEN_FORMAT = re.compile(r'^CMP-[0-9A-Z]+-[0-9A-F]{6}$')


def test_token_format():
    assert TOKEN_FORMAT.match(generate_complaint_token())


def test_ten_thousand_tokens_are_distinct():
    tokens = {generate_complaint_token() for _ in range(10000)}
    assert len(tokens) == 10000


def test_network_complaint_is_stored_without_location(app, make_student):
    student = make_student()
    db = ComplaintDatabase(app.config['DATABASE_PATH'])

    # Bypass validation: the repository must clear the location itself
    draft = ComplaintDraft(
        complaint_type='College', sub_type='Internet', description='LAN port dead',
        location=HostelLocation(hostel_no=4, room_no='12')
    )
    stored = db.create_complaint(student['id'], draft, assigned_to=None)

    assert stored['hostel_no'] is None
    assert stored['room_no'] is None
    assert stored['status'] == 'Pending'
    assert TOKEN_FORMAT.match(stored['token'])


def test_token_collision_regenerates(app, make_student, monkeypatch):
    student = make_student()
    db = ComplaintDatabase(app.config['DATABASE_PATH'])
    draft = ComplaintDraft(complaint_type='College', sub_type='Chair', description='Broken')

    tokens = iter(['CMP-DUP-AAAAAA', 'CMP-DUP-AAAAAA', 'CMP-NEW-BBBBBB'])
    monkeypatch.setattr(complaint_db, 'generate_complaint_token', lambda: next(tokens))

    first = db.create_complaint(student['id'], draft, None)
    second = db.create_complaint(student['id'], draft, None)

    assert first['token'] == 'CMP-DUP-AAAAAA'
    assert second['token'] == 'CMP-NEW-BBBBBB'


def test_token_is_never_regenerated_on_update(app, make_student):
    student = make_student()
    db = ComplaintDatabase(app.config['DATABASE_PATH'])
    created = db.create_complaint(
        student['id'], ComplaintDraft(complaint_type='College', sub_type='Bulb', description='Dim'), None
    )

    updated = db.update_status(created['id'], 'In Progress', 'on it', None)
    assert updated['token'] == created['token']
    assert updated['remarks'] == 'on it'
    assert updated['updated_at'] >= created['updated_at']


def test_update_unknown_complaint_returns_none(app):
    db = ComplaintDatabase(app.config['DATABASE_PATH'])
    assert db.update_status(999, 'Resolved', None, None) is None


def test_workflow_order_is_status_then_newest(app, make_student):
    student = make_student()
    db = ComplaintDatabase(app.config['DATABASE_PATH'])
    draft = ComplaintDraft(complaint_type='College', sub_type='Other', description='Something')

    first = db.create_complaint(student['id'], draft, None)
    second = db.create_complaint(student['id'], draft, None)
    third = db.create_complaint(student['id'], draft, None)
    db.update_status(first['id'], 'In Progress', None, None)

    ordered = [row['id'] for row in db.list_all()]
    assert ordered == [first['id'], third['id'], second['id']]

    newest_first = [row['id'] for row in db.list_for_student(student['id'])]
    assert newest_first == [third['id'], second['id'], first['id']]
