"""
Feedback on resolved complaints
"""
import pytest


@pytest.fixture
def clerk(make_authority):
    return make_authority('Hostel Clerk', hostel_no=4)


@pytest.fixture
def resolve(client, auth_headers, clerk):
    def _resolve(complaint):
        response = client.put(f"/api/complaints/{complaint['id']}", json={'status': 'Resolved', 'remarks': 'done'},
                              headers=auth_headers('authority', clerk))
        assert response.status_code == 200

    return _resolve


def test_feedback_on_resolved_complaint(client, auth_headers, file_complaint, make_student, resolve):
    student = make_student()
    complaint = file_complaint(student)['data']
    resolve(complaint)

    response = client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': 5, 'comments': 'quick'},
                           headers=auth_headers('student', student))
    body = response.get_json()

    assert response.status_code == 201
    assert body['data']['rating'] == 5
    assert body['data']['complaint']['token'] == complaint['token']


def test_feedback_by_token(client, auth_headers, file_complaint, make_student, resolve):
    student = make_student()
    complaint = file_complaint(student)['data']
    resolve(complaint)

    response = client.post('/api/feedback', json={'token': complaint['token'], 'rating': 3},
                           headers=auth_headers('student', student))
    assert response.status_code == 201


def test_feedback_requires_resolution(client, auth_headers, file_complaint, make_student):
    student = make_student()
    complaint = file_complaint(student)['data']

    response = client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': 4},
                           headers=auth_headers('student', student))
    assert response.status_code == 400


def test_feedback_only_from_owner(client, auth_headers, file_complaint, make_student, resolve):
    owner = make_student()
    other = make_student()
    complaint = file_complaint(owner)['data']
    resolve(complaint)

    response = client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': 1},
                           headers=auth_headers('student', other))
    assert response.status_code == 403


def test_feedback_only_once(client, auth_headers, file_complaint, make_student, resolve):
    student = make_student()
    complaint = file_complaint(student)['data']
    resolve(complaint)
    headers = auth_headers('student', student)

    assert client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': 4},
                       headers=headers).status_code == 201
    response = client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': 2}, headers=headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Feedback already submitted for this complaint'


def test_unknown_complaint(client, auth_headers, make_student):
    response = client.post('/api/feedback', json={'complaintId': 404, 'rating': 4},
                           headers=auth_headers('student', make_student()))
    assert response.status_code == 404


def test_admin_listing_has_average(client, auth_headers, file_complaint, make_student, make_admin, resolve):
    ratings = [5, 4, 4]
    for rating in ratings:
        student = make_student()
        complaint = file_complaint(student)['data']
        resolve(complaint)
        client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': rating},
                    headers=auth_headers('student', student))

    body = client.get('/api/feedback', headers=auth_headers('admin', make_admin())).get_json()
    assert body['count'] == 3
    assert body['averageRating'] == 4.3
    assert sorted(f['rating'] for f in body['data']) == [4, 4, 5]


def test_empty_average_is_zero(client, auth_headers, make_admin):
    body = client.get('/api/feedback', headers=auth_headers('admin', make_admin())).get_json()
    assert body['count'] == 0
    assert body['averageRating'] == 0.0


def test_student_sees_own_feedback(client, auth_headers, file_complaint, make_student, resolve):
    student = make_student()
    complaint = file_complaint(student)['data']
    resolve(complaint)
    headers = auth_headers('student', student)
    client.post('/api/feedback', json={'complaintId': complaint['id'], 'rating': 5}, headers=headers)

    body = client.get('/api/feedback/student', headers=headers).get_json()
    assert [f['complaint']['id'] for f in body['data']] == [complaint['id']]

    assert client.get('/api/feedback', headers=headers).status_code == 403
