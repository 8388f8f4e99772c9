"""HTTP surface, exercised through the Flask test client on the SQL store."""
import io
import os

from conftest import PASSWORD, add_activity


def submission(**overrides):
    data = {
        'title': 'Regional Robotics Challenge',
        'description': 'Second place in the autonomous track',
        'type': 'competition',
        'organization': 'IEEE',
        'date': '2024-04-12',
        'credits': '4',
        'tags': 'robotics,ieee',
    }
    data.update(overrides)
    return data


def submit(client, headers, files=(), **overrides):
    data = submission(**overrides)
    data['files'] = [(io.BytesIO(content), name, mime) for name, content, mime in files]
    return client.post('/activities', data=data, headers=headers, content_type='multipart/form-data')


CERTIFICATE = ('certificate.pdf', b'%PDF-1.4 robotics', 'application/pdf')


# ==================== Auth ====================

def test_login(client, users):
    response = client.post('/auth/login', json={'email': 'alice@example.edu', 'password': PASSWORD})
    assert response.status_code == 200
    body = response.get_json()
    assert body['token']
    assert body['user']['studentId'] == 'CS20240001'
    assert 'password_hash' not in body['user']


def test_login_with_bad_password(client, users):
    response = client.post('/auth/login', json={'email': 'alice@example.edu', 'password': 'wrong'})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'InvalidCredentials'


def test_register_student(client):
    response = client.post('/auth/register', json={
        'name': 'Carol', 'email': 'carol@example.edu', 'password': PASSWORD, 'department': 'Physics',
    })
    assert response.status_code == 201
    user = response.get_json()['user']
    assert user['role'] == 'student'
    assert user['studentId'].startswith('CS')


def test_register_duplicate_email(client, users):
    response = client.post('/auth/register', json={
        'name': 'Alice Again', 'email': 'alice@example.edu', 'password': PASSWORD, 'department': 'Physics',
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == 'DuplicateKey'


def test_token_required(client, users):
    assert client.get('/auth/me').status_code == 401
    bad = client.get('/auth/me', headers={'Authorization': 'Bearer not-a-token'})
    assert bad.status_code == 401


def test_me(client, users, headers):
    response = client.get('/auth/me', headers=headers(users['faculty']))
    assert response.status_code == 200
    assert response.get_json()['user']['email'] == 'smith@example.edu'


def test_api_key_enforced_when_configured(app, client, users, headers):
    app.config['API_KEY'] = 'campus-key'
    auth = headers(users['alice'])

    assert client.get('/').status_code == 200
    assert client.get('/auth/me', headers=auth).status_code == 401
    assert client.get('/auth/me', headers={**auth, 'X-API-Key': 'campus-key'}).status_code == 200


# ==================== Activities ====================

def test_submit_and_read_back(client, users, headers):
    auth = headers(users['alice'])
    response = submit(client, auth, files=[CERTIFICATE])
    assert response.status_code == 201
    created = response.get_json()['activity']
    assert created['status'] == 'pending'
    assert created['files'][0]['originalName'] == 'certificate.pdf'

    fetched = client.get(f"/activities/{created['id']}", headers=auth).get_json()['activity']
    for key in ('title', 'description', 'type', 'organization', 'date', 'credits', 'tags', 'files'):
        assert fetched[key] == created[key]
    assert fetched['studentId'] == 'CS20240001'


def test_submit_with_invalid_credits(app, client, users, headers):
    response = submit(client, headers(users['alice']), files=[CERTIFICATE], credits='11')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'ValidationError'

    folder = app.config['UPLOAD_FOLDER']
    assert not os.path.isdir(folder) or os.listdir(folder) == []


def test_faculty_cannot_submit(client, users, headers):
    response = submit(client, headers(users['faculty']))
    assert response.status_code == 403


def test_other_student_cannot_edit(client, users, headers, store):
    activity = add_activity(store, users['alice'])
    response = client.put(f'/activities/{activity.id}', json={'title': 'Stolen'}, headers=headers(users['bob']))
    assert response.status_code == 403
    assert store.get_activity(activity.id).title == 'Activity'


def test_other_student_cannot_read(client, users, headers, store):
    activity = add_activity(store, users['alice'])
    response = client.get(f'/activities/{activity.id}', headers=headers(users['bob']))
    assert response.status_code == 403


def test_delete_after_approval_is_rejected(client, users, headers, store):
    student = headers(users['alice'])
    created = submit(client, student, files=[CERTIFICATE]).get_json()['activity']

    approved = client.put(f"/faculty/activities/{created['id']}/approve", headers=headers(users['faculty']))
    assert approved.status_code == 200
    assert approved.get_json()['activity']['verifiedBy']['name'] == 'Dr. Smith'

    response = client.delete(f"/activities/{created['id']}", headers=student)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'InvalidState'

    activity = store.get_activity(created['id'])
    assert activity is not None
    assert os.path.exists(activity.files[0].path)


def test_delete_pending(client, users, headers, store):
    student = headers(users['alice'])
    created = submit(client, student, files=[CERTIFICATE]).get_json()['activity']
    path = store.get_activity(created['id']).files[0].path

    response = client.delete(f"/activities/{created['id']}", headers=student)

    assert response.status_code == 200
    assert store.get_activity(created['id']) is None
    assert not os.path.exists(path)


def test_download_file(client, users, headers):
    created = submit(client, headers(users['alice']), files=[CERTIFICATE]).get_json()['activity']
    file_id = created['files'][0]['id']

    response = client.get(f"/activities/{created['id']}/files/{file_id}", headers=headers(users['faculty']))

    assert response.status_code == 200
    assert response.data == b'%PDF-1.4 robotics'
    assert 'certificate.pdf' in response.headers['Content-Disposition']
    response.close()


def test_list_own_activities(client, users, headers, store):
    add_activity(store, users['alice'], title='Mine')
    add_activity(store, users['bob'], title='Not mine')

    mine = client.get('/activities/student/CS20240001', headers=headers(users['alice']))
    assert [a['title'] for a in mine.get_json()['activities']] == ['Mine']

    theirs = client.get('/activities/student/CS20240002', headers=headers(users['alice']))
    assert theirs.status_code == 403


def test_faculty_comment(client, users, headers, store):
    activity = add_activity(store, users['alice'])
    response = client.post(f'/activities/{activity.id}/comments', json={'content': 'Add a photo'},
                           headers=headers(users['faculty']))
    assert response.status_code == 200
    assert response.get_json()['activity']['comments'][0]['content'] == 'Add a photo'


# ==================== Faculty ====================

def test_pending_queue_is_oldest_first(client, users, headers, store):
    from datetime import datetime
    add_activity(store, users['alice'], submitted_at=datetime(2024, 3, 2), title='Later')
    add_activity(store, users['bob'], submitted_at=datetime(2024, 3, 1), title='Earlier')
    add_activity(store, users['bob'], status='verified', reviewer=users['faculty'], title='Done')

    body = client.get('/faculty/pending', headers=headers(users['faculty'])).get_json()
    assert [a['title'] for a in body['activities']] == ['Earlier', 'Later']
    assert body['total'] == 2


def test_reject_without_reason(client, users, headers, store):
    activity = add_activity(store, users['alice'])
    response = client.put(f'/faculty/activities/{activity.id}/reject', json={},
                          headers=headers(users['faculty']))
    assert response.status_code == 400
    assert store.get_activity(activity.id).status == 'pending'


def test_bulk_approve(client, users, headers, store):
    first = add_activity(store, users['alice'])
    second = add_activity(store, users['bob'])
    done = add_activity(store, users['bob'], status='verified', reviewer=users['faculty'])

    response = client.put('/faculty/activities/bulk-approve',
                          json={'activityIds': [first.id, second.id, done.id]},
                          headers=headers(users['admin']))

    assert response.status_code == 200
    assert response.get_json()['approvedCount'] == 2


def test_students_cannot_use_faculty_routes(client, users, headers, store):
    activity = add_activity(store, users['bob'])
    auth = headers(users['alice'])
    assert client.put(f'/faculty/activities/{activity.id}/approve', headers=auth).status_code == 403
    assert client.get('/faculty/students', headers=auth).status_code == 403


def test_student_directory(client, users, headers):
    body = client.get('/faculty/students?search=bob', headers=headers(users['faculty'])).get_json()
    assert [s['studentId'] for s in body['students']] == ['CS20240002']


# ==================== Students, analytics, admin ====================

def test_student_dashboard(client, users, headers, store):
    add_activity(store, users['alice'], status='verified', credits=3, reviewer=users['faculty'])
    body = client.get('/students/dashboard', headers=headers(users['alice'])).get_json()
    assert body['stats']['totalCredits'] == 3


def test_analytics_requires_reviewer(client, users, headers):
    assert client.get('/analytics/overview', headers=headers(users['alice'])).status_code == 403
    response = client.get('/analytics/overview', headers=headers(users['faculty']))
    assert response.status_code == 200
    assert response.get_json()['overview']['totalStudents'] == 2


def test_analytics_report_format(client, users, headers):
    auth = headers(users['admin'])
    assert client.get('/analytics/report', headers=auth).status_code == 200
    assert client.get('/analytics/report?format=pdf', headers=auth).status_code == 400


def test_admin_deactivates_user(client, users, headers):
    student = headers(users['alice'])
    response = client.put(f"/admin/users/{users['alice'].id}/active", json={'active': False},
                          headers=headers(users['admin']))
    assert response.status_code == 200
    assert client.get('/auth/me', headers=student).status_code == 401


def test_admin_routes_require_admin(client, users, headers):
    assert client.get('/admin/users', headers=headers(users['faculty'])).status_code == 403
    assert client.get('/admin/users', headers=headers(users['admin'])).status_code == 200


# ==================== Misc ====================

def test_index(client, users):
    body = client.get('/').get_json()
    assert body['storage'] == 'sql'
    assert body['stats']['students'] == 2


def test_unknown_route_is_json(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'NotFound'


def test_faculty_dashboard_stats(client, users, headers, store):
    add_activity(store, users['alice'], status='verified', credits=3, reviewer=users['faculty'])
    add_activity(store, users['bob'])

    stats = client.get('/faculty/dashboard/stats', headers=headers(users['faculty'])).get_json()['stats']
    assert stats['totalActivities'] == 2
    assert stats['verificationRate'] == 50.0
    assert stats['totalCredits'] == 3


# ==================== Malformed input ====================

def test_non_text_fields_are_validation_errors(client, users, headers, store):
    student = headers(users['alice'])
    activity = add_activity(store, users['alice'])

    created = client.post('/activities', json=submission(title=123), headers=student)
    wrong_type = client.post('/activities', json=submission(type=5), headers=student)
    edited = client.put(f'/activities/{activity.id}', json={'title': 5}, headers=student)
    commented = client.post(f'/activities/{activity.id}/comments', json={'content': 7},
                            headers=headers(users['faculty']))
    registered = client.post('/auth/register', json={
        'name': 5, 'email': 'dana@example.edu', 'password': PASSWORD, 'department': 'Physics',
    })

    for response in (created, wrong_type, edited, commented, registered):
        assert response.status_code == 400
        assert response.get_json()['error'] == 'ValidationError'
    assert store.get_activity(activity.id).title == 'Activity'


def test_login_with_non_text_email(client, users):
    response = client.post('/auth/login', json={'email': 5, 'password': PASSWORD})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'InvalidCredentials'


def test_body_must_be_json_object(client, users, headers):
    response = client.post('/auth/login', json=['alice@example.edu', PASSWORD])
    assert response.status_code == 400
    assert response.get_json()['error'] == 'ValidationError'


def test_public_registration_creates_students_only(client):
    response = client.post('/auth/register', json={
        'name': 'Mallory', 'email': 'mallory@example.edu', 'password': PASSWORD,
        'department': 'Physics', 'role': 'admin',
    })
    assert response.status_code == 201
    user = response.get_json()['user']
    assert user['role'] == 'student'
    assert user['studentId'].startswith('CS')


def test_login_with_non_text_role(client, users):
    response = client.post('/auth/login', json={
        'email': 'alice@example.edu', 'password': PASSWORD, 'role': ['student'],
    })
    assert response.status_code == 401
    assert response.get_json()['error'] == 'InvalidCredentials'
