"""Session endpoints over HTTP."""
import json

from classroll.models.attendance import AttendanceRecord

def _post(client, url, headers, body=None):
    return client.post(url, json=body or {}, headers=headers)

def test_schedule_session(client, auth_headers, teacher, school_class):
    response = _post(client, '/api/sessions/', auth_headers(teacher), {
        'class_id': school_class.id,
        'start_time': '13:00',
        'end_time': '14:30',
        'location': 'Lab 2'
    })

    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['status'] == 'scheduled'
    assert data['session_date'] == '2026-03-02'
    assert data['total_students'] == 3

def test_schedule_requires_class_teacher(client, auth_headers, other_teacher, students, school_class):
    body = {'class_id': school_class.id, 'start_time': '13:00', 'end_time': '14:00'}

    assert _post(client, '/api/sessions/', auth_headers(other_teacher), body).status_code == 403
    assert _post(client, '/api/sessions/', auth_headers(students[0]), body).status_code == 403

def test_schedule_rejects_bad_times(client, auth_headers, teacher, school_class):
    response = _post(client, '/api/sessions/', auth_headers(teacher),
                     {'class_id': school_class.id, 'start_time': '14:00', 'end_time': '13:00'})
    assert response.status_code == 400

    response = _post(client, '/api/sessions/', auth_headers(teacher),
                     {'class_id': school_class.id, 'start_time': 'noon', 'end_time': '13:00'})
    assert response.status_code == 400

def test_start_returns_code_only_to_owner(client, auth_headers, teacher, students, class_session):
    response = _post(client, f'/api/sessions/{class_session.id}/start', auth_headers(teacher),
                     {'ttl_minutes': 15})

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['status'] == 'active'
    assert data['qr_code']
    assert data['qr_expires_at'] == '2026-03-02T09:15:00'

    student_view = json.loads(client.get(f'/api/sessions/{class_session.id}',
                                         headers=auth_headers(students[0])).data)['data']
    assert student_view['is_active'] is True
    assert 'qr_code' not in student_view

def test_start_by_other_teacher_is_forbidden(client, auth_headers, other_teacher, class_session):
    response = _post(client, f'/api/sessions/{class_session.id}/start', auth_headers(other_teacher))
    assert response.status_code == 403

def test_admin_can_start_any_session(client, auth_headers, admin, class_session):
    response = _post(client, f'/api/sessions/{class_session.id}/start', auth_headers(admin))
    assert response.status_code == 200

def test_start_rejects_invalid_ttl(client, auth_headers, teacher, class_session):
    url = f'/api/sessions/{class_session.id}/start'
    assert _post(client, url, auth_headers(teacher), {'ttl_minutes': 0}).status_code == 400
    assert _post(client, url, auth_headers(teacher), {'ttl_minutes': 'ten'}).status_code == 400
    assert _post(client, url, auth_headers(teacher), {'ttl_minutes': 600}).status_code == 400

def test_qr_image_for_active_session(client, auth_headers, teacher, class_session):
    url = f'/api/sessions/{class_session.id}/qr'
    assert client.get(url, headers=auth_headers(teacher)).status_code == 404

    code = json.loads(_post(client, f'/api/sessions/{class_session.id}/start',
                            auth_headers(teacher)).data)['data']['qr_code']
    response = client.get(url, headers=auth_headers(teacher))

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['qr_code'] == code
    assert data['qr_image'].startswith('data:image/png;base64,')

def test_stop_closes_session(client, auth_headers, teacher, class_session):
    _post(client, f'/api/sessions/{class_session.id}/start', auth_headers(teacher))
    response = _post(client, f'/api/sessions/{class_session.id}/stop', auth_headers(teacher))

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['status'] == 'closed'
    assert data['qr_code'] is None

def test_override_and_attendance_listing(client, auth_headers, teacher, other_teacher, students, class_session):
    url = f'/api/sessions/{class_session.id}/attendance/{students[1].id}/override'

    assert _post(client, url, auth_headers(other_teacher), {'present': True}).status_code == 403
    assert _post(client, url, auth_headers(teacher), {'present': 'yes'}).status_code == 400

    response = _post(client, url, auth_headers(teacher), {'present': True})
    assert response.status_code == 201
    assert json.loads(response.data)['data']['method'] == 'manual'

    listing = json.loads(client.get(f'/api/sessions/{class_session.id}/attendance',
                                    headers=auth_headers(teacher)).data)['data']
    assert [record['student']['name'] for record in listing['records']] == ['Alan Turing']
    assert listing['stats'] == {'present': 1, 'total': 1, 'attendance_rate': 100}
    assert listing['session']['present_count'] == 1

def test_export_csv(client, auth_headers, teacher, students, class_session):
    for student in students[:2]:
        _post(client, f'/api/sessions/{class_session.id}/attendance/{student.id}/override',
              auth_headers(teacher), {'present': True})

    response = client.get(f'/api/sessions/{class_session.id}/attendance/export', headers=auth_headers(teacher))

    assert response.status_code == 200
    assert response.mimetype == 'text/csv'
    assert 'attendance-Mathematics-2026-03-02.csv' in response.headers['Content-Disposition']
    lines = response.get_data(as_text=True).strip().split('\n')
    assert lines[0] == 'Name,Roll Number,Status,Method,Marked At'
    assert lines[1] == 'Ada Lovelace,R001,Present,manual,2026-03-02 09:00:00'
    assert lines[2].startswith('Alan Turing,R002,Present')
    assert len(lines) == 3

def test_delete_session(client, auth_headers, teacher, class_session):
    url = f"/api/sessions/{class_session.id}"
    response = client.delete(url, headers=auth_headers(teacher))
    assert response.status_code == 200
    assert client.get(url, headers=auth_headers(teacher)).status_code == 404

def test_today_lists_by_role(client, auth_headers, teacher, students, make_user, class_session):
    outsider = make_user(name='Visitor')

    owned = json.loads(client.get('/api/sessions/today', headers=auth_headers(teacher)).data)['data']
    enrolled = json.loads(client.get('/api/sessions/today', headers=auth_headers(students[0])).data)['data']
    other = json.loads(client.get('/api/sessions/today', headers=auth_headers(outsider)).data)['data']

    assert [s['id'] for s in owned] == [class_session.id]
    assert [s['id'] for s in enrolled] == [class_session.id]
    assert other == []
    assert AttendanceRecord.query.count() == 0
