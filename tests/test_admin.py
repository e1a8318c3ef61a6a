import pytest

from models.attendance import AttendanceTimes


def test_users_are_paginated(client, make_user, admin_id, auth_header):
    for i in range(12):
        make_user(email=f'user{i}@test.local')

    res = client.get('/api/admin/users?page=2&limit=5', headers=auth_header(admin_id))
    assert res.status_code == 200
    body = res.get_json()
    assert body['meta'] == {'total': 13, 'page': 2, 'limit': 5, 'pages': 3}
    assert len(body['data']) == 5
    assert 'onlineBalance' in body['data'][0]

    res = client.get('/api/admin/users?page=3&limit=5', headers=auth_header(admin_id))
    assert len(res.get_json()['data']) == 3


def test_users_pagination_defaults_and_clamps(client, admin_id, auth_header):
    res = client.get('/api/admin/users?page=0&limit=1000', headers=auth_header(admin_id))
    meta = res.get_json()['meta']
    assert meta['page'] == 1
    assert meta['limit'] == 100

    res = client.get('/api/admin/users?page=abc', headers=auth_header(admin_id))
    assert res.get_json()['meta']['page'] == 1
    assert res.get_json()['meta']['limit'] == 10


def test_attendance_times_seeded_and_updated(app, client, admin_id, auth_header):
    headers = auth_header(admin_id)

    res = client.get('/api/admin/attendance-times', headers=headers)
    assert res.get_json()['data'] == {'checkInTime': '09:00:00', 'checkOutTime': '17:00:00'}

    res = client.put('/api/admin/attendance-times', json={'checkInTime': '10:30'}, headers=headers)
    assert res.status_code == 200
    assert res.get_json()['data'] == {'checkInTime': '10:30', 'checkOutTime': '17:00:00'}

    with app.app_context():
        assert AttendanceTimes.current().check_in_time == '10:30'


def test_attendance_times_validation(client, admin_id, auth_header):
    headers = auth_header(admin_id)

    assert client.put('/api/admin/attendance-times', json={}, headers=headers).status_code == 400
    res = client.put('/api/admin/attendance-times', json={'checkOutTime': '25:00'}, headers=headers)
    assert res.status_code == 400
    res = client.put('/api/admin/attendance-times', json={'checkInTime': 'nine'}, headers=headers)
    assert res.status_code == 400


def test_leave_approval_flow(client, make_user, admin_id, auth_header):
    staff_id = make_user(email='staff@test.local', role='staff', name='Staff One')
    res = client.post('/api/staff/leave', json={'startDate': '2026-11-02', 'endDate': '2026-11-03',
                                                'reason': 'Family event'},
                      headers=auth_header(staff_id))
    leave_id = res.get_json()['data']['id']

    admin = auth_header(admin_id)
    res = client.get('/api/admin/leave?status=pending', headers=admin)
    assert [item['userName'] for item in res.get_json()['data']] == ['Staff One']

    res = client.put(f'/api/admin/leave/{leave_id}/approve', headers=admin)
    assert res.status_code == 200
    assert res.get_json()['data']['status'] == 'approved'

    res = client.put(f'/api/admin/leave/{leave_id}/approve', headers=admin)
    assert res.status_code == 400

    assert client.get('/api/admin/leave?status=pending', headers=admin).get_json()['data'] == []
    assert client.get('/api/admin/leave?status=bogus', headers=admin).status_code == 400


def test_leave_rejection_needs_reason(client, make_user, admin_id, auth_header):
    staff_id = make_user(email='staff@test.local', role='staff')
    res = client.post('/api/staff/leave', json={'startDate': '2026-11-02', 'endDate': '2026-11-02'},
                      headers=auth_header(staff_id))
    leave_id = res.get_json()['data']['id']
    admin = auth_header(admin_id)

    assert client.put(f'/api/admin/leave/{leave_id}/reject', json={}, headers=admin).status_code == 400

    res = client.put(f'/api/admin/leave/{leave_id}/reject', json={'reason': 'Short staffed'}, headers=admin)
    assert res.status_code == 200
    assert res.get_json()['data']['rejectionReason'] == 'Short staffed'

    assert client.put('/api/admin/leave/999/approve', headers=admin).status_code == 404


def test_rejection_reason_must_be_text(client, make_user, admin_id, auth_header):
    staff_id = make_user(email='staff@test.local', role='staff')
    res = client.post('/api/staff/leave', json={'startDate': '2026-11-02', 'endDate': '2026-11-02'},
                      headers=auth_header(staff_id))
    leave_id = res.get_json()['data']['id']

    res = client.put(f'/api/admin/leave/{leave_id}/reject', json={'reason': 5}, headers=auth_header(admin_id))
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_input'


@pytest.mark.filterwarnings('error::sqlalchemy.exc.LegacyAPIWarning')
def test_leave_decision_and_token_lookup_use_current_orm_api(client, make_user, admin_id, auth_header):
    staff_id = make_user(email='staff@test.local', role='staff')
    res = client.post('/api/staff/leave', json={'startDate': '2026-11-02', 'endDate': '2026-11-02'},
                      headers=auth_header(staff_id))
    leave_id = res.get_json()['data']['id']

    res = client.put(f'/api/admin/leave/{leave_id}/approve', headers=auth_header(admin_id))
    assert res.status_code == 200
    assert client.get('/api/admin/attendance-times', headers=auth_header(admin_id)).status_code == 200
