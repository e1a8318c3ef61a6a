import pytest

from models.attendance import BreakRecord


@pytest.fixture
def staff(make_user, auth_header):
    return auth_header(make_user(email='staff@test.local', role='staff'))


def test_check_in_and_out(client, staff):
    res = client.post('/api/staff/checkin', headers=staff)
    assert res.status_code == 201
    assert res.get_json()['data']['status'] == 'checked_in'

    res = client.post('/api/staff/checkin', headers=staff)
    assert res.status_code == 400

    res = client.post('/api/staff/checkout', headers=staff)
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['status'] == 'checked_out'
    assert data['checkOutAt'] is not None

    assert client.post('/api/staff/checkout', headers=staff).status_code == 404


def test_breaks(app, client, staff):
    assert client.post('/api/staff/break/start', headers=staff).status_code == 400

    client.post('/api/staff/checkin', headers=staff)
    assert client.post('/api/staff/break/start', headers=staff).status_code == 201
    assert client.post('/api/staff/break/start', headers=staff).status_code == 400

    res = client.post('/api/staff/break/end', headers=staff)
    assert res.status_code == 200
    assert res.get_json()['data']['breakEnd'] is not None
    assert client.post('/api/staff/break/end', headers=staff).status_code == 404


def test_checkout_closes_running_break(app, client, staff):
    client.post('/api/staff/checkin', headers=staff)
    client.post('/api/staff/break/start', headers=staff)
    client.post('/api/staff/checkout', headers=staff)

    with app.app_context():
        assert BreakRecord.query.filter(BreakRecord.break_end.is_(None)).count() == 0


def test_today_and_history(client, staff):
    client.post('/api/staff/checkin', headers=staff)

    res = client.get('/api/staff/attendance/today', headers=staff)
    data = res.get_json()['data']
    assert data['checkedIn'] is True
    assert len(data['attendance']) == 1

    client.post('/api/staff/checkout', headers=staff)
    client.post('/api/staff/checkin', headers=staff)

    res = client.get('/api/staff/history?limit=1', headers=staff)
    body = res.get_json()
    assert body['meta'] == {'total': 2, 'page': 1, 'limit': 1, 'pages': 2}
    assert body['data'][0]['status'] == 'checked_in'


def test_leave_request_validation(client, staff):
    res = client.post('/api/staff/leave', json={'startDate': '2026-11-05', 'endDate': '2026-11-02'},
                      headers=staff)
    assert res.status_code == 400
    res = client.post('/api/staff/leave', json={'startDate': '05/11/2026', 'endDate': '2026-11-06'},
                      headers=staff)
    assert res.status_code == 400

    res = client.post('/api/staff/leave', json={'startDate': '2026-11-05', 'endDate': '2026-11-06'},
                      headers=staff)
    assert res.status_code == 201
    assert res.get_json()['data']['status'] == 'pending'

    res = client.get('/api/staff/leave', headers=staff)
    assert len(res.get_json()['data']) == 1


def test_leave_reason_must_be_text(client, staff):
    res = client.post('/api/staff/leave', json={'startDate': '2026-11-05', 'endDate': '2026-11-06', 'reason': 5},
                      headers=staff)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_input'
