import time

import pytest

from utils.signature import compute_signature, get_client_key, signing_payload


@pytest.fixture
def signed_app(app):
    app.config['API_SIGNATURE_REQUIRED'] = True
    with app.app_context():
        key = get_client_key()
    return app, key


def signed_headers(key, method, path, body=None, query_string='', query=None, timestamp=None):
    ts = str(timestamp if timestamp is not None else int(time.time() * 1000))
    payload = signing_payload(method, path, query_string, query or {}, body or {}, ts)
    return {'X-Signature': compute_signature(key, payload), 'X-Timestamp': ts}


def test_signing_payload_layout():
    payload = signing_payload('get', '/api/staff/history', 'page=2', {'page': '2'}, {}, '1700000000000')
    assert payload == 'GET/api/staff/history?page=2{"page":"2"}{}1700000000000'


def test_client_key_is_persisted(app, tmp_path):
    with app.app_context():
        key = get_client_key()
    assert len(key) == 64
    assert (tmp_path / 'client.key').read_text().strip() == key


def test_missing_signature_is_rejected(signed_app, make_user, auth_header):
    app, _ = signed_app
    client = app.test_client()
    user_id = make_user()

    res = client.get('/api/user/me', headers=auth_header(user_id))
    assert res.status_code == 401
    assert res.get_json()['error'] == 'invalid_signature'


def test_stale_timestamp_is_rejected(signed_app, make_user, auth_header):
    app, key = signed_app
    client = app.test_client()
    user_id = make_user()
    stale = int(time.time() * 1000) - 60000

    headers = {**auth_header(user_id), **signed_headers(key, 'GET', '/api/user/me', timestamp=stale)}
    res = client.get('/api/user/me', headers=headers)
    assert res.status_code == 410
    assert res.get_json()['error'] == 'stale'


def test_tampered_signature_is_rejected(signed_app, make_user, auth_header):
    app, key = signed_app
    client = app.test_client()
    user_id = make_user()

    headers = {**auth_header(user_id), **signed_headers('other-key', 'GET', '/api/user/me')}
    res = client.get('/api/user/me', headers=headers)
    assert res.status_code == 401


def test_valid_signature_passes(signed_app, make_user, auth_header):
    app, key = signed_app
    client = app.test_client()
    user_id = make_user()

    headers = {**auth_header(user_id), **signed_headers(key, 'GET', '/api/user/me')}
    assert client.get('/api/user/me', headers=headers).status_code == 200

    body = {'preferredOfflineBalance': 100}
    headers = {**auth_header(user_id),
               **signed_headers(key, 'PUT', '/api/user/preferred-offline-balance', body=body)}
    res = client.put('/api/user/preferred-offline-balance', json=body, headers=headers)
    assert res.status_code == 200


def test_signature_can_be_skipped_outside_production(signed_app, make_user, auth_header):
    app, _ = signed_app
    app.config['SKIP_API_SIGNATURE'] = True
    client = app.test_client()
    user_id = make_user()

    assert client.get('/api/user/me', headers=auth_header(user_id)).status_code == 200

    app.config['PRODUCTION'] = True
    assert client.get('/api/user/me', headers=auth_header(user_id)).status_code == 401


def test_auth_routes_are_not_signed(signed_app):
    app, _ = signed_app
    res = app.test_client().post('/api/auth/login', json={'email': 'x@test.local', 'password': 'y'})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'invalid_credentials'
