def test_unknown_path_returns_error_json(client):
    resp = client.get('/api/non-existent-path')
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['status'] == 404
    assert body['error']['title'] == 'Not Found'
    assert 'detail' in body['error']


def test_method_not_allowed_shape(client):
    resp = client.put('/api/auth/login')
    assert resp.status_code == 405
    assert resp.get_json()['error']['status'] == 405


def test_validation_error_detail(client):
    resp = client.post('/api/auth/signup', json={'email': 'nope', 'password': 'secret1'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == {'status': 400, 'title': 'Bad Request', 'detail': 'email invalid'}


def test_internal_error_shape(client, monkeypatch):
    import domaindesk.routes.auth as auth_mod

    def boom(*a, **k):
        raise RuntimeError('explode')
    monkeypatch.setattr(auth_mod, 'read_session', boom)
    resp = client.get('/api/auth/session')
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'
    assert 'explode' not in body['error']['detail']


def test_health(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
