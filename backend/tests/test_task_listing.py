from tests.test_utils_seed import ensure_admin, ensure_staff, create_task
from tests.test_lifecycle_helpers import login_headers


def _admin(client):
    admin = ensure_admin()
    return admin, login_headers(client, admin.email)


def test_pagination_meta(client):
    admin, ah = _admin(client)
    for i in range(5):
        create_task(admin.id, customer_name=f'Cust{i}')
    body = client.get('/api/tasks?limit=2&offset=1', headers=ah).get_json()
    assert body['pagination'] == {'total': 5, 'limit': 2, 'offset': 1, 'returned': 2}
    assert len(body['data']) == 2


def test_pagination_clamps_and_validates(client):
    admin, ah = _admin(client)
    create_task(admin.id)
    body = client.get('/api/tasks?limit=1000&offset=-3', headers=ah).get_json()
    assert body['pagination']['limit'] == 200
    assert body['pagination']['offset'] == 0
    assert client.get('/api/tasks?limit=abc', headers=ah).status_code == 400


def test_etag_conditional(client):
    admin, ah = _admin(client)
    create_task(admin.id)
    first = client.get('/api/tasks?limit=5', headers=ah)
    assert first.status_code == 200
    etag = first.headers.get('ETag')
    assert etag
    second = client.get('/api/tasks?limit=5', headers={**ah, 'If-None-Match': etag})
    assert second.status_code == 304
    assert second.headers.get('ETag') == etag
    lm = first.headers.get('Last-Modified')
    assert lm
    third = client.get('/api/tasks?limit=5', headers={**ah, 'If-Modified-Since': lm})
    assert third.status_code == 304


def test_etag_changes_when_membership_changes(client):
    admin, ah = _admin(client)
    create_task(admin.id)
    etag = client.get('/api/tasks', headers=ah).headers['ETag']
    create_task(admin.id, customer_name='Another')
    resp = client.get('/api/tasks', headers={**ah, 'If-None-Match': etag})
    assert resp.status_code == 200
    assert resp.headers['ETag'] != etag


def test_filters(client):
    admin, ah = _admin(client)
    staff = ensure_staff()
    create_task(admin.id, customer_name='Free')
    create_task(admin.id, customer_name='Busy', assigned_to=staff.id, status='working')
    create_task(admin.id, customer_name='Queued', assigned_to=staff.id, status='submitted')

    def names(qs):
        resp = client.get(f'/api/tasks?{qs}', headers=ah)
        assert resp.status_code == 200, resp.get_json()
        return sorted(t['customer_name'] for t in resp.get_json()['data'])

    assert names('status=submitted') == ['Queued']
    assert names('unassigned=true') == ['Free']
    assert names('unassigned=false') == ['Busy', 'Queued']
    assert names(f'assigned_to={staff.id}&status=working') == ['Busy']
    assert client.get('/api/tasks?status=lost', headers=ah).status_code == 400
    assert client.get('/api/tasks?unassigned=maybe', headers=ah).status_code == 400
    assert client.get('/api/tasks?assigned_to=x', headers=ah).status_code == 400


def test_multi_sort(client):
    admin, ah = _admin(client)
    create_task(admin.id, customer_name='Bea', status='working')
    create_task(admin.id, customer_name='Al', status='working')
    create_task(admin.id, customer_name='Cy', status='not_started')
    body = client.get('/api/tasks?sort=status,customer_name', headers=ah).get_json()
    assert [t['customer_name'] for t in body['data']] == ['Cy', 'Al', 'Bea']
    body = client.get('/api/tasks?sort=-customer_name', headers=ah).get_json()
    assert [t['customer_name'] for t in body['data']] == ['Cy', 'Bea', 'Al']
    assert client.get('/api/tasks?sort=password', headers=ah).status_code == 400


def test_list_requires_admin(client):
    staff = ensure_staff()
    sh = login_headers(client, staff.email)
    assert client.get('/api/tasks', headers=sh).status_code == 403


def test_etag_changes_when_a_row_changes(client):
    admin, ah = _admin(client)
    staff = ensure_staff()
    sh = login_headers(client, staff.email)
    tid = create_task(admin.id, assigned_to=staff.id, status='working').id
    first = client.get('/api/tasks', headers=ah)
    etag = first.headers['ETag']
    resp = client.patch(f'/api/tasks/{tid}/progress', json={'status': 'completed'}, headers=sh)
    assert resp.status_code == 200
    # same membership, same paging window, possibly the same second
    again = client.get('/api/tasks', headers={**ah, 'If-None-Match': etag})
    assert again.status_code == 200
    assert again.get_json()['data'][0]['status'] == 'completed'
    assert again.headers['ETag'] != etag
