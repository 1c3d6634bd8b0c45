"""Cookie-authenticated form posts with double-submit CSRF protection switched on."""
import re
import pytest
from tests.test_utils_seed import ensure_admin, ensure_staff, create_task, reload_task
from tests.test_lifecycle_helpers import browser_login

TOKEN_FIELD = re.compile(r'name="csrf_token" value="([^"]+)"')


@pytest.fixture()
def csrf_client(app_instance, client, monkeypatch):
    monkeypatch.setitem(app_instance.config, 'JWT_COOKIE_CSRF_PROTECT', True)
    return client


def _staff_with_task(client):
    admin = ensure_admin()
    staff = ensure_staff()
    tid = create_task(admin.id, assigned_to=staff.id).id
    browser_login(client, staff.email, login_type='staff')
    return tid


def test_form_post_with_rendered_token(csrf_client):
    tid = _staff_with_task(csrf_client)
    page = csrf_client.get('/staff')
    assert page.status_code == 200
    token = TOKEN_FIELD.search(page.get_data(as_text=True)).group(1)
    resp = csrf_client.post(f'/staff/tasks/{tid}/progress', data={'csrf_token': token, 'status': 'working'})
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/staff')
    assert reload_task(tid).status == 'working'


def test_form_post_without_token_is_sent_to_sign_in(csrf_client):
    tid = _staff_with_task(csrf_client)
    resp = csrf_client.post(f'/staff/tasks/{tid}/progress', data={'status': 'working'})
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/auth')
    assert reload_task(tid).status == 'not_started'


def test_form_post_with_wrong_token_is_sent_to_sign_in(csrf_client):
    tid = _staff_with_task(csrf_client)
    resp = csrf_client.post(f'/staff/tasks/{tid}/progress', data={'csrf_token': 'forged', 'status': 'working'})
    assert resp.headers['Location'].endswith('/auth')
    assert reload_task(tid).status == 'not_started'
