from domaindesk import get_db
from domaindesk.models.audit import AuditLog
from tests.test_utils_seed import ensure_admin, ensure_staff, create_task, reload_task
from tests.test_lifecycle_helpers import (
    login_headers, assert_transition, create_task_and_assert, exercise_task_lifecycle,
)


def _actors(client):
    admin = ensure_admin()
    staff = ensure_staff()
    return admin, staff, login_headers(client, admin.email), login_headers(client, staff.email)


def test_full_lifecycle(client):
    admin, staff, ah, sh = _actors(client)
    tid = exercise_task_lifecycle(client, ah, sh, staff.id)
    task = reload_task(tid)
    assert task.status == 'approved'
    assert task.staff_notes == 'Replaced panel'
    assert task.assigned_to == staff.id


def test_create_task_requires_all_fields(client):
    admin, _, ah, _ = _actors(client)
    resp = client.post('/api/tasks', json={'customer_name': 'Bob', 'contact_number': '1', 'device_name': '  '},
                       headers=ah)
    assert resp.status_code == 400
    assert 'device_name' in resp.get_json()['error']['detail']


def test_create_task_trims_fields(client):
    _, _, ah, _ = _actors(client)
    body = create_task_and_assert(client, ah, customer_name='  Bob  ')
    assert body['customer_name'] == 'Bob'
    assert body['rejection_reason'] is None
    assert body['assigned_to_name'] is None


def test_invalid_transitions(client):
    admin, staff, ah, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id).id
    # submit before completed
    assert_transition(client, 'post', f'/api/tasks/{tid}/submit', sh, 400)
    # approve / reject need a submitted task
    assert_transition(client, 'post', f'/api/tasks/{tid}/approve', ah, 400)
    assert_transition(client, 'post', f'/api/tasks/{tid}/reject', ah, 400, {'reason': 'nope'})
    # staff picker cannot jump to review states
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 400, {'status': 'approved'})
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 400, {'status': 'submitted'})
    assert reload_task(tid).status == 'not_started'


def test_not_started_can_jump_to_completed(client):
    admin, staff, ah, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id).id
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 200, {'status': 'completed'}, 'completed')
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 200, {'status': 'not_started'}, 'not_started')


def test_notes_only_save_keeps_status(client):
    admin, staff, _, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='working').id
    resp = assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 200,
                             {'staff_notes': 'Waiting on part'}, 'working')
    assert resp.get_json()['staff_notes'] == 'Waiting on part'


def test_reject_then_rework_clears_reason(client):
    admin, staff, ah, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='submitted').id
    resp = assert_transition(client, 'post', f'/api/tasks/{tid}/reject', ah, 200,
                             {'reason': 'Screen still flickers'}, 'rejected')
    assert resp.get_json()['rejection_reason'] == 'Screen still flickers'
    # staff sees the reason on their list
    mine = client.get('/api/tasks/mine', headers=sh).get_json()['data']
    assert mine[0]['rejection_reason'] == 'Screen still flickers'
    resp = assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 200, {'status': 'working'}, 'working')
    assert resp.get_json()['rejection_reason'] is None


def test_rejected_can_go_straight_to_completed_and_resubmit(client):
    admin, staff, ah, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='rejected', rejection_reason='redo').id
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 200, {'status': 'completed'}, 'completed')
    assert_transition(client, 'post', f'/api/tasks/{tid}/submit', sh, 200, None, 'submitted')
    # a rejected task cannot be submitted without passing through completed
    tid2 = create_task(admin.id, assigned_to=staff.id, status='rejected', rejection_reason='redo').id
    assert_transition(client, 'post', f'/api/tasks/{tid2}/submit', sh, 400)


def test_reject_requires_reason(client):
    admin, staff, ah, _ = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='submitted').id
    resp = client.post(f'/api/tasks/{tid}/reject', json={'reason': '   '}, headers=ah)
    assert resp.status_code == 400
    assert reload_task(tid).status == 'submitted'


def test_approved_is_terminal(client):
    admin, staff, ah, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='approved').id
    assert_transition(client, 'post', f'/api/tasks/{tid}/reject', ah, 400, {'reason': 'late'})
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 400, {'status': 'working'})
    assert_transition(client, 'patch', f'/api/tasks/{tid}/progress', sh, 400, {'staff_notes': 'edit'})


def test_submitted_is_locked_for_staff(client):
    admin, staff, _, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='submitted').id
    resp = client.patch(f'/api/tasks/{tid}/progress', json={'staff_notes': 'one more thing'}, headers=sh)
    assert resp.status_code == 400
    assert 'submitted' in resp.get_json()['error']['detail']


def test_submit_saves_notes(client):
    admin, staff, _, sh = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id, status='completed').id
    resp = assert_transition(client, 'post', f'/api/tasks/{tid}/submit', sh, 200, {'staff_notes': 'All done'}, 'submitted')
    assert resp.get_json()['staff_notes'] == 'All done'


def test_mutations_write_audit_entries(client):
    admin, staff, ah, sh = _actors(client)
    tid = exercise_task_lifecycle(client, ah, sh, staff.id)
    session = get_db()
    rows = session.query(AuditLog).filter_by(entity='Task', entity_id=str(tid)).order_by(AuditLog.id).all()
    assert [r.action for r in rows] == [
        'TASK.CREATE', 'TASK.ASSIGN', 'TASK.PROGRESS', 'TASK.PROGRESS', 'TASK.SUBMIT', 'TASK.APPROVE',
    ]
    assign = rows[1]
    assert assign.actor_user_id == admin.id
    assert assign.meta['changes']['assigned_to'] == {'before': None, 'after': staff.id}
    submit = rows[4]
    assert submit.actor_user_id == staff.id
    assert submit.meta['changes']['status'] == {'before': 'completed', 'after': 'submitted'}


def test_failed_transition_leaves_no_audit(client):
    admin, staff, ah, _ = _actors(client)
    tid = create_task(admin.id, assigned_to=staff.id).id
    client.post(f'/api/tasks/{tid}/approve', headers=ah)
    assert get_db().query(AuditLog).filter_by(entity_id=str(tid)).count() == 0
