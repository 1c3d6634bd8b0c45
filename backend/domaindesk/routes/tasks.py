from __future__ import annotations
from flask import Blueprint, request, abort
from domaindesk import get_db
from domaindesk.constants.roles import ROLE_ADMIN, ROLE_STAFF
from domaindesk.decorators.auth import require_roles
from domaindesk.models.task import Task
from domaindesk.services import tasks as svc
from domaindesk.services.session import current_user_id, role_of
from domaindesk.utils.filters import apply_filters, parse_bool
from domaindesk.utils.listing import paginate, list_response
from domaindesk.utils.sorting import apply_multi_sort
from domaindesk.utils.validation import coerce_id

tasks_bp = Blueprint('tasks', __name__)

SORTABLE = {
    'customer_name': Task.customer_name,
    'status': Task.status,
    'created_at': Task.created_at,
    'updated_at': Task.updated_at,
    'id': Task.id,
}

FILTERS = {
    'status': {
        'op': lambda q, v: q.filter(Task.status == v),
        'validate': lambda v: v in Task.ALL_STATUSES,
    },
    'assigned_to': {
        'op': lambda q, v: q.filter(Task.assigned_to == v),
        'coerce': int,
    },
    'unassigned': {
        'op': lambda q, v: q.filter(Task.assigned_to.is_(None) if v else Task.assigned_to.is_not(None)),
        'coerce': parse_bool,
    },
}


def _payload():
    return request.get_json(silent=True) or {}


def _screen(rows):
    names = svc.staff_names(t.assigned_to for t in rows)
    return {'data': [svc.task_json(t, names) for t in rows], 'count': len(rows)}


def _one(task: Task):
    return svc.task_json(task, svc.staff_names([task.assigned_to]))


@tasks_bp.get('')
@require_roles(ROLE_ADMIN)
def list_tasks():
    session = get_db()
    q = apply_filters(session.query(Task), FILTERS, request.args)
    q = apply_multi_sort(q, request.args.get('sort'), SORTABLE, [Task.created_at.desc()], Task.id.desc())
    paged_q, total, limit, offset = paginate(q)
    rows = paged_q.all()
    names = svc.staff_names(t.assigned_to for t in rows)
    return list_response([svc.task_json(t, names) for t in rows], rows, total, limit, offset)


@tasks_bp.post('')
@require_roles(ROLE_ADMIN)
def create_task():
    task = svc.create_task(_payload(), current_user_id())
    return _one(task), 201


# ---- per-screen lists ---- #

@tasks_bp.get('/bucket')
@require_roles(ROLE_ADMIN)
def bucket():
    return _screen(svc.bucket_tasks())


@tasks_bp.get('/overview')
@require_roles(ROLE_ADMIN)
def overview():
    return _screen(svc.overview_tasks())


@tasks_bp.get('/review')
@require_roles(ROLE_ADMIN)
def review():
    return _screen(svc.review_queue())


@tasks_bp.get('/approved')
@require_roles(ROLE_ADMIN)
def approved():
    return _screen(svc.approved_tasks())


@tasks_bp.get('/mine')
@require_roles(ROLE_STAFF)
def mine():
    return _screen(svc.tasks_for_staff(current_user_id()))


@tasks_bp.get('/<int:task_id>')
@require_roles(ROLE_ADMIN, ROLE_STAFF)
def get_task(task_id: int):
    task = svc.get_task(task_id)
    uid = current_user_id()
    if role_of(uid) == ROLE_STAFF and task.assigned_to != uid:
        # staff only see their own tasks
        abort(404, description='task not found')
    return _one(task)


# ---- lifecycle actions ---- #

@tasks_bp.post('/<int:task_id>/assign')
@require_roles(ROLE_ADMIN)
def assign(task_id: int):
    staff_id = coerce_id(_payload().get('staff_id'), 'staff_id')
    return _one(svc.assign_task(task_id, staff_id, current_user_id()))


@tasks_bp.patch('/<int:task_id>/progress')
@require_roles(ROLE_STAFF)
def progress(task_id: int):
    data = _payload()
    task = svc.update_progress(task_id, current_user_id(), status=data.get('status'), staff_notes=data.get('staff_notes'))
    return _one(task)


@tasks_bp.post('/<int:task_id>/submit')
@require_roles(ROLE_STAFF)
def submit(task_id: int):
    task = svc.submit_task(task_id, current_user_id(), staff_notes=_payload().get('staff_notes'))
    return _one(task)


@tasks_bp.post('/<int:task_id>/approve')
@require_roles(ROLE_ADMIN)
def approve(task_id: int):
    return _one(svc.approve_task(task_id, current_user_id()))


@tasks_bp.post('/<int:task_id>/reject')
@require_roles(ROLE_ADMIN)
def reject(task_id: int):
    return _one(svc.reject_task(task_id, _payload().get('reason'), current_user_id()))


@tasks_bp.delete('/<int:task_id>')
@require_roles(ROLE_ADMIN)
def delete(task_id: int):
    svc.delete_task(task_id, current_user_id())
    return '', 204
