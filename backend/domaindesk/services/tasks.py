from __future__ import annotations
"""Task lifecycle and the per-screen task queries.

Every mutation is a single update of one row followed by a commit; there is no
version column, so concurrent edits from two sessions are last-write-wins.
Failures abort with an HTTP status and a human-readable description, which the
JSON layer renders as an error body and the HTML layer flashes.
"""
from typing import Dict, Iterable, List, Optional
from flask import abort
from sqlalchemy import select
from domaindesk import get_db
from domaindesk.constants.roles import ROLE_STAFF
from domaindesk.models.accounts import Profile, UserRole
from domaindesk.models.task import Task
from domaindesk.services.audit import add_audit, diff, snapshot
from domaindesk.utils.fsm import TransitionValidator
from domaindesk.utils.validation import require_text, optional_text, validate_status

TASK_FSM = TransitionValidator({
    Task.STATUS_NOT_STARTED: {Task.STATUS_WORKING, Task.STATUS_COMPLETED},
    Task.STATUS_WORKING: {Task.STATUS_NOT_STARTED, Task.STATUS_COMPLETED},
    Task.STATUS_COMPLETED: {Task.STATUS_NOT_STARTED, Task.STATUS_WORKING, Task.STATUS_SUBMITTED},
    Task.STATUS_SUBMITTED: {Task.STATUS_APPROVED, Task.STATUS_REJECTED},
    Task.STATUS_REJECTED: {Task.STATUS_NOT_STARTED, Task.STATUS_WORKING, Task.STATUS_COMPLETED},
    Task.STATUS_APPROVED: set(),
})

# Staff edits: the status picker plus notes-only saves (same status).
PROGRESS_FSM = TransitionValidator({
    Task.STATUS_NOT_STARTED: {Task.STATUS_WORKING, Task.STATUS_COMPLETED},
    Task.STATUS_WORKING: {Task.STATUS_NOT_STARTED, Task.STATUS_COMPLETED},
    Task.STATUS_COMPLETED: {Task.STATUS_NOT_STARTED, Task.STATUS_WORKING},
    Task.STATUS_REJECTED: {Task.STATUS_NOT_STARTED, Task.STATUS_WORKING, Task.STATUS_COMPLETED},
}, allow_same=True)

LOCKED_FOR_STAFF = (Task.STATUS_SUBMITTED, Task.STATUS_APPROVED)
AUDIT_KEYS = ('status', 'assigned_to', 'rejection_reason')
TASK_FIELDS = {
    'customer_name': 120,
    'contact_number': 40,
    'device_name': 120,
    'problem_reported': None,
}


# ---------------- lookups ---------------- #

def get_task(task_id: int) -> Task:
    task = get_db().get(Task, task_id)
    if task is None:
        abort(404, description='task not found')
    return task


def staff_status_options(status: str) -> List[str]:
    """Picker choices for the staff dashboard, in picker order."""
    return PROGRESS_FSM.targets(status, Task.STAFF_STATUSES)


def _assert_assignee(task: Task, user_id: int):
    if task.assigned_to != user_id:
        abort(403, description='task is not assigned to you')


def _set_status(task: Task, target: str):
    if task.status == Task.STATUS_REJECTED and target != Task.STATUS_REJECTED:
        # the reason belongs to the rejected state only
        task.rejection_reason = None
    task.status = target


def _commit(task: Task, action: str, actor_id: int, before: Optional[dict] = None, **meta) -> Task:
    session = get_db()
    if before is not None:
        changes = diff(before, snapshot(task, AUDIT_KEYS))
        if changes:
            meta['changes'] = changes
    add_audit(action, actor_id, entity='Task', entity_id=task.id, meta=meta)
    session.commit()
    return task


# ---------------- admin operations ---------------- #

def create_task(data: dict, created_by: int) -> Task:
    fields = {name: require_text(data.get(name), name, max_len) for name, max_len in TASK_FIELDS.items()}
    session = get_db()
    task = Task(status=Task.STATUS_NOT_STARTED, assigned_to=None, created_by=created_by, **fields)
    session.add(task)
    session.flush()
    return _commit(task, 'TASK.CREATE', created_by, customer_name=task.customer_name, device_name=task.device_name)


def assign_task(task_id: int, staff_id: int, actor_id: int) -> Task:
    """Drop a task on a staff member. Reassignment is allowed in any status."""
    task = get_task(task_id)
    session = get_db()
    is_staff = session.execute(
        select(UserRole).where(UserRole.user_id == staff_id, UserRole.role == ROLE_STAFF)
    ).scalar_one_or_none()
    if not is_staff:
        abort(400, description='assignee must be a staff member')
    before = snapshot(task, AUDIT_KEYS)
    task.assigned_to = staff_id
    return _commit(task, 'TASK.ASSIGN', actor_id, before)


def approve_task(task_id: int, actor_id: int) -> Task:
    task = get_task(task_id)
    before = snapshot(task, AUDIT_KEYS)
    TASK_FSM.assert_can_transition(task.status, Task.STATUS_APPROVED)
    _set_status(task, Task.STATUS_APPROVED)
    return _commit(task, 'TASK.APPROVE', actor_id, before)


def reject_task(task_id: int, reason, actor_id: int) -> Task:
    task = get_task(task_id)
    reason = require_text(reason, 'rejection_reason')
    before = snapshot(task, AUDIT_KEYS)
    TASK_FSM.assert_can_transition(task.status, Task.STATUS_REJECTED)
    task.status = Task.STATUS_REJECTED
    task.rejection_reason = reason
    return _commit(task, 'TASK.REJECT', actor_id, before)


def delete_task(task_id: int, actor_id: int):
    task = get_task(task_id)
    if task.assigned_to is not None:
        abort(400, description='only unassigned tasks can be deleted')
    session = get_db()
    add_audit('TASK.DELETE', actor_id, entity='Task', entity_id=task.id,
              meta={'customer_name': task.customer_name, 'device_name': task.device_name})
    session.delete(task)
    session.commit()


# ---------------- staff operations ---------------- #

def update_progress(task_id: int, user_id: int, status: Optional[str] = None, staff_notes=None) -> Task:
    """Status picker / notes save on the staff dashboard.

    `status=None` keeps the current status; `staff_notes=None` leaves notes untouched.
    """
    task = get_task(task_id)
    _assert_assignee(task, user_id)
    if task.status in LOCKED_FOR_STAFF:
        abort(400, description=f'task is {task.status} and can no longer be edited')
    staff_notes = optional_text(staff_notes, 'staff_notes')
    target = task.status if status is None else validate_status(status, Task.STAFF_STATUSES)
    before = snapshot(task, AUDIT_KEYS)
    PROGRESS_FSM.assert_can_transition(task.status, target)
    _set_status(task, target)
    if staff_notes is not None:
        task.staff_notes = staff_notes
    return _commit(task, 'TASK.PROGRESS', user_id, before)


def submit_task(task_id: int, user_id: int, staff_notes=None) -> Task:
    task = get_task(task_id)
    _assert_assignee(task, user_id)
    staff_notes = optional_text(staff_notes, 'staff_notes')
    before = snapshot(task, AUDIT_KEYS)
    TASK_FSM.assert_can_transition(task.status, Task.STATUS_SUBMITTED)
    _set_status(task, Task.STATUS_SUBMITTED)
    if staff_notes is not None:
        task.staff_notes = staff_notes
    return _commit(task, 'TASK.SUBMIT', user_id, before)


# ---------------- per-screen queries ---------------- #

def _newest_first(q):
    return q.order_by(Task.created_at.desc(), Task.id.desc())


def bucket_tasks() -> List[Task]:
    return get_db().execute(_newest_first(select(Task).where(Task.assigned_to.is_(None)))).scalars().all()


def overview_tasks() -> List[Task]:
    return get_db().execute(_newest_first(select(Task).where(Task.assigned_to.is_not(None)))).scalars().all()


def review_queue() -> List[Task]:
    return get_db().execute(_newest_first(select(Task).where(Task.status == Task.STATUS_SUBMITTED))).scalars().all()


def approved_tasks() -> List[Task]:
    q = select(Task).where(Task.status == Task.STATUS_APPROVED).order_by(Task.updated_at.desc(), Task.id.desc())
    return get_db().execute(q).scalars().all()


def tasks_for_staff(user_id: int) -> List[Task]:
    """The staff dashboard list: my tasks minus the approved ones."""
    q = select(Task).where(Task.assigned_to == user_id, Task.status != Task.STATUS_APPROVED)
    return get_db().execute(_newest_first(q)).scalars().all()


def tasks_by_assignee(tasks: Iterable[Task]) -> Dict[int, List[Task]]:
    grouped: Dict[int, List[Task]] = {}
    for t in tasks:
        if t.assigned_to is not None:
            grouped.setdefault(t.assigned_to, []).append(t)
    return grouped


def staff_names(user_ids: Iterable[Optional[int]]) -> Dict[int, str]:
    ids = {i for i in user_ids if i is not None}
    if not ids:
        return {}
    profiles = get_db().execute(select(Profile).where(Profile.id.in_(ids))).scalars().all()
    return {p.id: p.display_name for p in profiles}


def task_json(t: Task, names: Optional[Dict[int, str]] = None) -> dict:
    body = {
        'id': t.id,
        'customer_name': t.customer_name,
        'contact_number': t.contact_number,
        'device_name': t.device_name,
        'problem_reported': t.problem_reported,
        'status': t.status,
        'assigned_to': t.assigned_to,
        'staff_notes': t.staff_notes,
        'rejection_reason': t.rejection_reason,
        'created_by': t.created_by,
        'created_at': t.created_at.isoformat() if t.created_at else None,
        'updated_at': t.updated_at.isoformat() if t.updated_at else None,
    }
    if names is not None:
        body['assigned_to_name'] = names.get(t.assigned_to, 'Unknown') if t.assigned_to else None
    return body
