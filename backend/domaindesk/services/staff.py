from __future__ import annotations
from typing import List, Optional
from flask import abort
from sqlalchemy import select, delete
from domaindesk import get_db
from domaindesk.constants.roles import ROLE_STAFF, ALL_PROFILE_STATUSES, PROFILE_ACTIVE, PROFILE_DISABLED
from domaindesk.models.accounts import Profile, UserRole
from domaindesk.services.accounts import sign_up, grant_role
from domaindesk.services.audit import add_audit
from domaindesk.services.tasks import overview_tasks, tasks_by_assignee, task_json
from domaindesk.utils.validation import validate_status


def list_staff() -> List[Profile]:
    session = get_db()
    ids = session.execute(select(UserRole.user_id).where(UserRole.role == ROLE_STAFF)).scalars().all()
    if not ids:
        return []
    q = select(Profile).where(Profile.id.in_(ids)).order_by(Profile.email.asc())
    return session.execute(q).scalars().all()


def get_staff(user_id: int) -> Profile:
    session = get_db()
    is_staff = session.execute(
        select(UserRole).where(UserRole.user_id == user_id, UserRole.role == ROLE_STAFF)
    ).scalar_one_or_none()
    profile = session.get(Profile, user_id) if is_staff else None
    if profile is None:
        abort(404, description='staff member not found')
    return profile


def create_staff(email, password, full_name, actor_id: int, redirect_url: Optional[str] = None) -> Profile:
    """Sign up a new account and give it the staff role, in one commit."""
    session = get_db()
    user = sign_up(email, password, full_name, redirect_url)
    grant_role(user.id, ROLE_STAFF)
    add_audit('STAFF.CREATE', actor_id, entity='Profile', entity_id=user.id, meta={'email': user.email})
    session.commit()
    return session.get(Profile, user.id)


def set_staff_status(user_id: int, status: str, actor_id: int) -> Profile:
    status = validate_status(status, ALL_PROFILE_STATUSES)
    profile = get_staff(user_id)
    before = profile.status
    profile.status = status
    add_audit('STAFF.STATUS', actor_id, entity='Profile', entity_id=user_id,
              meta={'changes': {'status': {'before': before, 'after': status}}} if before != status else {})
    get_db().commit()
    return profile


def toggle_staff_status(user_id: int, actor_id: int) -> Profile:
    profile = get_staff(user_id)
    target = PROFILE_DISABLED if profile.status == PROFILE_ACTIVE else PROFILE_ACTIVE
    return set_staff_status(user_id, target, actor_id)


def remove_staff(user_id: int, actor_id: int):
    """Drop the staff role only; the account, profile and task assignments remain."""
    get_staff(user_id)
    session = get_db()
    session.execute(delete(UserRole).where(UserRole.user_id == user_id))
    add_audit('STAFF.REMOVE', actor_id, entity='Profile', entity_id=user_id)
    session.commit()


def profile_json(p: Profile) -> dict:
    return {
        'id': p.id,
        'email': p.email,
        'full_name': p.full_name,
        'display_name': p.display_name,
        'status': p.status,
    }


def staff_board() -> List[dict]:
    """Drop zones: every staff member with the tasks currently assigned to them."""
    grouped = tasks_by_assignee(overview_tasks())
    return [
        dict(profile_json(p), tasks=[task_json(t) for t in grouped.get(p.id, [])])
        for p in list_staff()
    ]
