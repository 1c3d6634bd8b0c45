from __future__ import annotations
from flask import Blueprint, request
from domaindesk.constants.roles import ROLE_ADMIN
from domaindesk.decorators.auth import require_roles
from domaindesk.services import staff as svc
from domaindesk.services.session import current_user_id

staff_bp = Blueprint('staff', __name__)


@staff_bp.get('')
@require_roles(ROLE_ADMIN)
def list_staff():
    rows = svc.list_staff()
    return {'data': [svc.profile_json(p) for p in rows], 'count': len(rows)}


@staff_bp.post('')
@require_roles(ROLE_ADMIN)
def create_staff():
    data = request.get_json(silent=True) or {}
    profile = svc.create_staff(
        data.get('email'), data.get('password'), data.get('full_name'),
        current_user_id(), redirect_url=data.get('redirect_url'),
    )
    return svc.profile_json(profile), 201


@staff_bp.get('/board')
@require_roles(ROLE_ADMIN)
def board():
    return {'data': svc.staff_board()}


@staff_bp.post('/<int:user_id>/toggle')
@require_roles(ROLE_ADMIN)
def toggle(user_id: int):
    return svc.profile_json(svc.toggle_staff_status(user_id, current_user_id()))


@staff_bp.put('/<int:user_id>/status')
@require_roles(ROLE_ADMIN)
def set_status(user_id: int):
    data = request.get_json(silent=True) or {}
    return svc.profile_json(svc.set_staff_status(user_id, data.get('status'), current_user_id()))


@staff_bp.delete('/<int:user_id>')
@require_roles(ROLE_ADMIN)
def remove(user_id: int):
    svc.remove_staff(user_id, current_user_id())
    return '', 204
