"""Server-rendered pages: front page, sign-in, admin dashboard, staff dashboard.

Form posts call the same service functions as the JSON API. A failure is caught
here and shown once as a flashed notification; the visitor is sent back to the
page they came from and can resubmit.
"""
from __future__ import annotations
from typing import Callable
from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app
from flask_jwt_extended import set_access_cookies, unset_jwt_cookies
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from domaindesk import get_db
from domaindesk.constants.roles import ROLE_ADMIN, ROLE_STAFF, ROLE_HOME
from domaindesk.content import landing_context
from domaindesk.decorators.auth import role_gate
from domaindesk.services import staff as staff_svc
from domaindesk.services import tasks as task_svc
from domaindesk.services.accounts import authenticate, issue_token
from domaindesk.services.session import current_user_id, read_session, role_of
from domaindesk.utils.validation import coerce_id, require_text, validate_email

site_bp = Blueprint('site', __name__)

ADMIN_TABS = ('tasks', 'staff', 'review', 'approved')
LOGIN_TYPES = (ROLE_ADMIN, ROLE_STAFF)
GENERIC_ERROR = 'Something went wrong. Please try again.'


@site_bp.app_context_processor
def inject_csrf():
    # double-submit value flask-jwt-extended checks on cookie-authenticated form posts
    return {'csrf_token': request.cookies.get('csrf_access_token', '')}


def _attempt(action: Callable[[], object], success: str) -> bool:
    try:
        action()
    except HTTPException as e:
        get_db().rollback()
        flash(e.description, 'error')
        return False
    except SQLAlchemyError:
        get_db().rollback()
        current_app.logger.exception('form action failed')
        flash(GENERIC_ERROR, 'error')
        return False
    flash(success, 'success')
    return True


def _back(endpoint: str, **values):
    return redirect(url_for(endpoint, **values))


# ---------------- public pages ---------------- #

@site_bp.get('/')
def home():
    return render_template('landing.html', **landing_context())


@site_bp.post('/contact')
def contact():
    def send():
        name = require_text(request.form.get('name'), 'name', 120)
        email = validate_email(request.form.get('email'))
        message = require_text(request.form.get('message'), 'message', 2000)
        current_app.logger.info('contact message from %s <%s>: %s', name, email, message)
    _attempt(send, "Thanks! We'll get back to you shortly.")
    return redirect(url_for('site.home', _anchor='contact'))


@site_bp.route('/auth', methods=['GET', 'POST'])
def auth():
    login_type = request.values.get('as', ROLE_ADMIN)
    if login_type not in LOGIN_TYPES:
        login_type = ROLE_ADMIN
    if request.method == 'GET':
        info = read_session()
        if info.role in ROLE_HOME:
            return redirect(url_for(ROLE_HOME[info.role]))
        return render_template('auth.html', login_type=login_type)

    try:
        user = authenticate(request.form.get('email'), request.form.get('password'))
    except HTTPException as e:
        flash(e.description, 'error')
        return render_template('auth.html', login_type=login_type), e.code
    role = role_of(user.id)
    if role not in ROLE_HOME:
        flash('This account has no dashboard access.', 'error')
        return render_template('auth.html', login_type=login_type), 403
    resp = redirect(url_for(ROLE_HOME[role]))
    set_access_cookies(resp, issue_token(user))
    return resp


@site_bp.post('/logout')
def logout():
    resp = redirect(url_for('site.auth'))
    unset_jwt_cookies(resp)
    flash('Signed out.', 'success')
    return resp


# ---------------- admin dashboard ---------------- #

@site_bp.get('/admin')
@role_gate(ROLE_ADMIN)
def admin_dashboard():
    tab = request.args.get('tab', 'tasks')
    if tab not in ADMIN_TABS:
        tab = 'tasks'
    overview = task_svc.overview_tasks()
    review = task_svc.review_queue()
    approved = task_svc.approved_tasks()
    names = task_svc.staff_names(t.assigned_to for t in overview)
    return render_template(
        'admin.html',
        tab=tab,
        tabs=ADMIN_TABS,
        bucket=task_svc.bucket_tasks(),
        overview=overview,
        by_staff=task_svc.tasks_by_assignee(overview),
        review=review,
        approved=approved,
        staff=staff_svc.list_staff(),
        names=names,
    )


@site_bp.post('/admin/tasks')
@role_gate(ROLE_ADMIN)
def admin_create_task():
    _attempt(lambda: task_svc.create_task(request.form, current_user_id()),
             'New repair task has been added to the bucket.')
    return _back('site.admin_dashboard', tab='tasks')


@site_bp.post('/admin/tasks/<int:task_id>/assign')
@role_gate(ROLE_ADMIN)
def admin_assign_task(task_id: int):
    _attempt(lambda: task_svc.assign_task(task_id, coerce_id(request.form.get('staff_id'), 'staff_id'), current_user_id()),
             'Task has been assigned to staff member.')
    return _back('site.admin_dashboard', tab='tasks')


@site_bp.post('/admin/tasks/<int:task_id>/delete')
@role_gate(ROLE_ADMIN)
def admin_delete_task(task_id: int):
    _attempt(lambda: task_svc.delete_task(task_id, current_user_id()), 'The task has been removed.')
    return _back('site.admin_dashboard', tab='tasks')


@site_bp.post('/admin/tasks/<int:task_id>/approve')
@role_gate(ROLE_ADMIN)
def admin_approve_task(task_id: int):
    _attempt(lambda: task_svc.approve_task(task_id, current_user_id()),
             'The task has been approved and moved to completed tasks.')
    return _back('site.admin_dashboard', tab='review')


@site_bp.post('/admin/tasks/<int:task_id>/reject')
@role_gate(ROLE_ADMIN)
def admin_reject_task(task_id: int):
    _attempt(lambda: task_svc.reject_task(task_id, request.form.get('reason'), current_user_id()),
             'The task has been returned to the staff member with feedback.')
    return _back('site.admin_dashboard', tab='review')


@site_bp.post('/admin/staff')
@role_gate(ROLE_ADMIN)
def admin_create_staff():
    form = request.form
    _attempt(lambda: staff_svc.create_staff(form.get('email'), form.get('password'), form.get('full_name'),
                                            current_user_id(), redirect_url=request.host_url),
             'New staff member has been created successfully.')
    return _back('site.admin_dashboard', tab='staff')


@site_bp.post('/admin/staff/<int:user_id>/toggle')
@role_gate(ROLE_ADMIN)
def admin_toggle_staff(user_id: int):
    _attempt(lambda: staff_svc.toggle_staff_status(user_id, current_user_id()), 'Staff member status has been updated.')
    return _back('site.admin_dashboard', tab='staff')


@site_bp.post('/admin/staff/<int:user_id>/remove')
@role_gate(ROLE_ADMIN)
def admin_remove_staff(user_id: int):
    _attempt(lambda: staff_svc.remove_staff(user_id, current_user_id()), 'Staff member has been removed.')
    return _back('site.admin_dashboard', tab='staff')


# ---------------- staff dashboard ---------------- #

@site_bp.get('/staff')
@role_gate(ROLE_STAFF)
def staff_dashboard():
    return render_template(
        'staff.html',
        tasks=task_svc.tasks_for_staff(current_user_id()),
        status_options=task_svc.staff_status_options,
        locked=task_svc.LOCKED_FOR_STAFF,
    )


@site_bp.post('/staff/tasks/<int:task_id>/progress')
@role_gate(ROLE_STAFF)
def staff_update_task(task_id: int):
    _attempt(lambda: task_svc.update_progress(task_id, current_user_id(),
                                              status=request.form.get('status') or None,
                                              staff_notes=request.form.get('staff_notes')),
             'Task Updated')
    return _back('site.staff_dashboard')


@site_bp.post('/staff/tasks/<int:task_id>/submit')
@role_gate(ROLE_STAFF)
def staff_submit_task(task_id: int):
    _attempt(lambda: task_svc.submit_task(task_id, current_user_id(), staff_notes=request.form.get('staff_notes')),
             'Task submitted for review.')
    return _back('site.staff_dashboard')
