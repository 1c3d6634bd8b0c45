from functools import wraps
from flask import abort, redirect, render_template, url_for
from flask_jwt_extended import verify_jwt_in_request
from domaindesk.services.session import GateState, evaluate_gate, read_session, session_for, current_user_id


def require_roles(*roles: str):
    """JSON endpoints: 401 without a valid token, 403 when the role is not allowed."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            state = evaluate_gate(session_for(current_user_id()), roles)
            if state is not GateState.AUTHORIZED:
                abort(403, description='Role not allowed')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def role_gate(*roles: str):
    """HTML pages: render only for allowed roles, otherwise send the visitor to sign-in."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            state = evaluate_gate(read_session(), roles)
            if state is GateState.LOADING:
                return render_template('loading.html'), 202
            if state is GateState.UNAUTHORIZED:
                return redirect(url_for('site.auth'))
            return fn(*args, **kwargs)
        return wrapper
    return outer
