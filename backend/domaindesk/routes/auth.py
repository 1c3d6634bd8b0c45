from flask import Blueprint, request, jsonify
from flask_jwt_extended import unset_jwt_cookies
from domaindesk import get_db
from domaindesk.services.accounts import sign_up, authenticate, issue_token
from domaindesk.services.session import read_session, evaluate_gate, role_of
from domaindesk.constants.roles import ALL_ROLES

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/signup')
def signup():
    """Create an account. Roles are granted separately by an admin (see /staff)."""
    data = request.get_json(silent=True) or {}
    user = sign_up(data.get('email'), data.get('password'), data.get('full_name'), data.get('redirect_url'))
    get_db().commit()
    return {'id': user.id, 'email': user.email, 'redirect_url': user.redirect_url}, 201


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    user = authenticate(data.get('email'), data.get('password'))
    return {'access_token': issue_token(user), 'role': role_of(user.id)}


@auth_bp.post('/logout')
def logout():
    # Bearer tokens are stateless; clearing cookies ends browser sessions
    out = jsonify({'status': 'signed_out'})
    unset_jwt_cookies(out)
    return out


@auth_bp.get('/session')
def current_session():
    info = read_session()
    body = info.as_dict()
    body['state'] = evaluate_gate(info, ALL_ROLES).value
    return body
