from __future__ import annotations
from typing import Optional
from flask import abort, current_app
from flask_jwt_extended import create_access_token
from sqlalchemy import select
from domaindesk import get_db
from domaindesk.constants.roles import ALL_ROLES, PROFILE_ACTIVE, PROFILE_DISABLED
from domaindesk.models.accounts import User, Profile, UserRole
from domaindesk.services.session import role_of
from domaindesk.utils.validation import validate_email, validate_password, validate_redirect_url, validate_status


def sign_up(email, password, full_name: Optional[str] = None, redirect_url: Optional[str] = None) -> User:
    """Create an auth account plus its profile. Flushes; the caller commits."""
    email = validate_email(email)
    password = validate_password(password)
    redirect_url = validate_redirect_url(redirect_url)
    full_name = full_name.strip() if isinstance(full_name, str) and full_name.strip() else None
    session = get_db()
    if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
        abort(400, description='email already registered')
    user = User(email=email, password_hash='', redirect_url=redirect_url)
    user.set_password(password)
    session.add(user)
    session.flush()
    session.add(Profile(id=user.id, email=email, full_name=full_name, status=PROFILE_ACTIVE))
    session.flush()
    current_app.logger.info('signed up user %s', user.id)
    return user


def grant_role(user_id: int, role: str) -> UserRole:
    """Set the single role row of a user, replacing any previous role."""
    validate_status(role, ALL_ROLES, field_name='role')
    session = get_db()
    row = session.execute(select(UserRole).where(UserRole.user_id == user_id)).scalar_one_or_none()
    if row is None:
        row = UserRole(user_id=user_id, role=role)
        session.add(row)
    else:
        row.role = role
    session.flush()
    return row


def authenticate(email, password) -> User:
    if not email or not password:
        abort(400, description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email == str(email).strip().lower())).scalar_one_or_none()
    if not user or not user.verify_password(password):
        abort(401, description='invalid credentials')
    profile = session.get(Profile, user.id)
    if profile is not None and profile.status == PROFILE_DISABLED:
        abort(403, description='account disabled')
    return user


def issue_token(user: User) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(user.id), additional_claims={
        'email': user.email,
        'role': role_of(user.id),
    })
