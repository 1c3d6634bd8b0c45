from __future__ import annotations
"""Session reads and the role gate.

The role is looked up fresh from `user_roles` on every gated request instead of
trusting the token claim, so removing a staff member's role takes effect at once.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy import select
from domaindesk import get_db
from domaindesk.models.accounts import Profile, User, UserRole


class GateState(str, Enum):
    LOADING = 'loading'
    UNAUTHORIZED = 'unauthorized'
    AUTHORIZED = 'authorized'


@dataclass
class SessionInfo:
    user_id: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None
    loading: bool = False

    def as_dict(self):
        return {'user_id': self.user_id, 'email': self.email, 'role': self.role}


def evaluate_gate(session: SessionInfo, allowed_roles: Iterable[str]) -> GateState:
    if session.loading:
        return GateState.LOADING
    if session.user_id is None:
        return GateState.UNAUTHORIZED
    if not session.role or session.role not in set(allowed_roles):
        return GateState.UNAUTHORIZED
    return GateState.AUTHORIZED


def role_of(user_id: int) -> Optional[str]:
    row = get_db().execute(select(UserRole).where(UserRole.user_id == user_id)).scalar_one_or_none()
    return row.role if row else None


def current_user_id() -> int:
    """Identity of a request already verified by require_roles / role_gate."""
    return int(get_jwt_identity())


def session_for(user_id: Optional[int]) -> SessionInfo:
    if user_id is None:
        return SessionInfo()
    session = get_db()
    profile = session.get(Profile, user_id)
    if profile is None:
        if session.get(User, user_id) is not None:
            # account exists but its profile row has not been provisioned yet
            return SessionInfo(user_id=user_id, loading=True)
        return SessionInfo()
    return SessionInfo(user_id=user_id, email=profile.email, role=role_of(user_id))


def read_session() -> SessionInfo:
    """Resolve the caller's session from a bearer header or auth cookie.

    Missing, expired or malformed tokens all read as "no session".
    """
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return SessionInfo()
    ident = get_jwt_identity()
    return session_for(int(ident) if ident is not None else None)
