from __future__ import annotations
"""Reusable validation helpers for request payloads and form posts.

Every helper returns the cleaned value (to enable inline usage) or aborts with 400.
"""
import re
from typing import Iterable, Optional
from urllib.parse import urlparse
from flask import abort

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    if new_status not in allowed:
        abort(400, description=f"{field_name} invalid")
    return new_status


def require_text(value, field_name: str, max_length: Optional[int] = None) -> str:
    """Trimmed non-empty string."""
    if not isinstance(value, str) or not value.strip():
        abort(400, description=f"{field_name} required")
    value = value.strip()
    if max_length and len(value) > max_length:
        abort(400, description=f"{field_name} too long (max {max_length})")
    return value


def optional_text(value, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        abort(400, description=f"{field_name} must be a string")
    return value


def validate_email(value) -> str:
    email = require_text(value, 'email', 128).lower()
    if not EMAIL_RE.match(email):
        abort(400, description='email invalid')
    return email


def validate_password(value) -> str:
    if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
        abort(400, description=f'password must be at least {MIN_PASSWORD_LENGTH} characters')
    return value


def validate_redirect_url(value) -> Optional[str]:
    if value in (None, ''):
        return None
    if not isinstance(value, str):
        abort(400, description='redirect_url invalid')
    parsed = urlparse(value)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        abort(400, description='redirect_url must be an absolute http(s) URL')
    return value


def coerce_id(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        abort(400, description=f"{field_name} invalid")

__all__ = [
    'validate_status', 'require_text', 'optional_text', 'validate_email',
    'validate_password', 'validate_redirect_url', 'coerce_id',
]
