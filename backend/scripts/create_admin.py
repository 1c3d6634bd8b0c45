#!/usr/bin/env python
"""Idempotent bootstrap for the first admin account.

Usage:
    python backend/scripts/create_admin.py --email owner@example.com --password secret1
    python backend/scripts/create_admin.py --email staff@example.com --promote      # existing account -> admin
    python backend/scripts/create_admin.py --email owner@example.com --password secret1 --dry-run

Falls back to SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD when flags are omitted.
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text
from werkzeug.exceptions import HTTPException

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from domaindesk import create_app, get_db  # type: ignore
from domaindesk.constants.roles import ROLE_ADMIN
from domaindesk.models.accounts import Base, User
from domaindesk.services.accounts import sign_up, grant_role
from domaindesk.services.audit import add_audit
from domaindesk.services.session import role_of


def ensure_schema(session):
    try:
        session.execute(text('SELECT 1 FROM users LIMIT 1'))
    except Exception:
        # bootstrap fallback; real deployments run `alembic upgrade head`
        session.rollback()
        from domaindesk.models import task, audit  # noqa: F401
        Base.metadata.create_all(session.get_bind())
    finally:
        session.commit()


def ensure_admin(session, email: str, password: str | None, full_name: str | None = None) -> tuple[User, str]:
    """Create the account if needed and make sure it holds the admin role.

    Returns the user and one of 'created', 'promoted', 'unchanged'.
    """
    user = session.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()
    if user is None:
        user = sign_up(email, password, full_name)
        grant_role(user.id, ROLE_ADMIN)
        add_audit('STAFF.CREATE', 0, entity='Profile', entity_id=user.id, meta={'email': user.email, 'role': ROLE_ADMIN})
        return user, 'created'
    if role_of(user.id) == ROLE_ADMIN:
        return user, 'unchanged'
    grant_role(user.id, ROLE_ADMIN)
    add_audit('STAFF.PROMOTE', 0, entity='Profile', entity_id=user.id, meta={'role': ROLE_ADMIN})
    return user, 'promoted'


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Create or promote an admin account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  create: create_admin.py --email a@b.co --password secret1\n  dry run: create_admin.py --email a@b.co --password secret1 --dry-run\n"""),
    )
    p.add_argument('--email', default=os.getenv('SEED_ADMIN_EMAIL'), help='Admin email (default: $SEED_ADMIN_EMAIL)')
    p.add_argument('--password', default=os.getenv('SEED_ADMIN_PASSWORD'), help='Password for a new account (default: $SEED_ADMIN_PASSWORD)')
    p.add_argument('--full-name', default=None, help='Display name for a new account')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    args = p.parse_args(argv)
    if not args.email:
        p.error('--email (or SEED_ADMIN_EMAIL) is required')
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        ensure_schema(get_db())

    with app.app_context():
        session = get_db()
        try:
            user, outcome = ensure_admin(session, args.email, args.password, args.full_name)
        except HTTPException as e:
            session.rollback()
            print(f"[ERROR] {e.description}")
            return 2
        if args.dry_run:
            session.rollback()
            print(f"[DRY-RUN] (rolled back) {args.email}: would be {outcome}")
        else:
            session.commit()
            print(f"[DONE] {user.email}: {outcome}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
