"""Role and account-status vocabulary shared by the dashboards and the API.

A user holds at most one role row. Never rename these values silently: they are
stored in `user_roles.role` and `profiles.status`.
"""
from __future__ import annotations

ROLE_ADMIN = 'admin'
ROLE_STAFF = 'staff'
ALL_ROLES = (ROLE_ADMIN, ROLE_STAFF)

PROFILE_ACTIVE = 'active'
PROFILE_DISABLED = 'disabled'
ALL_PROFILE_STATUSES = (PROFILE_ACTIVE, PROFILE_DISABLED)

# Landing page after sign-in, per role
ROLE_HOME = {
    ROLE_ADMIN: 'site.admin_dashboard',
    ROLE_STAFF: 'site.staff_dashboard',
}
