from __future__ import annotations
from flask import abort


def apply_multi_sort(query, sort_expr: str | None, allowed: dict, default: list, tie_breaker):
    """Order a query by a comma-separated sort expression.

    sort_expr: tokens like `status,-created_at`; a leading '-' sorts descending.
    allowed: mapping of field key -> column.
    default: clauses used when no expression is given.
    tie_breaker: clause appended last so equal timestamps still order deterministically.
    """
    if not sort_expr:
        return query.order_by(*default, tie_breaker)
    clauses = []
    for raw in sort_expr.split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        col = allowed.get(key)
        if col is None:
            abort(400, description=f'Invalid sort field {key}')
        clauses.append(col.desc() if desc else col.asc())
    return query.order_by(*clauses, tie_breaker)
