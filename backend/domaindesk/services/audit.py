from __future__ import annotations
from typing import Any, Dict, Iterable, Optional
from flask import current_app
from domaindesk import get_db
from domaindesk.models.audit import AuditLog


def snapshot(obj, keys: Iterable[str]) -> Dict[str, Any]:
    return {k: getattr(obj, k) for k in keys}


def diff(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Keys whose value changed, as {key: {'before': .., 'after': ..}}."""
    return {
        k: {'before': before.get(k), 'after': after.get(k)}
        for k in before
        if k in after and before.get(k) != after.get(k)
    }


def add_audit(action: str, actor_user_id: Optional[int], entity: Optional[str] = None,
              entity_id: Optional[Any] = None, meta: Optional[Dict[str, Any]] = None):
    """Stage an audit log entry in the current DB session.

    Parameters:
      action: short action code e.g. TASK.CREATE, TASK.REJECT, STAFF.STATUS
      actor_user_id: id of the signed-in user (0 when unknown, e.g. bootstrap scripts)
      entity: optional entity name (Task, Profile)
      entity_id: optional primary key
      meta: additional JSON-safe dictionary (shallow copied)

    No commit here; the caller's transaction boundary controls durability, so the
    entry lands atomically with the mutation it describes.
    """
    log = AuditLog(
        actor_user_id=actor_user_id or 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    get_db().add(log)
    current_app.logger.info('%s %s:%s by user %s', action, entity, entity_id, actor_user_id)
    return log
