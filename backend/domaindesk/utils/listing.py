from __future__ import annotations
"""List endpoint plumbing: pagination, validators (ETag / Last-Modified) and 304 handling.

The ETag hashes the serialized page plus the paging window, so any change to a
returned row invalidates it even when membership and timestamps are unchanged.
Last-Modified has whole-second resolution; If-None-Match wins when both are sent.
"""
import hashlib
import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime, format_datetime
from typing import Optional, Tuple
from flask import request, abort, make_response
from domaindesk.config.pagination import normalize_pagination


def canonicalize_timestamp(dt: datetime) -> datetime:
    """UTC tz-aware timestamp truncated to whole seconds."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


def paginate(q) -> Tuple[object, int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.count()
    return q.offset(offset).limit(limit), total, limit, offset


def compute_etag(items: list, total: int, limit: int, offset: int) -> str:
    body = json.dumps(items, sort_keys=True, separators=(',', ':'), default=str)
    seed = f"{total}|{limit}|{offset}|{body}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def latest_timestamp(rows) -> Optional[datetime]:
    stamps = [r.updated_at for r in rows if isinstance(r.updated_at, datetime)]
    return max((canonicalize_timestamp(s) for s in stamps), default=None)


def _apply_validators(resp, etag: str, latest: Optional[datetime]):
    resp.headers['ETag'] = etag
    if latest:
        resp.headers['Last-Modified'] = format_datetime(latest, usegmt=True)
    return resp


def _parse_http_or_iso(raw: str) -> Optional[datetime]:
    try:
        dt = datetime.fromisoformat(raw.replace('Z', '+00:00'))
    except ValueError:
        try:
            dt = parsedate_to_datetime(raw)
        except (TypeError, ValueError):
            return None
    return canonicalize_timestamp(dt)


def not_modified(etag: str, latest: Optional[datetime]):
    """Return a 304 response when the client's validators still match, else None.

    If-None-Match wins over If-Modified-Since.
    """
    inm = request.headers.get('If-None-Match')
    if inm:
        if inm.strip('"') == etag:
            return _apply_validators(make_response('', 304), etag, latest)
        return None
    ims_raw = request.headers.get('If-Modified-Since')
    if ims_raw and latest:
        ims = _parse_http_or_iso(ims_raw)
        if ims and latest <= ims:
            return _apply_validators(make_response('', 304), etag, latest)
    return None


def list_response(items: list, rows, total: int, limit: int, offset: int):
    """JSON list payload with pagination meta and cache validators, or a 304."""
    latest = latest_timestamp(rows)
    etag = compute_etag(items, total, limit, offset)
    cond = not_modified(etag, latest)
    if cond is not None:
        return cond
    resp = make_response({
        'data': items,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(items),
        },
    })
    return _apply_validators(resp, etag, latest)
