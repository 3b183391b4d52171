from __future__ import annotations

from typing import Any, Mapping

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from seatbook.models.audit_log import AuditLog

# Guest identity never lands in the operator audit trail
REDACTED_KEYS = {"user_id", "guest_name", "guest_email"}

# Operator-entered text is kept, but clipped
FREE_TEXT_KEYS = {"pause_message", "reason"}
FREE_TEXT_LIMIT = 120


def _sanitize(obj: Any, key: str | None = None) -> Any:
    if obj is None:
        return None
    if key in REDACTED_KEYS:
        return "<redacted>"
    if isinstance(obj, dict):
        return {k: _sanitize(v, k) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    if key in FREE_TEXT_KEYS and isinstance(obj, str) and len(obj) > FREE_TEXT_LIMIT:
        return obj[: FREE_TEXT_LIMIT - 1] + "…"
    return obj


def write_audit_log(
    db: Session,
    *,
    venue_id: str | None,
    actor_id: str | None,
    action_type: str,
    target_type: str = "",
    target_id: str = "",
    summary: str = "",
    diff_json: Mapping[str, Any] | None = None,
    request: Request | None = None,
) -> AuditLog:
    ip = ""
    if request is not None and request.client:
        ip = request.client.host

    log = AuditLog(
        venue_id=venue_id,
        actor_id=actor_id,
        action_type=action_type,
        target_type=target_type,
        target_id=str(target_id),
        summary=summary[:255],
        diff_json=_sanitize(dict(diff_json)) if diff_json is not None else None,
        ip_address=ip,
    )
    db.add(log)
    db.commit()
    return log


def list_venue_audit_logs(db: Session, *, venue_id: str, action_type: str | None = None, limit: int = 200) -> list[AuditLog]:
    q = select(AuditLog).where(AuditLog.venue_id == venue_id).order_by(AuditLog.created_at.desc())
    if action_type:
        q = q.where(AuditLog.action_type == action_type)
    return list(db.execute(q.limit(limit)).scalars().all())
