# trainingdesk/audit.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from trainingdesk.db import AUDIT_EVENTS
from trainingdesk.utils.logger import get_logger, sanitize

logger = get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    """Normalized identity for audit events."""
    user_id: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None

    @staticmethod
    def from_user(user: Optional[dict]) -> "Actor":
        if not user:
            return Actor()
        return Actor(
            user_id=str(user.get("id")) if user.get("id") is not None else None,
            name=user.get("name"),
            role=user.get("role"),
        )

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "name": self.name, "role": self.role}


def write_audit_event(
    db,
    *,
    action: str,
    ok: bool,
    actor: Optional[dict] = None,
    err: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    request_ctx: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write one normalized audit event. Best-effort (never raises).

    Event schema:
    {
      ts, action, ok, err,
      actor: {user_id, name, role},
      meta: {...},
      request: {request_id, method, path, ip, ua}
    }
    """
    try:
        db[AUDIT_EVENTS].insert_one({
            "ts": datetime.now(timezone.utc),
            "action": action,
            "ok": ok,
            "err": err,
            "actor": Actor.from_user(actor).to_dict(),
            "meta": sanitize(meta or {}),
            "request": request_ctx or {},
        })
    except Exception:
        # Audit failures must not block requests.
        logger.exception("Failed to write audit event %s", action)
