import logging
import sys
from datetime import datetime, timezone
from typing import Any

from trainingdesk import settings

SENSITIVE_FIELDS = ("apiKey", "password", "token", "secret", "key", "adminKey")

_root = logging.getLogger("trainingdesk")
_root.setLevel(settings.LOG_LEVEL)

# Console-only handler; the platform collects stdout.
_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
_console = logging.StreamHandler(sys.stdout)
_console.setFormatter(_formatter)

if _root.hasHandlers():
    _root.handlers.clear()
_root.addHandler(_console)
_root.propagate = False


def get_logger(name: str) -> logging.Logger:
    if name.startswith("trainingdesk"):
        return logging.getLogger(name)
    return _root.getChild(name)


def sanitize(data: Any) -> Any:
    """Mask credential-like fields so they never reach the log stream."""
    if isinstance(data, str):
        return data if len(data) <= 200 else data[:200] + "..."
    if isinstance(data, dict):
        clean = dict(data)
        for field in SENSITIVE_FIELDS:
            value = clean.get(field)
            if not value:
                continue
            clean[field] = value[:8] + "..." if isinstance(value, str) else "[REDACTED]"
        return clean
    return data


def log_activity(db, user_id: str, action: str, metadata: dict | None = None):
    db["activity_logs"].insert_one({
        "user_id": user_id,
        "action": action,
        "timestamp": datetime.now(timezone.utc),
        "metadata": sanitize(metadata or {}),
    })
