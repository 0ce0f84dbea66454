import secrets
import string
import threading
import time
from datetime import datetime, timezone

TOKEN_ALPHABET = string.ascii_uppercase + string.digits
TOKEN_LENGTH = 8

_lock = threading.Lock()
_last_ms = 0


def _next_ms() -> int:
    # Monotonic per process so two records created in the same millisecond
    # still get distinct ids.
    global _last_ms
    with _lock:
        now = int(time.time() * 1000)
        _last_ms = now if now > _last_ms else _last_ms + 1
        return _last_ms


def timestamp_id() -> str:
    """Stringified millisecond timestamp, e.g. ``"1718000000123"``."""
    return str(_next_ms())


def prefixed_id(prefix: str) -> str:
    """``quiz_1718000000123_k3j9x0a2b`` style id."""
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(9))
    return f"{prefix}_{_next_ms()}_{suffix}"


def token_string(length: int = TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    return utcnow().isoformat()


def parse_iso(value) -> datetime | None:
    """Parse an ISO timestamp (``Z`` suffix allowed); naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
