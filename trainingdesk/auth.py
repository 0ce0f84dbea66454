# trainingdesk/auth.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, Request, status
from jose import JWTError, jwt

from trainingdesk import settings

TOKEN_COOKIE = "token"


# --- JWT helpers -------------------------------------------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Session token for a verified identity; the role travels as a claim."""
    iat = _now_utc()
    exp = iat + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MIN))
    payload = {
        "sub": str(user.get("id")),
        "name": user.get("name"),
        "role": user.get("role", "Staff"),
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALG)


def decode_token(raw: str) -> dict:
    try:
        return jwt.decode(raw, settings.SECRET_KEY, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")


def _token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get(TOKEN_COOKIE)


# --- dependency used by routes -----------------------------------------------
def get_current_user(request: Request) -> dict:
    """
    Pull token from Authorization header (Bearer) OR from 'token' cookie.
    """
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authentication token")

    payload = decode_token(token)
    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Wrong token type")

    user = {"id": payload.get("sub"), "name": payload.get("name"), "role": payload.get("role", "Staff")}
    request.state.actor = user
    return user


def get_optional_user(request: Request) -> Optional[dict]:
    """Same as get_current_user for routes that stay open to anonymous callers."""
    if not _token_from_request(request):
        return None
    return get_current_user(request)


def actor_id(user: Optional[dict], fallback: str = "anonymous") -> str:
    return str(user["id"]) if user and user.get("id") else fallback
