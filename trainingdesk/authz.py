# trainingdesk/authz.py
from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, status

from trainingdesk.auth import get_current_user


def require_role(*allowed_roles: str) -> Callable:
    """
    Usage:
        @router.post("/staff")
        def add_staff(..., user=Depends(require_role("Admin"))):
            ...
    """
    allowed = set(r.strip().lower() for r in allowed_roles if r)

    def _dep(user: dict = Depends(get_current_user)) -> dict:
        role = (user.get("role") or "staff").strip().lower()
        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return user

    return _dep


require_admin = require_role("admin")
