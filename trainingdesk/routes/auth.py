# trainingdesk/routes/auth.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from trainingdesk import settings
from trainingdesk.auth import create_access_token
from trainingdesk.authz import require_admin
from trainingdesk.db import get_db
from trainingdesk.errors import BadRequest, TrainingDeskError
from trainingdesk.schemas.staff import Credential
from trainingdesk.services.identity import IdentityGateway, get_identity_gateway
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(tags=["auth"])
logger = get_logger(__name__)


# -----------------------------
# Login: credential -> session
# -----------------------------
@router.post("/auth")
def login(
    payload: Credential,
    db=Depends(get_db),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    if not payload.api_key:
        raise BadRequest("API key is required")

    user = identity.authenticate(payload.api_key, db)
    token = create_access_token(user)

    log_activity(db, user["id"], "login", {"role": user["role"], "apiKey": payload.api_key})
    logger.info("User %s authenticated as %s", user["id"], user["role"])

    return {"success": True, "user": user, "accessToken": token, "tokenType": "bearer"}


# -------------------------------------------
# Raw verification used by staff onboarding
# -------------------------------------------
@router.post("/auth/verify")
def verify(payload: Credential, identity: IdentityGateway = Depends(get_identity_gateway)):
    if not payload.api_key:
        return JSONResponse({"ok": False, "error": "API key is required"}, status_code=400)

    status_code, body = identity.probe(payload.api_key)
    return JSONResponse(body, status_code=status_code)


@router.get("/admin/key")
def admin_key(user: dict = Depends(require_admin)):
    if not settings.ADMIN_API_KEY:
        logger.error("ADMIN_API_KEY requested but not configured")
        raise TrainingDeskError("Admin API key not configured")
    return {"success": True, "adminKey": settings.ADMIN_API_KEY}
