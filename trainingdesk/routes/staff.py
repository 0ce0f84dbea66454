# trainingdesk/routes/staff.py
from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from trainingdesk.auth import actor_id
from trainingdesk.authz import require_admin
from trainingdesk.db import STAFF, get_db, serialize
from trainingdesk.errors import BadRequest, NotFound
from trainingdesk.schemas.staff import RoleChange, StaffCreate, StaffUpdate
from trainingdesk.services.identity import IdentityGateway, get_identity_gateway
from trainingdesk.services.roles import ROLE_DEFINITIONS, check_role, permissions_for
from trainingdesk.utils.ids import timestamp_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity, sanitize

router = APIRouter(prefix="/staff", tags=["staff"])
logger = get_logger(__name__)


def _public(doc):
    # credentials never leave the server in full
    return sanitize(serialize(doc))


@router.get("")
def list_staff(db=Depends(get_db)):
    staff = [_public(d) for d in db[STAFF].find({}).sort("addedDate", DESCENDING)]
    logger.info("Fetched staff (%d)", len(staff))
    return {"success": True, "staff": staff}


@router.post("")
def add_staff(
    payload: StaffCreate,
    db=Depends(get_db),
    identity: IdentityGateway = Depends(get_identity_gateway),
    user: dict = Depends(require_admin),
):
    role = check_role(payload.role)
    if db[STAFF].find_one({"apiKey": payload.api_key}):
        raise BadRequest("Staff member with this API key already exists")
    if not identity.verify_credential(payload.api_key):
        raise BadRequest("Invalid API key")

    now = utcnow_iso()
    doc = {
        "id": timestamp_id(),
        "apiKey": payload.api_key,
        "role": role,
        "name": payload.name or "Unknown",
        "email": payload.email,
        "addedDate": now,
        "lastActive": now,
        "permissions": permissions_for(role),
        "status": "active",
        "addedBy": actor_id(user),
    }
    try:
        db[STAFF].insert_one(doc)
    except DuplicateKeyError:
        raise BadRequest("Staff member with this API key already exists")

    log_activity(db, actor_id(user), "staff_added", {"staffId": doc["id"], "role": role})
    return {"success": True, "staff": _public(doc)}


@router.put("")
def update_staff(
    payload: StaffUpdate,
    staff_id: str = Query(..., alias="id"),
    db=Depends(get_db),
    user: dict = Depends(require_admin),
):
    changes = payload.to_doc()
    if not changes:
        raise BadRequest("No fields to update")
    if "role" in changes:
        changes["permissions"] = permissions_for(check_role(changes["role"]))
    changes["updatedAt"] = utcnow_iso()

    updated = db[STAFF].find_one_and_update(
        {"id": staff_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Staff member not found")

    log_activity(db, actor_id(user), "staff_updated", {"staffId": staff_id, "fields": sorted(changes)})
    return {"success": True, "staff": _public(updated)}


@router.delete("")
def remove_staff(
    staff_id: str = Query(..., alias="id"),
    db=Depends(get_db),
    user: dict = Depends(require_admin),
):
    result = db[STAFF].delete_one({"id": staff_id})
    if result.deleted_count == 0:
        raise NotFound("Staff member not found")

    log_activity(db, actor_id(user), "staff_removed", {"staffId": staff_id})
    return {"success": True, "message": "Staff member removed successfully"}


# ---------------
# Role lookups
# ---------------
@router.get("/role")
def staff_role(api_key: str = Query("", alias="apiKey"), db=Depends(get_db)):
    if not api_key:
        raise BadRequest("API key is required")
    member = db[STAFF].find_one({"apiKey": api_key})
    if not member:
        return {"success": True, "role": None}
    return {"success": True, "role": member.get("role"), "staff": _public(member)}


@router.get("/roles")
def list_roles():
    return {"success": True, "roles": ROLE_DEFINITIONS}


@router.post("/roles")
def change_role(payload: RoleChange, db=Depends(get_db), user: dict = Depends(require_admin)):
    role = check_role(payload.new_role)
    updated = db[STAFF].find_one_and_update(
        {"id": payload.staff_id},
        {"$set": {"role": role, "permissions": permissions_for(role), "updatedAt": utcnow_iso()}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise NotFound("Staff member not found")

    log_activity(db, actor_id(user), "staff_role_changed", {"staffId": payload.staff_id, "role": role})
    return {"success": True, "staff": _public(updated), "message": f"Staff member role updated to {role}"}
