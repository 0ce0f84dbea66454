# trainingdesk/routes/personnel.py
"""
Trainers and examiners share one contract; ``build_router`` stamps it out
once per collection.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import EXAMINERS, TRAINERS, get_db, object_id
from trainingdesk.errors import BadRequest, NotFound
from trainingdesk.schemas.staff import PersonnelCreate, PersonnelUpdate
from trainingdesk.services.assignments import recount_load
from trainingdesk.settings import DEFAULT_MAX_ASSIGNMENTS
from trainingdesk.utils.ids import utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

logger = get_logger(__name__)

PUBLIC_FIELDS = (
    "jalId", "name", "active", "status", "currentAssignments",
    "maxAssignments", "inactivationPeriod", "createdAt", "updatedAt",
)


def _public(doc: dict) -> dict:
    out = {"id": str(doc["_id"])}
    for field in PUBLIC_FIELDS:
        out[field] = doc.get(field)
    return out


def build_router(collection: str, label: str, with_recount: bool = False) -> APIRouter:
    router = APIRouter(prefix=f"/{collection}", tags=[collection])
    singular = label.lower()

    @router.get("")
    def list_people(db=Depends(get_db)):
        people = [_public(d) for d in db[collection].find({}).sort("createdAt", DESCENDING)]
        return {"success": True, collection: people}

    @router.post("")
    def add_person(payload: PersonnelCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
        if db[collection].find_one({"jalId": payload.jal_id}):
            raise BadRequest(f"{label} with this JAL ID already exists")

        now = utcnow_iso()
        doc = {
            "jalId": payload.jal_id,
            "name": payload.name,
            "active": True,
            "status": "active",
            "currentAssignments": 0,
            "maxAssignments": (
                payload.max_assignments if payload.max_assignments is not None else DEFAULT_MAX_ASSIGNMENTS
            ),
            "inactivationPeriod": None,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            db[collection].insert_one(doc)
        except DuplicateKeyError:
            raise BadRequest(f"{label} with this JAL ID already exists")

        log_activity(db, actor_id(user), f"{singular}_added", {"jalId": payload.jal_id, "id": str(doc["_id"])})
        return {"success": True, singular: _public(doc)}

    @router.patch("/{person_id}")
    def update_person(
        person_id: str,
        payload: PersonnelUpdate,
        db=Depends(get_db),
        user: Optional[dict] = Depends(get_optional_user),
    ):
        oid = object_id(person_id, f"{singular} ID")
        changes = payload.to_doc(exclude={"last_updated_by"})
        if not changes:
            raise BadRequest("No valid fields to update")

        changes["updatedAt"] = utcnow_iso()
        changes["lastUpdatedBy"] = payload.last_updated_by or actor_id(user, "system")

        updated = db[collection].find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFound(f"{label} not found")

        log_activity(db, actor_id(user), f"{singular}_updated", {"id": person_id, "fields": sorted(changes)})
        return {"success": True, singular: _public(updated), "message": f"{label} updated successfully"}

    @router.delete("/{person_id}")
    def remove_person(person_id: str, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
        result = db[collection].delete_one({"_id": object_id(person_id, f"{singular} ID")})
        if result.deleted_count == 0:
            raise NotFound(f"{label} not found")

        log_activity(db, actor_id(user), f"{singular}_removed", {"id": person_id})
        return {"success": True, "message": f"{label} deleted successfully"}

    if with_recount:
        @router.post("/{person_id}/recount")
        def recount(person_id: str, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
            count = recount_load(db, person_id)
            logger.info("%s %s load recounted to %d", label, person_id, count)
            log_activity(db, actor_id(user), f"{singular}_recounted", {"id": person_id, "count": count})
            return {"success": True, "id": person_id, "currentAssignments": count}

    return router


trainers_router = build_router(TRAINERS, "Trainer", with_recount=True)
examiners_router = build_router(EXAMINERS, "Examiner")
