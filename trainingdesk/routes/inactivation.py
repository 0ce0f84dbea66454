# trainingdesk/routes/inactivation.py
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING, ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.authz import require_admin
from trainingdesk.db import EXAMINERS, INACTIVATION_REQUESTS, TRAINERS, get_db, object_id, serialize, serialize_many
from trainingdesk.errors import Conflict, NotFound
from trainingdesk.schemas.staff import InactivationCreate, InactivationReview
from trainingdesk.utils.ids import timestamp_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/inactivation-requests", tags=["inactivation"])
logger = get_logger(__name__)

PERSONNEL = {"trainer": (TRAINERS, "Trainer"), "examiner": (EXAMINERS, "Examiner")}


@router.get("")
def list_requests(db=Depends(get_db)):
    requests = serialize_many(db[INACTIVATION_REQUESTS].find({}).sort("requestedAt", DESCENDING))
    return {"success": True, "requests": requests}


@router.post("")
def create_request(payload: InactivationCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    collection, label = PERSONNEL[payload.user_type]
    person = db[collection].find_one({"_id": object_id(payload.user_id, "user ID")})
    if not person:
        raise NotFound(f"{label} not found")

    doc = {
        "id": timestamp_id(),
        "userId": payload.user_id,
        "userType": payload.user_type,
        "userName": payload.user_name or person.get("name"),
        "userJalId": payload.user_jal_id or person.get("jalId"),
        "period": payload.period.model_dump(by_alias=True),
        "comments": payload.comments,
        "setInactive": payload.set_inactive,
        "requestedBy": payload.requested_by or actor_id(user),
        "status": "pending",
        "requestedAt": utcnow_iso(),
    }
    db[INACTIVATION_REQUESTS].insert_one(doc)

    logger.info("Inactivation request %s created for %s %s", doc["id"], payload.user_type, payload.user_id)
    log_activity(db, actor_id(user), "inactivation_requested", {"requestId": doc["id"], "userId": payload.user_id})
    return {"success": True, "request": serialize(doc)}


@router.patch("")
def review_request(payload: InactivationReview, db=Depends(get_db), user: dict = Depends(require_admin)):
    reviewer = user.get("name") or actor_id(user)
    reviewed = db[INACTIVATION_REQUESTS].find_one_and_update(
        {"id": payload.request_id, "status": "pending"},
        {
            "$set": {
                "status": payload.status,
                "adminComments": payload.admin_comments,
                "reviewedBy": reviewer,
                "reviewedAt": utcnow_iso(),
            }
        },
        return_document=ReturnDocument.AFTER,
    )
    if not reviewed:
        if db[INACTIVATION_REQUESTS].find_one({"id": payload.request_id}):
            raise Conflict("Inactivation request has already been reviewed")
        raise NotFound("Inactivation request not found")

    if payload.status == "approved":
        _apply(db, reviewed, reviewer)

    log_activity(db, actor_id(user), "inactivation_reviewed",
                 {"requestId": payload.request_id, "status": payload.status})
    return {"success": True, "request": serialize(reviewed), "message": "Request updated successfully"}


def _apply(db, request: dict, reviewer: str) -> None:
    collection, _ = PERSONNEL.get(request.get("userType"), (None, None))
    if collection is None:
        logger.warning("Inactivation request %s has unknown user type %r", request.get("id"), request.get("userType"))
        return

    set_inactive = request.get("setInactive", True)
    result = db[collection].update_one(
        {"_id": object_id(request.get("userId"), "user ID")},
        {
            "$set": {
                "active": not set_inactive,
                "inactivationPeriod": request.get("period") if set_inactive else None,
                "lastUpdatedBy": reviewer,
                "updatedAt": utcnow_iso(),
            }
        },
    )
    if result.matched_count == 0:
        logger.warning("Approved inactivation %s but %s %s no longer exists",
                       request.get("id"), request.get("userType"), request.get("userId"))
