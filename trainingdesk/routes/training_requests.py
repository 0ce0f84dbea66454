# trainingdesk/routes/training_requests.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.authz import require_admin
from trainingdesk.db import TRAINING_REQUESTS, get_db, with_object_id
from trainingdesk.schemas.workflow import AssignmentAction, StatusChange, TrainingRequestCreate
from trainingdesk.services import assignments
from trainingdesk.utils.ids import utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/training-requests", tags=["training-requests"])
logger = get_logger(__name__)


@router.get("")
def list_requests(
    status: Optional[str] = Query(None),
    trainer_id: Optional[str] = Query(None, alias="trainerId"),
    db=Depends(get_db),
):
    query = {}
    if status:
        query["status"] = status
    if trainer_id:
        query["assignedTrainerId"] = trainer_id
    requests = [with_object_id(r) for r in db[TRAINING_REQUESTS].find(query).sort("createdAt", DESCENDING)]
    return {"success": True, "requests": requests}


@router.post("")
def create_request(
    payload: TrainingRequestCreate,
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    now = utcnow_iso()
    doc = {
        **payload.to_doc(),
        "comments": payload.comments,
        "status": "pending",
        "assignedTrainerId": None,
        "assignedTrainerName": None,
        "createdAt": now,
        "updatedAt": now,
    }
    db[TRAINING_REQUESTS].insert_one(doc)

    logger.info("Training request %s created by pilot %s", doc["_id"], payload.pilot_id)
    log_activity(db, actor_id(user, payload.pilot_id), "training_request_created",
                 {"requestId": str(doc["_id"]), "topicId": payload.topic_id})
    return {"success": True, "request": with_object_id(doc)}


# ---------------------------------
# Ownership: assign / pickup / reassign
# ---------------------------------
@router.post("/assign")
def assign(payload: AssignmentAction, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    updated = assignments.assign(
        db, payload.assignment_id, payload.trainer_id, payload.trainer_name,
        actor_id=user["id"] if user else None,
    )
    return {"success": True, "request": updated, "message": "Training request assigned successfully"}


@router.post("/pickup")
def pickup(payload: AssignmentAction, db=Depends(get_db)):
    updated = assignments.pickup(db, payload.assignment_id, payload.trainer_id, payload.trainer_name)
    return {"success": True, "request": updated, "message": "Assignment picked up successfully"}


@router.post("/reassign")
def reassign(payload: AssignmentAction, db=Depends(get_db), user: dict = Depends(require_admin)):
    updated = assignments.reassign(
        db, payload.assignment_id, payload.trainer_id, payload.trainer_name, actor_id=actor_id(user),
    )
    return {"success": True, "request": updated, "message": "Assignment reassigned successfully"}


@router.patch("/{request_id}")
def change_status(
    request_id: str,
    payload: StatusChange,
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    updated = assignments.set_status(db, request_id, payload.status, actor_id=user["id"] if user else None)
    return {"success": True, "request": updated}
