# trainingdesk/routes/training_assignments.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING, ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import TRAINING_ASSIGNMENTS, get_db, object_id, with_object_id
from trainingdesk.errors import BadRequest, NotFound
from trainingdesk.schemas.workflow import TrainingAssignmentCreate, TrainingAssignmentUpdate
from trainingdesk.utils.ids import utcnow_iso
from trainingdesk.utils.logger import log_activity

router = APIRouter(prefix="/training-assignments", tags=["training-assignments"])


@router.get("")
def list_assignments(trainer_id: Optional[str] = Query(None, alias="trainerId"), db=Depends(get_db)):
    query = {"assignedTrainer": trainer_id} if trainer_id else {}
    items = [with_object_id(a) for a in db[TRAINING_ASSIGNMENTS].find(query).sort("createdAt", DESCENDING)]
    return {"success": True, "assignments": items}


@router.post("")
def schedule(payload: TrainingAssignmentCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    doc = {
        **payload.to_doc(),
        "trainerName": payload.trainer_name,
        "status": "scheduled",
        "rating": None,
        "comments": "",
        "startTime": None,
        "endTime": None,
        "createdAt": utcnow_iso(),
    }
    db[TRAINING_ASSIGNMENTS].insert_one(doc)

    log_activity(db, actor_id(user), "training_assignment_created",
                 {"assignmentId": str(doc["_id"]), "trainerId": payload.assigned_trainer})
    return {"success": True, "assignment": with_object_id(doc)}


@router.patch("/{assignment_id}")
def update_assignment(
    assignment_id: str,
    payload: TrainingAssignmentUpdate,
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    oid = object_id(assignment_id, "assignment ID")
    changes = payload.to_doc()
    if not changes:
        raise BadRequest("No valid fields to update")
    changes["updatedAt"] = utcnow_iso()

    updated = db[TRAINING_ASSIGNMENTS].find_one_and_update(
        {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Training assignment not found")

    log_activity(db, actor_id(user), "training_assignment_updated",
                 {"assignmentId": assignment_id, "fields": sorted(changes)})
    return {"success": True, "assignment": with_object_id(updated)}
