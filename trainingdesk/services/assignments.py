"""
Training request ownership and trainer load bookkeeping.

A trainer's ``currentAssignments`` counts the training requests it owns
while they are open (``assigned`` or ``in-progress``). Every step below is a
single-document conditional update keyed on the state read at the start of
the operation; when a step loses against a concurrent writer the steps
already applied are undone and the caller gets a 409.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from trainingdesk.db import TRAINERS, TRAINING_REQUESTS, object_id, with_object_id
from trainingdesk.errors import BadRequest, Conflict, NotFound
from trainingdesk.settings import DEFAULT_MAX_ASSIGNMENTS
from trainingdesk.utils.ids import utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

logger = get_logger(__name__)

OPEN_STATUSES = ("assigned", "in-progress")
TERMINAL_STATUSES = ("completed", "cancelled")

# Manual status changes. Attaching a trainer (-> assigned) goes through
# assign/pickup/reassign instead.
TRANSITIONS: Dict[str, tuple] = {
    "pending": ("cancelled",),
    "assigned": ("in-progress", "pending", "cancelled"),
    "in-progress": ("completed", "cancelled"),
    "completed": (),
    "cancelled": (),
}


# --- lookups -----------------------------------------------------------------
def load_request(db: Database, request_id: str) -> Dict[str, Any]:
    doc = db[TRAINING_REQUESTS].find_one({"_id": object_id(request_id, "assignment ID")})
    if not doc:
        raise NotFound("Assignment not found")
    return doc


def load_trainer(db: Database, trainer_id: str) -> Dict[str, Any]:
    doc = db[TRAINERS].find_one({"_id": object_id(trainer_id, "trainer ID")})
    if not doc:
        raise NotFound("Trainer not found")
    return doc


def is_available(trainer: Dict[str, Any]) -> bool:
    if trainer.get("status") == "busy" or trainer.get("active") is False:
        return False
    current = trainer.get("currentAssignments") or 0
    return current < trainer.get("maxAssignments", DEFAULT_MAX_ASSIGNMENTS)


# --- counter steps -----------------------------------------------------------
def _reserve_slot(db: Database, trainer: Dict[str, Any]) -> None:
    """Take one unit of capacity, only if nobody touched the counter since we read it."""
    result = db[TRAINERS].update_one(
        {
            "_id": trainer["_id"],
            "currentAssignments": trainer.get("currentAssignments"),
            "status": {"$ne": "busy"},
            "active": {"$ne": False},
        },
        {"$inc": {"currentAssignments": 1}},
    )
    if result.matched_count == 0:
        raise Conflict("Trainer availability changed, please retry")


def _increment(db: Database, trainer_id: ObjectId) -> None:
    db[TRAINERS].update_one({"_id": trainer_id}, {"$inc": {"currentAssignments": 1}})


def _release(db: Database, trainer_id: Optional[str]) -> None:
    if not trainer_id:
        return
    try:
        oid = ObjectId(trainer_id)
    except (InvalidId, TypeError):
        logger.warning("Skipping load release for malformed trainer id %r", trainer_id)
        return
    db[TRAINERS].update_one(
        {"_id": oid, "currentAssignments": {"$gt": 0}},
        {"$inc": {"currentAssignments": -1}},
    )


def _claim_request(db: Database, request: Dict[str, Any], trainer_id: str, trainer_name: Optional[str]) -> bool:
    result = db[TRAINING_REQUESTS].update_one(
        {
            "_id": request["_id"],
            "assignedTrainerId": request.get("assignedTrainerId"),
            "status": request.get("status"),
        },
        {
            "$set": {
                "assignedTrainerId": trainer_id,
                "assignedTrainerName": trainer_name,
                "status": "assigned",
                "updatedAt": utcnow_iso(),
            }
        },
    )
    return result.matched_count == 1


# --- workflow ----------------------------------------------------------------
def transfer(
    db: Database,
    request: Dict[str, Any],
    trainer: Dict[str, Any],
    trainer_name: Optional[str] = None,
    *,
    check_availability: bool = False,
) -> Dict[str, Any]:
    """
    Move ``request`` (as read by the caller) to ``trainer``.

    Order: take the new trainer's slot, claim the request against its prior
    owner/status, then release the previous owner. A failed claim gives the
    slot back before raising.
    """
    trainer_id = str(trainer["_id"])
    status = request.get("status") or "pending"
    previous = request.get("assignedTrainerId") if status in OPEN_STATUSES else None

    if status in TERMINAL_STATUSES:
        raise BadRequest(f"Cannot assign a {status} training request")
    if previous == trainer_id:
        raise BadRequest("Training request is already assigned to this trainer")

    if check_availability:
        if not is_available(trainer):
            raise BadRequest("Trainer is not available for pickup")
        _reserve_slot(db, trainer)
    else:
        _increment(db, trainer["_id"])

    name = trainer_name or trainer.get("name")
    if not _claim_request(db, request, trainer_id, name):
        _release(db, trainer_id)
        raise Conflict("Training request was modified concurrently, please retry")

    _release(db, previous)
    return with_object_id(db[TRAINING_REQUESTS].find_one({"_id": request["_id"]}))


def assign(db: Database, request_id: str, trainer_id: str, trainer_name: Optional[str] = None,
           actor_id: Optional[str] = None) -> Dict[str, Any]:
    request = load_request(db, request_id)
    trainer = load_trainer(db, trainer_id)
    updated = transfer(db, request, trainer, trainer_name)
    log_activity(db, actor_id or trainer_id, "training_request_assigned",
                 {"requestId": request_id, "trainerId": trainer_id})
    return updated


def pickup(db: Database, request_id: str, trainer_id: str, trainer_name: Optional[str] = None) -> Dict[str, Any]:
    request = load_request(db, request_id)
    trainer = load_trainer(db, trainer_id)
    previous = request.get("assignedTrainerId")
    updated = transfer(db, request, trainer, trainer_name, check_availability=True)
    log_activity(db, trainer_id, "training_request_picked_up",
                 {"requestId": request_id, "previousTrainerId": previous})
    return updated


def reassign(db: Database, request_id: str, trainer_id: str, trainer_name: Optional[str] = None,
             actor_id: Optional[str] = None) -> Dict[str, Any]:
    request = load_request(db, request_id)
    trainer = load_trainer(db, trainer_id)
    previous = request.get("assignedTrainerId")
    updated = transfer(db, request, trainer, trainer_name)
    log_activity(db, actor_id or "admin", "training_request_reassigned",
                 {"requestId": request_id, "fromTrainerId": previous, "toTrainerId": trainer_id})
    return updated


def set_status(db: Database, request_id: str, new_status: str, actor_id: Optional[str] = None) -> Dict[str, Any]:
    request = load_request(db, request_id)
    current = request.get("status") or "pending"
    if new_status not in TRANSITIONS.get(current, ()):
        raise BadRequest(f"Cannot move training request from {current} to {new_status}")

    owner = request.get("assignedTrainerId")
    now = utcnow_iso()
    update: Dict[str, Any] = {"status": new_status, "updatedAt": now}
    if new_status == "pending":
        update["assignedTrainerId"] = None
        update["assignedTrainerName"] = None
    elif new_status in TERMINAL_STATUSES:
        update[f"{new_status}At"] = now

    result = db[TRAINING_REQUESTS].update_one(
        {"_id": request["_id"], "status": request.get("status"), "assignedTrainerId": owner},
        {"$set": update},
    )
    if result.matched_count == 0:
        raise Conflict("Training request was modified concurrently, please retry")

    if current in OPEN_STATUSES and new_status not in OPEN_STATUSES:
        _release(db, owner)

    log_activity(db, actor_id or owner or "system", "training_request_status_changed",
                 {"requestId": request_id, "from": current, "to": new_status})
    return with_object_id(db[TRAINING_REQUESTS].find_one({"_id": request["_id"]}))


def recount_load(db: Database, trainer_id: str) -> int:
    """Rebuild a trainer's counter from the requests it actually owns."""
    oid = object_id(trainer_id, "trainer ID")
    count = db[TRAINING_REQUESTS].count_documents(
        {"assignedTrainerId": trainer_id, "status": {"$in": list(OPEN_STATUSES)}}
    )
    result = db[TRAINERS].update_one({"_id": oid}, {"$set": {"currentAssignments": count}})
    if result.matched_count == 0:
        raise NotFound("Trainer not found")
    return count
