# trainingdesk/routes/quiz_attempts.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import QUIZ_ATTEMPTS, QUIZZES, get_db, serialize, serialize_many
from trainingdesk.errors import BadRequest, NotFound
from trainingdesk.schemas.assessment import AttemptCreate, AttemptPatch
from trainingdesk.utils.ids import prefixed_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/quiz-attempts", tags=["quiz-attempts"])
logger = get_logger(__name__)


@router.get("")
def list_attempts(quiz_id: Optional[str] = Query(None, alias="quizId"), db=Depends(get_db)):
    query = {"quizId": quiz_id} if quiz_id else {}
    attempts = serialize_many(db[QUIZ_ATTEMPTS].find(query).sort("startTime", 1))
    return {"success": True, "attempts": attempts}


@router.post("")
def start_attempt(payload: AttemptCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    if not db[QUIZZES].find_one({"id": payload.quiz_id}):
        raise NotFound("Quiz not found")

    now = utcnow_iso()
    doc = {
        **payload.to_doc(),
        "id": prefixed_id("attempt"),
        "startTime": now,
        "status": "in_progress",
        "lastSaved": now,
        "answers": [],
    }
    db[QUIZ_ATTEMPTS].insert_one(doc)

    logger.info("Created quiz attempt %s for quiz %s", doc["id"], payload.quiz_id)
    log_activity(db, actor_id(user, payload.student_name or "anonymous"), "quiz_attempt_started",
                 {"attemptId": doc["id"], "quizId": payload.quiz_id})
    return {"success": True, "attempt": serialize(doc)}


@router.patch("")
def save_attempt(payload: AttemptPatch, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    changes = payload.to_doc(exclude={"attempt_id"})
    now = utcnow_iso()
    changes["lastSaved"] = now
    if changes.get("status") == "submitted":
        changes["submittedAt"] = now

    updated = db[QUIZ_ATTEMPTS].find_one_and_update(
        {"id": payload.attempt_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Quiz attempt not found")

    if changes.get("status") == "submitted":
        log_activity(db, actor_id(user, updated.get("studentName") or "anonymous"), "quiz_attempt_submitted",
                     {"attemptId": payload.attempt_id, "score": updated.get("score")})
    return {"success": True, "attempt": serialize(updated), "message": "Quiz attempt updated successfully"}


@router.delete("")
def delete_attempt(
    attempt_id: str = Query("", alias="id"),
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    if not attempt_id:
        raise BadRequest("Attempt ID is required")
    result = db[QUIZ_ATTEMPTS].delete_one({"id": attempt_id})
    if result.deleted_count == 0:
        raise NotFound("Quiz attempt not found")

    log_activity(db, actor_id(user), "quiz_attempt_deleted", {"attemptId": attempt_id})
    return {"success": True, "message": "Quiz attempt deleted successfully"}
