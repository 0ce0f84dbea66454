# trainingdesk/routes/quizzes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING, ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import QUIZZES, get_db, serialize, serialize_many
from trainingdesk.errors import BadRequest, NotFound
from trainingdesk.schemas.assessment import QuizCreate, QuizPatch
from trainingdesk.utils.ids import prefixed_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/quizzes", tags=["quizzes"])
logger = get_logger(__name__)


@router.get("")
def list_quizzes(db=Depends(get_db)):
    quizzes = serialize_many(db[QUIZZES].find({}).sort("createdAt", DESCENDING))
    logger.info("Fetched quizzes (%d)", len(quizzes))
    return {"success": True, "quizzes": quizzes}


@router.post("")
def create_quiz(payload: QuizCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    now = utcnow_iso()
    doc = {
        "questions": [],
        **payload.to_doc(),
        "status": payload.status,
        "id": prefixed_id("quiz"),
        "createdAt": now,
        "updatedAt": now,
    }
    db[QUIZZES].insert_one(doc)

    logger.info("Created quiz %s (%s)", doc["id"], doc["title"])
    log_activity(db, actor_id(user), "quiz_created", {"quizId": doc["id"], "title": doc["title"]})
    return {"success": True, "quiz": serialize(doc)}


@router.patch("")
def update_quiz(payload: QuizPatch, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    changes = payload.to_doc(exclude={"quiz_id"})
    changes["updatedAt"] = utcnow_iso()
    updated = db[QUIZZES].find_one_and_update(
        {"id": payload.quiz_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Quiz not found")

    log_activity(db, actor_id(user), "quiz_updated", {"quizId": payload.quiz_id, "fields": sorted(changes)})
    return {"success": True, "quiz": serialize(updated), "message": "Quiz updated successfully"}


@router.delete("")
def delete_quiz(
    quiz_id: str = Query("", alias="id"),
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    if not quiz_id:
        raise BadRequest("Quiz ID is required")
    result = db[QUIZZES].delete_one({"id": quiz_id})
    if result.deleted_count == 0:
        raise NotFound("Quiz not found")

    log_activity(db, actor_id(user), "quiz_deleted", {"quizId": quiz_id})
    return {"success": True, "message": "Quiz deleted successfully"}
