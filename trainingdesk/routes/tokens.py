# trainingdesk/routes/tokens.py
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import QUIZZES, TEST_TOKENS, get_db, serialize, serialize_many
from trainingdesk.errors import BadRequest, Gone, NotFound, TrainingDeskError
from trainingdesk.schemas.assessment import TokenCreate, TokenPatch
from trainingdesk.utils.ids import parse_iso, prefixed_id, token_string, utcnow, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/test-tokens", tags=["test-tokens"])
logger = get_logger(__name__)

MAX_TOKEN_TRIES = 5


@router.get("")
def list_tokens(db=Depends(get_db)):
    tokens = serialize_many(db[TEST_TOKENS].find({}).sort("createdAt", DESCENDING))
    return {"success": True, "testTokens": tokens}


@router.post("")
def issue_token(payload: TokenCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    doc = payload.to_doc(exclude={"expires_at", "expires_in_hours"})
    if payload.expires_at is not None:
        doc["expiresAt"] = parse_iso(payload.expires_at).isoformat()
    elif payload.expires_in_hours is not None:
        doc["expiresAt"] = (utcnow() + timedelta(hours=payload.expires_in_hours)).isoformat()
    else:
        doc["expiresAt"] = None
    doc.update({
        "id": prefixed_id("token"),
        "status": "active",
        "createdAt": utcnow_iso(),
    })
    if user and not doc.get("createdBy"):
        doc["createdBy"] = user.get("name") or actor_id(user)

    for _ in range(MAX_TOKEN_TRIES):
        doc["token"] = token_string()
        doc.pop("_id", None)
        try:
            db[TEST_TOKENS].insert_one(doc)
            break
        except DuplicateKeyError:
            logger.warning("Token string collision, regenerating")
    else:
        raise TrainingDeskError("Failed to create test token")

    logger.info("Created test token %s for quiz %s", doc["id"], payload.quiz_id)
    log_activity(db, actor_id(user), "test_token_issued", {"tokenId": doc["id"], "quizId": payload.quiz_id})
    return {"success": True, "token": serialize(doc)}


@router.patch("")
def update_token(payload: TokenPatch, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    changes = payload.to_doc(exclude={"token_id"})
    if changes.get("expiresAt") is not None:
        changes["expiresAt"] = parse_iso(changes["expiresAt"]).isoformat()
    changes["updatedAt"] = utcnow_iso()

    updated = db[TEST_TOKENS].find_one_and_update(
        {"id": payload.token_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Test token not found")

    log_activity(db, actor_id(user), "test_token_updated", {"tokenId": payload.token_id, "fields": sorted(changes)})
    return {"success": True, "token": serialize(updated), "message": "Test token updated successfully"}


@router.delete("")
def revoke_token(
    token_id: str = Query("", alias="id"),
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    if not token_id:
        raise BadRequest("Token ID is required")
    result = db[TEST_TOKENS].delete_one({"id": token_id})
    if result.deleted_count == 0:
        raise NotFound("Test token not found")

    log_activity(db, actor_id(user), "test_token_deleted", {"tokenId": token_id})
    return {"success": True, "message": "Test token deleted successfully"}


# ----------------------------------
# Student entry: token -> quiz
# ----------------------------------
@router.get("/validate")
def validate(
    token: str = Query(""),
    student_name: str = Query("", alias="studentName"),
    db=Depends(get_db),
):
    if not token or not student_name:
        raise BadRequest("Token and student name are required")

    record = db[TEST_TOKENS].find_one({"token": token, "status": "active"})
    if not record:
        raise NotFound("Invalid or expired token")

    expires_at = parse_iso(record.get("expiresAt"))
    if expires_at and expires_at < utcnow():
        db[TEST_TOKENS].update_one(
            {"id": record["id"], "status": "active"},
            {"$set": {"status": "expired", "updatedAt": utcnow_iso()}},
        )
        logger.info("Test token %s expired on validation", record["id"])
        raise Gone("Token has expired")

    quiz = db[QUIZZES].find_one({"id": record.get("quizId"), "status": "published"})
    if not quiz:
        raise NotFound("Quiz not found or not available")

    logger.info("Token %s validated for %s (quiz %s)", record["id"], student_name, quiz["id"])
    log_activity(db, student_name, "test_token_validated", {"tokenId": record["id"], "quizId": quiz["id"]})
    return {"success": True, "token": serialize(record), "quiz": serialize(quiz)}
