# trainingdesk/routes/submissions.py
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING, ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import TEST_SUBMISSIONS, get_db, serialize, serialize_many
from trainingdesk.errors import NotFound
from trainingdesk.schemas.assessment import SubmissionCreate, SubmissionPatch
from trainingdesk.utils.ids import prefixed_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/test-submissions", tags=["test-submissions"])
logger = get_logger(__name__)


@router.get("")
def list_submissions(db=Depends(get_db)):
    submissions = serialize_many(db[TEST_SUBMISSIONS].find({}).sort("createdAt", DESCENDING))
    return {"success": True, "submissions": submissions}


@router.post("")
def submit(payload: SubmissionCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    doc = {
        **payload.to_doc(),
        "answers": payload.answers,
        "id": prefixed_id("submission"),
        "createdAt": utcnow_iso(),
    }
    db[TEST_SUBMISSIONS].insert_one(doc)

    logger.info("Created test submission %s by %s", doc["id"], payload.student_name)
    log_activity(db, actor_id(user, payload.student_name), "test_submitted",
                 {"submissionId": doc["id"], "quizId": payload.quiz_id})
    return {"success": True, "submission": serialize(doc)}


@router.patch("")
def grade(payload: SubmissionPatch, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    changes = payload.to_doc(exclude={"submission_id"})
    changes["updatedAt"] = utcnow_iso()
    updated = db[TEST_SUBMISSIONS].find_one_and_update(
        {"id": payload.submission_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Test submission not found")

    log_activity(db, actor_id(user), "test_submission_updated",
                 {"submissionId": payload.submission_id, "fields": sorted(changes)})
    return {"success": True, "submission": serialize(updated), "message": "Test submission updated successfully"}
