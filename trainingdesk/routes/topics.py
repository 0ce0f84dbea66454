# trainingdesk/routes/topics.py
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import TRAINING_TOPICS, get_db, object_id, with_object_id
from trainingdesk.errors import BadRequest, NotFound
from trainingdesk.schemas.catalog import TopicCreate, TopicUpdate
from trainingdesk.utils.ids import utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/training-topics", tags=["training-topics"])
logger = get_logger(__name__)

DUPLICATE = "A topic with this name already exists"


@router.get("")
def list_topics(db=Depends(get_db)):
    topics = [with_object_id(t) for t in db[TRAINING_TOPICS].find({}).sort("createdAt", DESCENDING)]
    return {"success": True, "topics": topics}


@router.post("")
def create_topic(payload: TopicCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    if db[TRAINING_TOPICS].find_one({"name": payload.name}):
        raise BadRequest(DUPLICATE)

    doc = {
        "name": payload.name,
        "description": payload.description,
        "active": True,
        "createdAt": utcnow_iso(),
    }
    try:
        db[TRAINING_TOPICS].insert_one(doc)
    except DuplicateKeyError:
        raise BadRequest(DUPLICATE)

    log_activity(db, actor_id(user), "topic_created", {"name": payload.name})
    return {"success": True, "topic": with_object_id(doc)}


@router.put("/{topic_id}")
def update_topic(
    topic_id: str,
    payload: TopicUpdate,
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    oid = object_id(topic_id, "topic ID")
    if db[TRAINING_TOPICS].find_one({"name": payload.name, "_id": {"$ne": oid}}):
        raise BadRequest(DUPLICATE)

    try:
        updated = db[TRAINING_TOPICS].find_one_and_update(
            {"_id": oid},
            {
                "$set": {
                    "name": payload.name,
                    "description": payload.description,
                    "active": payload.active,
                    "updatedAt": utcnow_iso(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise BadRequest(DUPLICATE)
    if not updated:
        raise NotFound("Topic not found")

    log_activity(db, actor_id(user), "topic_updated", {"topicId": topic_id, "name": payload.name})
    return {"success": True, "topic": with_object_id(updated), "message": "Topic updated successfully"}


@router.delete("/{topic_id}")
def delete_topic(topic_id: str, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    result = db[TRAINING_TOPICS].delete_one({"_id": object_id(topic_id, "topic ID")})
    if result.deleted_count == 0:
        raise NotFound("Topic not found")

    log_activity(db, actor_id(user), "topic_deleted", {"topicId": topic_id})
    return {"success": True, "message": "Topic deleted successfully"}
