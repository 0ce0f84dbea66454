from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import MongoClient
from pymongo.database import Database

from trainingdesk import settings
from trainingdesk.errors import BadRequest
from trainingdesk.utils.logger import get_logger

logger = get_logger(__name__)

# --- Collections (one source of truth) ---
STAFF = "staff"
TRAINERS = "trainers"
EXAMINERS = "examiners"
COURSES = "courses"
STUDENTS = "students"
TRAINING_TOPICS = "training_topics"
TRAINING_REQUESTS = "training_requests"
TRAINING_ASSIGNMENTS = "training_assignments"
INACTIVATION_REQUESTS = "inactivation_requests"
QUIZZES = "quizzes"
QUIZ_ATTEMPTS = "quiz_attempts"
TEST_SUBMISSIONS = "test_submissions"
TEST_TOKENS = "test_tokens"
ACTIVITY_LOGS = "activity_logs"
AUDIT_EVENTS = "audit_events"


def connect(uri: Optional[str] = None, db_name: Optional[str] = None) -> Database:
    """
    Build the pooled client once per application. MongoClient connects
    lazily, so a missing DATABASE_URL only surfaces on first use.
    """
    if not (uri or settings.DATABASE_URL):
        logger.warning("DATABASE_URL not set; using %s. Database operations may fail.", settings.MONGO_URI)
    client = MongoClient(
        uri or settings.MONGO_URI,
        maxPoolSize=10,
        serverSelectionTimeoutMS=5000,
        socketTimeoutMS=45000,
    )
    return client[db_name or settings.MONGO_DB]


def get_db(request: Request) -> Database:
    """FastAPI dependency: the database handle owned by the running app."""
    return request.app.state.db


def object_id(value: Optional[str], label: str = "ID") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise BadRequest(f"Invalid {label}")


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Documents keyed by their own ``id`` field: stringify ``_id`` for JSON."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out


def with_object_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Documents keyed by ObjectId: expose ``_id`` as ``id``."""
    if doc is None:
        return None
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = str(doc["_id"])
    return out


def serialize_many(docs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize(d) for d in docs]
