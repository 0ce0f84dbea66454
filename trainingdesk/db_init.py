from pymongo import DESCENDING
from pymongo.database import Database

from trainingdesk import db as collections


def ensure_indexes(db: Database):
    # staff directory
    db[collections.STAFF].create_index("id", unique=True)
    db[collections.STAFF].create_index("apiKey", unique=True)
    db[collections.TRAINERS].create_index("jalId", unique=True)
    db[collections.TRAINERS].create_index([("createdAt", DESCENDING)])
    db[collections.EXAMINERS].create_index("jalId", unique=True)
    db[collections.EXAMINERS].create_index([("createdAt", DESCENDING)])
    db[collections.INACTIVATION_REQUESTS].create_index("id", unique=True)
    db[collections.INACTIVATION_REQUESTS].create_index([("requestedAt", DESCENDING)])

    # catalog
    db[collections.COURSES].create_index("id", unique=True)
    db[collections.STUDENTS].create_index("id", unique=True)
    db[collections.TRAINING_TOPICS].create_index("name", unique=True)

    # workflow
    db[collections.TRAINING_REQUESTS].create_index([("assignedTrainerId", 1), ("status", 1)])
    db[collections.TRAINING_REQUESTS].create_index([("createdAt", DESCENDING)])
    db[collections.TRAINING_ASSIGNMENTS].create_index([("assignedTrainer", 1), ("createdAt", DESCENDING)])

    # assessment
    db[collections.QUIZZES].create_index("id", unique=True)
    db[collections.QUIZ_ATTEMPTS].create_index("id", unique=True)
    db[collections.TEST_SUBMISSIONS].create_index("id", unique=True)
    db[collections.TEST_TOKENS].create_index("token", unique=True)

    # activity / audit
    db[collections.ACTIVITY_LOGS].create_index([("user_id", 1), ("timestamp", DESCENDING)])
    db[collections.AUDIT_EVENTS].create_index([("ts", 1)])
    db[collections.AUDIT_EVENTS].create_index([("action", 1)])
