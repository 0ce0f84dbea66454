# trainingdesk/routes/courses.py
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING, ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import COURSES, get_db, serialize, serialize_many
from trainingdesk.errors import NotFound
from trainingdesk.schemas.catalog import CourseCreate, CoursePatch, CourseRef, CourseUpdate
from trainingdesk.utils.ids import timestamp_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/courses", tags=["courses"])
logger = get_logger(__name__)


def _update(db, course_id: str, changes: dict, user: Optional[dict]) -> dict:
    changes["updatedAt"] = utcnow_iso()
    updated = db[COURSES].find_one_and_update(
        {"id": course_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Course not found")

    logger.info("Course %s updated", course_id)
    log_activity(db, actor_id(user), "course_updated", {"courseId": course_id, "fields": sorted(changes)})
    return {"success": True, "course": serialize(updated), "message": "Course updated successfully"}


def _delete(db, course_id: str, user: Optional[dict]) -> dict:
    result = db[COURSES].delete_one({"id": course_id})
    if result.deleted_count == 0:
        raise NotFound("Course not found")

    log_activity(db, actor_id(user), "course_deleted", {"courseId": course_id})
    return {"success": True, "message": "Course deleted successfully"}


@router.get("")
def list_courses(db=Depends(get_db)):
    courses = serialize_many(db[COURSES].find({}).sort("createdAt", DESCENDING))
    logger.info("Fetched courses (%d)", len(courses))
    return {"success": True, "courses": courses}


@router.post("")
def create_course(payload: CourseCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    doc = {
        **payload.to_doc(),
        "id": timestamp_id(),
        "students": 0,
        "createdAt": utcnow_iso(),
    }
    db[COURSES].insert_one(doc)

    logger.info("Course created: %s (%s)", doc["id"], doc["title"])
    log_activity(db, actor_id(user), "course_created", {"courseId": doc["id"], "title": doc["title"]})
    return {"success": True, "course": serialize(doc)}


@router.patch("")
def patch_course(payload: CoursePatch, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    return _update(db, payload.course_id, payload.to_doc(exclude={"course_id"}), user)


@router.delete("")
def delete_course(payload: CourseRef, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    return _delete(db, payload.course_id, user)


@router.patch("/{course_id}")
def patch_course_by_id(
    course_id: str,
    payload: CourseUpdate,
    db=Depends(get_db),
    user: Optional[dict] = Depends(get_optional_user),
):
    return _update(db, course_id, payload.to_doc(), user)


@router.delete("/{course_id}")
def delete_course_by_id(course_id: str, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    return _delete(db, course_id, user)
