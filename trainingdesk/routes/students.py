# trainingdesk/routes/students.py
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING, ReturnDocument

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import STUDENTS, get_db, serialize, serialize_many
from trainingdesk.errors import NotFound
from trainingdesk.schemas.catalog import StudentCreate, StudentPatch, StudentRef
from trainingdesk.utils.ids import timestamp_id, utcnow_iso
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/students", tags=["students"])
logger = get_logger(__name__)


@router.get("")
def list_students(db=Depends(get_db)):
    students = serialize_many(db[STUDENTS].find({}).sort("enrolledAt", DESCENDING))
    return {"success": True, "students": students}


@router.post("")
def enroll_student(payload: StudentCreate, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    doc = {**payload.to_doc(), "id": timestamp_id(), "enrolledAt": utcnow_iso()}
    db[STUDENTS].insert_one(doc)

    logger.info("Student %s enrolled (course %s)", doc["id"], doc.get("courseId"))
    log_activity(db, actor_id(user), "student_created",
                 {"studentId": doc["id"], "jalId": doc.get("jalId"), "courseId": doc.get("courseId")})
    return {"success": True, "student": serialize(doc)}


@router.patch("")
def update_student(payload: StudentPatch, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    changes = payload.to_doc(exclude={"student_id"})
    changes["updatedAt"] = utcnow_iso()
    updated = db[STUDENTS].find_one_and_update(
        {"id": payload.student_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    if not updated:
        raise NotFound("Student not found")

    log_activity(db, actor_id(user), "student_updated", {"studentId": payload.student_id, "fields": sorted(changes)})
    return {"success": True, "student": serialize(updated), "message": "Student updated successfully"}


@router.delete("")
def remove_student(payload: StudentRef, db=Depends(get_db), user: Optional[dict] = Depends(get_optional_user)):
    result = db[STUDENTS].delete_one({"id": payload.student_id})
    if result.deleted_count == 0:
        raise NotFound("Student not found")

    log_activity(db, actor_id(user), "student_deleted", {"studentId": payload.student_id})
    return {"success": True, "message": "Student deleted successfully"}
