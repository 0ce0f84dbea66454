from typing import Optional

from pydantic import Field

from trainingdesk.schemas.base import CamelModel


class CourseFields(CamelModel):
    instructor: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    level: Optional[str] = None
    status: Optional[str] = None


class CourseCreate(CourseFields):
    title: str = Field(min_length=1)


class CourseUpdate(CourseFields):
    title: Optional[str] = Field(default=None, min_length=1)


class CoursePatch(CourseUpdate):
    course_id: str = Field(min_length=1)


class CourseRef(CamelModel):
    course_id: str = Field(min_length=1)


class StudentFields(CamelModel):
    jal_id: Optional[str] = None
    course_id: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)


class StudentCreate(StudentFields):
    name: str = Field(min_length=1)


class StudentPatch(StudentFields):
    student_id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)


class StudentRef(CamelModel):
    student_id: str = Field(min_length=1)


class TopicCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str = ""


class TopicUpdate(TopicCreate):
    active: bool = True
