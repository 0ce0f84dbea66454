from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from trainingdesk.schemas.base import CamelModel

MAX_TOKEN_HOURS = 24 * 365

QuizStatus = Literal["draft", "published", "archived"]
AttemptStatus = Literal["in_progress", "submitted"]
TokenStatus = Literal["active", "expired"]


class QuizFields(CamelModel):
    description: Optional[str] = None
    questions: Optional[List[Dict[str, Any]]] = None
    time_limit: Optional[int] = Field(default=None, ge=0)
    passing_score: Optional[float] = Field(default=None, ge=0, le=100)
    created_by: Optional[str] = None


class QuizCreate(QuizFields):
    title: str = Field(min_length=1)
    status: QuizStatus = "draft"


class QuizPatch(QuizFields):
    quiz_id: str = Field(min_length=1)
    title: Optional[str] = Field(default=None, min_length=1)
    status: Optional[QuizStatus] = None


class AttemptCreate(CamelModel):
    quiz_id: str = Field(min_length=1)
    student_name: Optional[str] = None
    student_id: Optional[str] = None
    token_id: Optional[str] = None


class AttemptPatch(CamelModel):
    attempt_id: str = Field(min_length=1)
    answers: Optional[List[Any]] = None
    status: Optional[AttemptStatus] = None
    score: Optional[float] = None
    current_question: Optional[int] = Field(default=None, ge=0)


class SubmissionCreate(CamelModel):
    quiz_id: str = Field(min_length=1)
    student_name: str = Field(min_length=1)
    quiz_title: Optional[str] = None
    attempt_id: Optional[str] = None
    answers: List[Any] = Field(default_factory=list)
    score: Optional[float] = None


class SubmissionPatch(CamelModel):
    submission_id: str = Field(min_length=1)
    score: Optional[float] = None
    status: Optional[str] = None
    feedback: Optional[str] = None
    graded_by: Optional[str] = None


class TokenCreate(CamelModel):
    quiz_id: str = Field(min_length=1)
    quiz_title: Optional[str] = None
    assigned_student_name: Optional[str] = None
    expires_at: Optional[datetime] = None
    expires_in_hours: Optional[float] = Field(default=None, gt=0, le=MAX_TOKEN_HOURS)
    created_by: Optional[str] = None


class TokenPatch(CamelModel):
    token_id: str = Field(min_length=1)
    status: Optional[TokenStatus] = None
    expires_at: Optional[datetime] = None
    assigned_student_name: Optional[str] = None

