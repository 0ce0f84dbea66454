from typing import Literal, Optional

from pydantic import Field

from trainingdesk.schemas.base import CamelModel

RequestStatus = Literal["pending", "assigned", "in-progress", "completed", "cancelled"]


class TrainingRequestCreate(CamelModel):
    pilot_id: str = Field(min_length=1)
    pilot_name: str = Field(min_length=1)
    topic_id: str = Field(min_length=1)
    topic_name: str = Field(min_length=1)
    requested_date: str = Field(min_length=1)
    requested_time: str = Field(min_length=1)
    comments: str = ""


class AssignmentAction(CamelModel):
    """Body shared by assign, pickup and reassign."""
    assignment_id: str = Field(min_length=1)
    trainer_id: str = Field(min_length=1)
    trainer_name: Optional[str] = None


class StatusChange(CamelModel):
    status: RequestStatus


class TrainingAssignmentCreate(CamelModel):
    pilot_id: str = Field(min_length=1)
    pilot_name: str = Field(min_length=1)
    topic_id: str = Field(min_length=1)
    topic_name: str = Field(min_length=1)
    scheduled_date: str = Field(min_length=1)
    scheduled_time: str = Field(min_length=1)
    assigned_trainer: str = Field(min_length=1)
    trainer_name: str = ""


class TrainingAssignmentUpdate(CamelModel):
    status: Optional[Literal["scheduled", "in-progress", "completed", "cancelled"]] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comments: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
