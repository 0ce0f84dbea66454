from typing import Optional

from trainingdesk.schemas.base import CamelModel


class NotificationMessage(CamelModel):
    student_id: Optional[str] = None
    trainer_id: Optional[str] = None
    message: Optional[str] = None
