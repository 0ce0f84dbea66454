# trainingdesk/routes/notifications.py
from typing import Optional

from fastapi import APIRouter, Depends

from trainingdesk.auth import actor_id, get_optional_user
from trainingdesk.db import get_db
from trainingdesk.errors import BadRequest
from trainingdesk.schemas.notify import NotificationMessage
from trainingdesk.services.notify import DiscordNotifier, get_notifier
from trainingdesk.utils.logger import get_logger, log_activity

router = APIRouter(prefix="/discord", tags=["notifications"])
logger = get_logger(__name__)


@router.post("/send-dm")
def send_dm(
    payload: NotificationMessage,
    db=Depends(get_db),
    notifier: DiscordNotifier = Depends(get_notifier),
    user: Optional[dict] = Depends(get_optional_user),
):
    if not payload.message:
        raise BadRequest("Message is required")

    notifier.send(payload.message)

    logger.info("Discord notification sent (student=%s trainer=%s)", payload.student_id, payload.trainer_id)
    log_activity(db, actor_id(user, payload.trainer_id or "system"), "discord_notification_sent",
                 {"studentId": payload.student_id, "trainerId": payload.trainer_id})
    return {"success": True, "message": "Discord notification sent successfully"}
