from typing import Optional

import httpx
from fastapi import Request

from trainingdesk import settings
from trainingdesk.errors import ServiceUnavailable, TrainingDeskError
from trainingdesk.utils.ids import utcnow_iso
from trainingdesk.utils.logger import get_logger

logger = get_logger(__name__)

EMBED_COLOR = 0x0099FF
FOOTER = "JAL Virtual Training System"


class NotificationFailed(TrainingDeskError):
    status_code = 500
    default_message = "Failed to send Discord notification"


def build_payload(message: str) -> dict:
    return {
        "content": (
            "🎓 **Training System Notification**\n\n"
            f"{message}\n\n"
            "*This is an automated message from the JAL Training System.*"
        ),
        "embeds": [
            {
                "color": EMBED_COLOR,
                "timestamp": utcnow_iso(),
                "footer": {"text": FOOTER},
            }
        ],
    }


class DiscordNotifier:
    """Fire-and-forget webhook poster. One attempt, no retry."""

    def __init__(self, webhook_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        self.webhook_url = webhook_url
        self.client = client or httpx.Client(timeout=settings.UPSTREAM_TIMEOUT_S)

    def send(self, message: str) -> None:
        if not self.webhook_url:
            logger.warning("Discord webhook URL not configured")
            raise ServiceUnavailable("Discord integration not configured")
        try:
            response = self.client.post(self.webhook_url, json=build_payload(message))
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error sending Discord message: %s", e)
            raise NotificationFailed() from e

    def close(self):
        self.client.close()


def get_notifier(request: Request) -> DiscordNotifier:
    return request.app.state.notifier
