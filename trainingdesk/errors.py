"""
Error taxonomy for the training desk API.

Handlers raise these; the app factory turns every one of them into the
``{"success": false, "error": ...}`` envelope with the matching status.
"""
from typing import Any, Dict, Optional


class TrainingDeskError(Exception):
    """Base exception carrying the HTTP status it maps to."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BadRequest(TrainingDeskError):
    status_code = 400
    default_message = "Bad request"


class NotAuthenticated(TrainingDeskError):
    status_code = 401
    default_message = "Authentication failed"


class NotFound(TrainingDeskError):
    status_code = 404
    default_message = "Not found"


class Conflict(TrainingDeskError):
    """Raised when a conditional update loses against a concurrent writer."""

    status_code = 409
    default_message = "Resource was modified concurrently, please retry"


class Gone(TrainingDeskError):
    status_code = 410
    default_message = "Resource has expired"


class UpstreamError(TrainingDeskError):
    status_code = 502
    default_message = "Upstream rejected"


class ServiceUnavailable(TrainingDeskError):
    status_code = 503
    default_message = "Integration not configured"
