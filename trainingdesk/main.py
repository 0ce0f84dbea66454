from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException

from trainingdesk import settings
from trainingdesk.db import connect
from trainingdesk.db_init import ensure_indexes
from trainingdesk.errors import TrainingDeskError
from trainingdesk.middleware.audit_middleware import AuditMiddleware
from trainingdesk.routes import (
    auth, courses, inactivation, notifications, quiz_attempts, quizzes, staff,
    students, submissions, tokens, topics, training_assignments, training_requests,
)
from trainingdesk.routes.personnel import examiners_router, trainers_router
from trainingdesk.services.identity import IdentityGateway
from trainingdesk.services.notify import DiscordNotifier
from trainingdesk.utils.logger import get_logger

logger = get_logger(__name__)


def _failure(message: str, status_code: int, headers=None) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    names = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if not names:
        return "Request body is required" if first.get("type") == "missing" else "Invalid request body"
    field = ".".join(names)
    if first.get("type") == "missing":
        return f"Missing required field: {field}"
    return f"Invalid value for {field}: {first.get('msg')}"


def create_app(db=None, identity=None, notifier=None) -> FastAPI:
    app = FastAPI(title="JAL Training Desk")

    app.state.db = db if db is not None else connect()
    app.state.identity = identity or IdentityGateway(admin_key=settings.ADMIN_API_KEY)
    app.state.notifier = notifier or DiscordNotifier(settings.DISCORD_WEBHOOK_URL)

    app.add_middleware(AuditMiddleware)

    # --- error envelope ------------------------------------------------------
    @app.exception_handler(TrainingDeskError)
    async def training_desk_error_handler(request: Request, exc: TrainingDeskError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _failure(str(exc.detail), exc.status_code, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _failure(_validation_message(exc), 400)

    @app.exception_handler(PyMongoError)
    async def database_error_handler(request: Request, exc: PyMongoError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return _failure("Database operation failed", 500)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _failure("Internal server error", 500)

    # --- routers ---------------------------------------------------------------
    app.include_router(auth.router)
    app.include_router(staff.router)
    app.include_router(trainers_router)
    app.include_router(examiners_router)
    app.include_router(inactivation.router)
    app.include_router(courses.router)
    app.include_router(students.router)
    app.include_router(topics.router)
    app.include_router(training_requests.router)
    app.include_router(training_assignments.router)
    app.include_router(quizzes.router)
    app.include_router(quiz_attempts.router)
    app.include_router(submissions.router)
    app.include_router(tokens.router)
    app.include_router(notifications.router)

    @app.on_event("startup")
    def _init_indexes():
        try:
            ensure_indexes(app.state.db)
        except PyMongoError as e:
            logger.warning("Index init skipped: %s", e)

    @app.on_event("shutdown")
    def _close_clients():
        app.state.identity.close()
        app.state.notifier.close()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("trainingdesk.main:app", host="0.0.0.0", port=8000)
