"""Entry point for the Drive web application."""

import time
import uuid
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from common.constants import SESSION_COOKIE_NAME
from common.logging_config import get_logger, setup_logging
from drive.config import (
    DRIVE_HOST,
    DRIVE_PORT,
    SECRET_KEY,
    SESSION_HTTPS_ONLY,
    SESSION_MAX_AGE,
    UPLOADS_DIR,
)
from drive.database import init_database
from drive.exceptions import (
    DriveException,
    DuplicateNameError,
    DuplicateUsernameError,
    FileTooLargeError,
    HasChildrenError,
    NotAuthenticatedError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from drive.routes.auth_routes import router as auth_router
from drive.routes.drive_routes import router as drive_router
from drive.routes.file_routes import router as file_router
from drive.templating import render_error, templates

setup_logging('drive')
logger = get_logger('drive.main')

GENERIC_ERROR_MESSAGE = "Internal Server Error"

app = FastAPI(
    title="Drive",
    description="Personal file storage organized in folders",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time
    user_id = getattr(request.state, 'user_id', None)

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s "
        f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


# Added after the logging middleware so the session wraps it.
app.add_middleware(
    SessionMiddleware,
    secret_key=SECRET_KEY,
    session_cookie=SESSION_COOKIE_NAME,
    max_age=SESSION_MAX_AGE,
    same_site="lax",
    https_only=SESSION_HTTPS_ONLY,
)


@app.on_event("startup")
async def startup_event():
    """
    Initialize database and the uploads directory on application startup.
    """
    logger.info("Drive service starting up...")

    init_database()
    logger.info("Database initialized")

    Path(UPLOADS_DIR).mkdir(parents=True, exist_ok=True)
    logger.info(f"Uploads directory ready: {UPLOADS_DIR}")


def _request_id(request: Request) -> str:
    return getattr(request.state, 'request_id', 'unknown')


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    logger.info(f"Unauthenticated request redirected [request_id={_request_id(request)}] path={request.url.path}")
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(DuplicateUsernameError)
async def duplicate_username_handler(request: Request, exc: DuplicateUsernameError):
    logger.warning(
        f"Duplicate username error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return templates.TemplateResponse(
        request,
        "sign_up.html",
        {"error": "Username taken"},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(
        f"Validation error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return render_error(request, status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(DuplicateNameError)
async def duplicate_name_handler(request: Request, exc: DuplicateNameError):
    logger.warning(
        f"Duplicate name error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return render_error(request, status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(
        f"Not found error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return render_error(request, status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(HasChildrenError)
async def has_children_handler(request: Request, exc: HasChildrenError):
    logger.warning(
        f"Folder has children: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return render_error(request, status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(FileTooLargeError)
async def file_too_large_handler(request: Request, exc: FileTooLargeError):
    logger.warning(
        f"Upload too large: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return render_error(request, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))


@app.exception_handler(StorageIOError)
async def storage_io_handler(request: Request, exc: StorageIOError):
    logger.error(
        f"Storage I/O error: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=exc
    )
    return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


@app.exception_handler(DriveException)
async def drive_exception_handler(request: Request, exc: DriveException):
    logger.error(
        f"Drive exception: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=exc
    )
    return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Page not found"
    else:
        message = str(exc.detail)
    return render_error(request, exc.status_code, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=exc
    )
    return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


app.include_router(auth_router)
app.include_router(drive_router)
app.include_router(file_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint. Returns 200 if the service is alive.
    """
    return {"status": "healthy", "service": "drive"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "drive.main:app",
        host=DRIVE_HOST,
        port=DRIVE_PORT,
    )


if __name__ == "__main__":
    main()
