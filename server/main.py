"""Entry point for the FileSync server."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.constants import DEFAULT_ADMIN_USERNAME, USER_ID_HEADER
from common.logging_config import setup_logging
from server.blob_store import BlobStore
from server.cleanup_task import OrphanedBlobCleaner
from server.config import Settings
from server.database import Database
from server.exceptions import FileSyncError
from server.middleware import UploadSizeLimitMiddleware
from server.repositories.file_repository import FileRepository
from server.repositories.user_repository import UserRepository
from server.routes.auth_routes import router as auth_router
from server.routes.file_routes import router as file_router
from server.schemas.common import ErrorResponse, HealthResponse
from server.security import hash_password
from server.services.auth_service import AuthService
from server.services.file_service import FileService
from server.utils import get_current_timestamp

logger = setup_logging('server')

UPLOAD_PATH = "/api/upload"


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code).model_dump(),
    )


def _build_state(app: FastAPI, settings: Settings) -> None:
    db = Database(settings.database_path)
    db.init_schema()

    if settings.admin_password:
        db.seed_default_user(DEFAULT_ADMIN_USERNAME, hash_password(settings.admin_password), get_current_timestamp())

    blob_store = BlobStore(settings.storage_root)
    file_repo = FileRepository(db)
    user_repo = UserRepository(db)

    app.state.settings = settings
    app.state.db = db
    app.state.blob_store = blob_store
    app.state.file_repo = file_repo
    app.state.user_repo = user_repo
    app.state.file_service = FileService(
        file_repo,
        blob_store,
        max_upload_bytes=settings.max_upload_bytes,
        enforce_delete_ownership=settings.delete_requires_owner,
    )
    app.state.auth_service = AuthService(user_repo)
    app.state.cleaner = OrphanedBlobCleaner(
        file_repo,
        blob_store,
        interval_seconds=settings.cleanup_interval_seconds,
        grace_seconds=settings.orphan_grace_seconds,
    )

    logger.info(
        f"Storage root: {blob_store.root} | database: {settings.database_path} "
        f"| environment: {settings.environment}"
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FileSyncError)
    async def filesync_error_handler(request: Request, exc: FileSyncError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        if exc.status_code >= 500:
            logger.error(
                f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}",
                exc_info=True
            )
        else:
            logger.warning(
                f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
            )
        return _error_response(exc.status_code, str(exc), exc.code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(f"Invalid request body [request_id={request_id}] path={request.url.path}")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", "VALIDATION_ERROR")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error_response(exc.status_code, "Route not found", "ROUTE_NOT_FOUND")
        return _error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Unhandled error: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=True
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its own database, blob store and services.

    Args:
        settings: Server settings; read from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FileSync server starting up...")
        await app.state.cleaner.start()
        yield
        logger.info("FileSync server shutting down...")
        await app.state.cleaner.stop()
        app.state.db.close()

    app = FastAPI(
        title="FileSync",
        description="Shared file storage: upload, list, download and delete",
        version="1.0.0",
        lifespan=lifespan,
    )

    _build_state(app, settings)
    _register_exception_handlers(app)

    app.add_middleware(UploadSizeLimitMiddleware, path=UPLOAD_PATH, max_upload_bytes=settings.max_upload_bytes)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", USER_ID_HEADER],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    app.include_router(auth_router)
    app.include_router(file_router)

    app.mount("/uploads", StaticFiles(directory=str(app.state.blob_store.root)), name="uploads")

    @app.get("/")
    async def root():
        """
        Service banner listing the endpoints.
        """
        return {
            "message": "FileSync server is running",
            "endpoints": {
                "auth": ["POST /api/login", "POST /api/register"],
                "files": [
                    "GET /api/files",
                    "POST /api/upload",
                    "GET /api/download/{file_id}",
                    "DELETE /api/files/{file_id}",
                ],
                "health": "GET /health",
            },
            "timestamp": get_current_timestamp(),
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """
        Health check endpoint. Returns 200 if the service is alive.
        """
        return HealthResponse(
            status="OK",
            message="Server is running",
            timestamp=get_current_timestamp(),
        )

    @app.get("/ready")
    def ready_check():
        """
        Readiness check: database reachable and storage root present.
        """
        try:
            app.state.db.ping()
            db_status = "ok"
        except Exception as e:
            db_status = f"error: {e}"

        storage_root = app.state.blob_store.root
        storage_status = "ok" if storage_root.is_dir() else f"error: {storage_root} missing"

        ready = db_status == "ok" and storage_status == "ok"
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ready": ready, "database": db_status, "storage": storage_status},
        )

    return app


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    settings = Settings.from_env()
    uvicorn.run(
        "server.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
