from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from expat_hub.api.router import router as api_router
from expat_hub.api.session_cookie import SessionCookie
from expat_hub.config import Settings
from expat_hub.middleware import RequestLoggingMiddleware
from expat_hub.models.db import Database
from expat_hub.services.auth_service import AuthService
from expat_hub.services.errors import AppError, InternalError, ValidationError
from expat_hub.services.session_store import SessionStore
from expat_hub.services.user_admin_service import UserAdminService
from expat_hub.utils.logging_config import get_logger, setup_access_logging, setup_logging

logger = get_logger(__name__)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = ValidationError(
            details=[
                {"field": _field_name(item.get("loc", ())), "message": item.get("msg", "Invalid value")}
                for item in exc.errors()
            ]
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Storage failure on {request.method} {request.url.path}", exc_info=exc)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    settings.validate_runtime_config()

    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_to_file,
    )
    setup_access_logging(log_dir=settings.log_dir, enable_file=settings.log_to_file)

    app = FastAPI(title="Expat Hub API")

    # 请求日志中间件（在 CORS 之前）
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    database = Database(settings.database_url)
    sessions = SessionStore(database, lifetime=settings.session_lifetime)
    app.state.settings = settings
    app.state.database = database
    app.state.auth_service = AuthService(database, sessions)
    app.state.user_admin_service = UserAdminService(database, sessions)
    app.state.session_cookie = SessionCookie(
        name=settings.session_cookie_name,
        secure=settings.cookie_secure,
    )

    register_exception_handlers(app)

    logger.info(f"Application initialized: env={settings.env}, log_dir={settings.log_dir}")

    @app.on_event("startup")
    def on_startup():
        """Initialize persistent resources when the API boots."""
        database.init_db()

        # 确保存在默认管理员账号
        if settings.admin_email and settings.admin_password:
            app.state.auth_service.ensure_default_admin(settings.admin_email, settings.admin_password)

    @app.on_event("shutdown")
    def on_shutdown():
        """Release the database engine when the API stops."""
        database.dispose()

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    def root():
        return {"status": "ok", "message": "Expat Hub API is running"}

    return app


app = create_app()
