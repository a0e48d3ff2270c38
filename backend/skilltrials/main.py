import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import assessment as assessment_api
from .api import auth as auth_api
from .api import job as job_api
from .api import question as question_api
from .api import support as support_api
from .config import FRONTEND_ORIGINS
from .database import init_db
from .utils.error_handlers import AppError, create_error_response, get_error_message

logger = logging.getLogger(__name__)

SERVICE_NAME = "SkillTrials API"

_default_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Covers route-level HTTPExceptions and unmatched paths or methods."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "status_code": exc.status_code,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return create_error_response(exc.status_code, exc.message, exc.details or None)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are rejected before any handler touches storage."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else get_error_message("validation_error")
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": message,
                "details": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                    for e in errors
                ],
            },
        )

    @app.exception_handler(OperationalError)
    async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
        """Handle database operational errors."""
        logger.exception("Database OperationalError: %s", exc)
        return create_error_response(503, get_error_message("database_error"))

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle general database errors."""
        logger.exception("Database SQLAlchemyError: %s", exc)
        return create_error_response(500, get_error_message("database_error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors globally."""
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, get_error_message("server_error"))


def create_app() -> FastAPI:
    app = FastAPI(title=SERVICE_NAME)

    app.include_router(auth_api.router)
    app.include_router(job_api.router)
    app.include_router(question_api.router)
    app.include_router(assessment_api.router)
    app.include_router(support_api.router)

    _register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[*_default_origins, *FRONTEND_ORIGINS],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"success": True, "message": "Welcome to root URL of Server"}

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "success": True,
            "status": "Backend running",
            "service": SERVICE_NAME,
        }

    return app


app = create_app()


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info("%s started; database tables ensured", SERVICE_NAME)
