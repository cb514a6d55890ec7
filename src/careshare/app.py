"""
Main FastAPI application for CareShare API
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
import asyncio
import logging
import sys

from careshare.config.settings import Settings, settings as default_settings
from careshare.core.envelope import agent_error, agent_failure, is_agent_path
from careshare.core.errors import CareShareError, InvalidBodyError
from careshare.core.request_context import RequestIdFilter, current_request_id, install_request_logging
from careshare.database.config import DatabaseManager
from careshare.routes.agent_routes import router as agent_router
from careshare.routes.health_routes import router as health_router
from careshare.routes.personalization_routes import router as personalization_router
from careshare.routes.ui_routes import router as ui_router
from careshare.services.outbound_call_service import ElevenLabsOutboundService
from careshare.services.phone_service import PhoneNormalizer
from careshare.services.zip_service import ZipRadiusService

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


def install_process_error_logging(loop: asyncio.AbstractEventLoop):
    """Log stray task failures and uncaught exceptions instead of losing them"""

    def handle_loop_exception(_loop, context):
        error = context.get("exception")
        logger.error(f"[process] unhandled task error: {context.get('message')}", exc_info=error)

    def handle_uncaught(exc_type, exc, tb):
        logger.error("[process] uncaught exception", exc_info=(exc_type, exc, tb))

    loop.set_exception_handler(handle_loop_exception)
    sys.excepthook = handle_uncaught


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the database and build lookup services before serving requests"""
    logger.info("Starting application lifespan...")
    install_process_error_logging(asyncio.get_running_loop())

    db_manager: Optional[DatabaseManager] = None
    if app.state.session_factory is None:
        db_manager = DatabaseManager(app.state.settings.database_url)
        db_manager.initialize()
        app.state.session_factory = db_manager.SessionLocal

    if app.state.zip_radius is None:
        app.state.zip_radius = ZipRadiusService()

    if app.state.outbound_service is None:
        app.state.outbound_service = ElevenLabsOutboundService(app.state.settings)

    missing = app.state.settings.missing_elevenlabs_settings()
    if missing:
        logger.warning(f"Outbound calls disabled until configured: {missing}")

    try:
        logger.info("All services started successfully")
        yield
    finally:
        await app.state.outbound_service.close()
        if db_manager is not None:
            db_manager.close()
        logger.info("Application lifespan completed")


def register_exception_handlers(app: FastAPI):
    """Agent routes get the 200 envelope, portal routes get HTTP status codes"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = InvalidBodyError(details=jsonable_encoder(exc.errors()))
        if is_agent_path(request.url.path):
            return agent_error(error)
        return JSONResponse(status_code=error.status_code, content={"error": error.message, "details": error.details})

    @app.exception_handler(CareShareError)
    async def careshare_exception_handler(request: Request, exc: CareShareError):
        if is_agent_path(request.url.path):
            return agent_error(exc)
        content = {"error": exc.message}
        if exc.details is not None:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        path = request.url.path
        # Unmatched method or path both answer as a missing route
        if exc.status_code in (404, 405):
            if is_agent_path(path):
                return JSONResponse(
                    status_code=404,
                    content={"success": False, "error": {"code": "NOT_FOUND", "message": "Route not found", "path": path}}
                )
            return JSONResponse(status_code=404, content={"error": "Not found", "path": path})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        path = request.url.path
        logger.error(
            f"[{current_request_id()}] ERROR {request.method} {path}: {str(exc)}",
            exc_info=(type(exc), exc, exc.__traceback__)
        )
        message = str(exc) or "Unhandled error"
        if is_agent_path(path):
            return agent_failure("UNHANDLED_ERROR", message)
        return JSONResponse(status_code=500, content={"error": message})


def create_app(
    settings: Optional[Settings] = None,
    session_factory=None,
    phone_normalizer: Optional[PhoneNormalizer] = None,
    zip_radius: Optional[ZipRadiusService] = None,
    outbound_service: Optional[ElevenLabsOutboundService] = None
) -> FastAPI:
    """Create and configure FastAPI application"""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.phone_normalizer = phone_normalizer or PhoneNormalizer(settings.default_phone_region)
    app.state.zip_radius = zip_radius
    app.state.outbound_service = outbound_service

    install_request_logging(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(ui_router)
    app.include_router(personalization_router)
    app.include_router(agent_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "careshare.app:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug
    )
