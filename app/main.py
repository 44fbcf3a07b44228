"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.enums import AuditEventType
from app.core.exception_handlers import register_exception_handlers
from app.core.logging import setup_logging
from app.core.security import analyze_request_security, get_client_ip
from app.db.session import async_session_maker, engine
from app.services.audit_log import AuditLogger

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: log environment; shutdown: dispose the engine."""
    # Schema is managed with Alembic (alembic upgrade head)
    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    yield
    await engine.dispose()


def create_application() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.audit_logger = AuditLogger(async_session_maker, write_to_db=settings.audit_log_to_db)
    register_exception_handlers(app)

    # CORS: allow everything in debug, localhost in development, site_url + CORS_ORIGINS otherwise
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [
            settings.site_url,
            *[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def flag_suspicious_requests(request: Request, call_next):
        """Audit requests that look like attacks or scans; they are still served normally."""
        suspicious, reasons = analyze_request_security(request)
        if suspicious:
            await request.app.state.audit_logger.log_security_event(
                AuditEventType.SUSPICIOUS_ACTIVITY,
                {
                    "path": request.url.path,
                    "method": request.method,
                    "ip": get_client_ip(request),
                    "reasons": reasons,
                },
                request=request,
            )
        return await call_next(request)

    @app.get("/")
    def root():
        return {"success": True, "status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
