"""
Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from depin.api.routes import devices, health, metrics, network
from depin.core.config import get_settings
from depin.core.database import init_db
from depin.core.logging_config import LoggingConfig
from depin.core.middleware import LoggingContextMiddleware
from depin.core.middleware_metrics import MetricsMiddleware

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
    if settings.database_auto_create:
        init_db()
        logger.info("Ledger tables created")

    yield

    logger.info(f"Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Permissioned ledger for device network telemetry and rewards",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log unhandled errors and answer 500"""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={
                "error": str(exc),
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            }
        )
        return JSONResponse(
            status_code=500,
            content={"detail": {"code": "internal_error", "message": "Internal server error"}},
        )

    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(network.router)
    app.include_router(devices.router)

    @app.get("/api")
    async def root():
        """Root API endpoint"""
        return {
            "name": settings.app_name,
            "version": "0.1.0",
            "status": "running",
            "environment": settings.app_env,
        }

    return app


app = create_app()
