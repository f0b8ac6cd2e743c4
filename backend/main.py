"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lawdesk import __version__
from lawdesk.api.routes import health, laws_pages, metrics
from lawdesk.core.config import get_settings
from lawdesk.core.database import get_engine, init_db
from lawdesk.core.logging_config import LoggingConfig
from lawdesk.core.middleware import LoggingContextMiddleware
from lawdesk.core.middleware_metrics import MetricsMiddleware
from lawdesk.core.tracing import configure_tracing, shutdown_tracing

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")

    if settings.create_tables_on_startup:
        init_db()
    configure_tracing(app, engine=get_engine())

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    shutdown_tracing()


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    settings = get_settings()
    application = FastAPI(
        title=settings.app_name,
        description="Form-driven entry of laws",
        version=__version__,
        lifespan=lifespan,
    )

    # Added last runs first: logging context wraps metrics wraps CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(LoggingContextMiddleware)

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log unhandled errors and answer with a JSON 500"""
        if isinstance(exc, FastAPIHTTPException):
            raise exc

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
            content={"detail": str(exc), "type": type(exc).__name__}
        )

    application.include_router(laws_pages.router)
    application.include_router(health.router)
    application.include_router(metrics.router)

    @application.get("/api")
    async def root():
        """Root API endpoint"""
        return {
            "name": settings.app_name,
            "version": __version__,
            "status": "running",
            "environment": settings.app_env,
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
