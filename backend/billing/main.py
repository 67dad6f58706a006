from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from billing.api.api_v1.api import api_router as api_v1_router
from billing.core.config import settings
from billing.core.errors import BillingError, billing_error_handler, validation_error_handler
from billing.core.logging_config import setup_logging, get_logger
from billing.db.init_db import ensure_tables_exist
from billing.services.scheduler import init_scheduler, shutdown_scheduler, get_scheduler_status

setup_logging(settings.LOG_LEVEL, settings.LOG_DIR if settings.LOG_TO_FILE else None)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown"""
    logger.info("🚀 Starting billing service...")

    try:
        await ensure_tables_exist()
        logger.info("📊 Database tables ready")
    except Exception as e:
        logger.warning(f"Table creation skipped: {e}")

    init_scheduler()
    yield
    logger.info("🛑 Shutting down billing service...")
    shutdown_scheduler()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        description="Payments, invoices and allocations for the translation portal",
        lifespan=lifespan
    )

    # Answers OPTIONS preflight for every route
    logger.info(f"CORS origins: {settings.BACKEND_CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials="*" not in settings.BACKEND_CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.add_exception_handler(BillingError, billing_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.get("/")
    async def root():
        return {"message": settings.PROJECT_NAME}

    @app.get("/health")
    async def health():
        return {"status": "ok", "scheduler": get_scheduler_status()}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
