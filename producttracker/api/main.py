"""
Product Tracker API

FastAPI application entry point.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fastapi import FastAPI, Request

from producttracker import __version__
from .schemas import HealthResponse
from .routes import auth, products, documents
from .middleware import (
    setup_cors,
    setup_logging,
    setup_exception_handlers,
    LoggingConfig,
    get_cors_config,
)
from .dependencies import (
    get_settings,
    init_database,
    dispose_database,
    create_tables,
    ping_database,
    init_services,
    session_scope,
    Settings,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

async def purge_interrupted_uploads(services) -> int:
    """Clear pending upload records left by a previous crash."""
    from ..services.document_service import DocumentService
    from ..storage.document_repository import DocumentRepository
    from ..storage.product_repository import ProductRepository

    async with session_scope() as session:
        service = DocumentService(
            documents=DocumentRepository(session),
            products=ProductRepository(session),
            storage=services.file_storage,
            policy=services.upload_policy,
        )
        return await service.purge_stale_uploads()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Validate settings
    - Initialize the database and create tables
    - Clear interrupted uploads
    - Dispose connections on shutdown
    """
    settings = app.state.settings
    logger.info(f"Starting Product Tracker in {settings.environment} mode")

    try:
        settings.validate()

        logger.info("Initializing database...")
        init_database(settings)
        await create_tables()
        await ping_database()

        services = init_services(settings)
        app.state.services = services

        purged = await purge_interrupted_uploads(services)
        if purged:
            logger.warning(f"Removed {purged} interrupted uploads")

        logger.info("Product Tracker started successfully")

        yield

    finally:
        logger.info("Shutting down Product Tracker...")
        await dispose_database()
        logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(settings: Settings = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Product Tracker",
        description="Personal product records with receipts, manuals and notes.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ==========================================================================
    # Middleware (order matters - last added = outermost)
    # ==========================================================================

    setup_logging(
        app,
        config=LoggingConfig(
            enabled=True,
            log_request_body=settings.debug,
        ),
        structured=settings.environment != "development",
    )

    setup_exception_handlers(app)

    setup_cors(app, config=get_cors_config(settings.environment))

    # ==========================================================================
    # Routers
    # ==========================================================================

    api_prefix = "/api"

    app.include_router(auth.router, prefix=api_prefix)
    app.include_router(products.router, prefix=api_prefix)
    app.include_router(documents.router, prefix=api_prefix)

    # ==========================================================================
    # Root Routes
    # ==========================================================================

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API info."""
        return {
            "message": "Product Tracker Backend is running!",
            "version": __version__,
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request) -> HealthResponse:
        """Report database reachability and upload storage status."""
        components = {}
        overall_healthy = True

        try:
            await ping_database()
            components["database"] = "healthy"
        except Exception as e:
            components["database"] = f"unhealthy: {type(e).__name__}"
            overall_healthy = False

        services = getattr(request.app.state, "services", None)
        if services is not None and services.file_storage.root.is_dir():
            components["file_storage"] = "healthy"
        else:
            components["file_storage"] = "not_initialized"

        return HealthResponse(
            status="healthy" if overall_healthy else "degraded",
            version=__version__,
            components=components,
        )

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "producttracker.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
