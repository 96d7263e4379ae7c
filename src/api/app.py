"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080 --workers 4
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.exceptions import CatalogLoadError
from catalog.repository import get_catalog_repository
from config.settings import get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Startup configures logging and loads the catalog so the first request
    does not pay for it. A catalog that fails to load is logged and retried
    on first use.
    """
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting catalog API",
        environment=settings.environment,
        port=settings.port,
        catalog_source=settings.catalog_source,
    )

    try:
        get_catalog_repository().load()
    except CatalogLoadError as e:
        logger.warning("Catalog not loaded at startup", error=str(e))

    yield

    logger.info("Shutting down catalog API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Storefront Catalog API",
        description="""
        Product catalog for the storefront: tagging, collections and faceted filtering.

        ## Main Endpoints

        - `/api/catalog/products` - Full catalog
        - `/api/catalog/product?slug=` - Single product
        - `/api/catalog/category?slug=&limit=` - Category listing
        - `/api/catalog/collections/{slug}` - Collection with products
        - `/api/catalog/search` - Filtered listing with facet options

        ## Health Checks

        - `/health`, `/health/detailed`, `/ready`, `/live`
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (last added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestTracingMiddleware)

    # =========================================================================
    # Error Handlers
    # =========================================================================

    @app.exception_handler(CatalogLoadError)
    async def catalog_unavailable(request: Request, exc: CatalogLoadError) -> JSONResponse:
        logger.error("Catalog unavailable", error=str(exc))
        return JSONResponse({"error": "Catalog unavailable"}, status_code=503)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.catalog import router as catalog_router
    app.include_router(catalog_router)

    return app


# Default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()
