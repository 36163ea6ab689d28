from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bom_service.app.api.v1.auth import router as auth_router
from bom_service.app.api.v1.categories import router as category_router
from bom_service.app.api.v1.health import router as health_router
from bom_service.app.api.v1.manufacturers import router as manufacturer_router
from bom_service.app.api.v1.parts import router as part_router
from bom_service.app.api.v1.projects import router as project_router
from bom_service.app.api.v1.suppliers import router as supplier_router
from bom_service.app.core.database import get_database_manager
from bom_service.app.core.settings import get_settings
from bom_service.app.middleware.auth.auth_middleware import (
    setup_bom_auth_middleware,
)
from bom_service.app.middleware.error.error_handler import setup_bom_error_handling
from bom_service.app.utils.logging import setup_bom_logging

settings = get_settings()
environment = settings.ENVIRONMENT.lower()
enable_file_logging = environment in ["production", "staging"]

logger = setup_bom_logging(
    "bom_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=enable_file_logging,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown."""

    try:
        await _initialize_services()
    except Exception as e:
        logger.error(
            "Failed to start BOM service",
            exc_info=True,
            extra={"error_type": type(e).__name__},
        )
        raise

    yield
    await _shutdown_services()


async def _initialize_services() -> None:
    """Initialize all application services during startup."""

    logger.info(
        "Starting BOM service initialization",
        extra={
            "environment": environment,
            "debug_mode": settings.DEBUG,
            "file_logging_enabled": enable_file_logging,
            "service_version": settings.APP_VERSION,
        },
    )

    await get_database_manager().create_tables()
    logger.info("BOM service started successfully")


async def _shutdown_services() -> None:
    """Shutdown all application services gracefully."""

    logger.info("Starting BOM service shutdown")
    await get_database_manager().close()
    logger.info("BOM service shutdown completed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    _setup_middleware(app)
    _setup_cors(app)
    _setup_routers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    """Configure all middleware components with detailed logging."""

    logger.info(
        "Configuring FastAPI application",
        extra={
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "debug_mode": settings.DEBUG,
            "docs_enabled": settings.DEBUG,
        },
    )

    setup_bom_auth_middleware(app)
    setup_bom_error_handling(app)


def _setup_cors(app: FastAPI) -> None:
    """Configure CORS settings with logging."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )

    logger.info(
        "CORS middleware configured",
        extra={
            "allowed_origins": len(settings.CORS_ORIGINS),
            "credentials_allowed": settings.CORS_CREDENTIALS,
        },
    )


def _setup_routers(app: FastAPI) -> None:
    """Configure all application routers with detailed logging."""

    routers_info: list[dict[str, Any]] = []

    app.include_router(health_router, tags=["Health"])
    routers_info.append({"router": "health", "prefix": "", "tags": ["Health"]})

    for name, router, tag in (
        ("auth", auth_router, "Authentication"),
        ("category", category_router, "Categories"),
        ("manufacturer", manufacturer_router, "Manufacturers"),
        ("supplier", supplier_router, "Suppliers"),
        ("part", part_router, "Parts"),
        ("project", project_router, "Projects"),
    ):
        app.include_router(router, prefix="/api/v1", tags=[tag])
        routers_info.append({"router": name, "prefix": "/api/v1", "tags": [tag]})

    logger.info(
        "API routes configured",
        extra={"total_routers": len(routers_info), "routers": routers_info},
    )


app = create_app()
