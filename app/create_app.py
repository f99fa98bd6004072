"""
FastAPI application factory following kkb_fastapi pattern.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import calculations_router, reports_router, validations_router
from app.core.config import get_config
from app.database.base import get_db_url, get_engine_kw
from app.database.session_manager.db_session import Database

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config) -> None:
    """Configure root logging from the [logging] section."""
    level = config.data.get("logging", {}).get("level", "INFO")
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def register_routers(app: FastAPI):
    """Register all API routers."""
    app.include_router(calculations_router)
    app.include_router(validations_router)
    app.include_router(reports_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Handles database initialization and cleanup.
    """
    logging.info("Application startup")
    async_db_url = get_db_url(app.state.config)

    Database.init(async_db_url, engine_kw=get_engine_kw(async_db_url))
    logging.info("Initialized database")

    try:
        yield
    finally:
        await Database.dispose()
        logging.info("Application shutdown")


def get_app(config_file: str) -> FastAPI:
    """
    Application factory function.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Configured FastAPI application instance
    """
    config = get_config(config_file)
    configure_logging(config)

    app = FastAPI(
        title=config.data.get("api", {}).get("title", "CBAM Emissions Engine API"),
        description=config.data.get("api", {}).get(
            "description",
            "Embedded emissions calculation, validation and CBAM XML reporting",
        ),
        version=config.data.get("api", {}).get("version", "1.0.0"),
        debug=config.data.get("api", {}).get("debug", False),
        lifespan=lifespan,
        # Generate better OpenAPI schema for enums
        generate_unique_id_function=lambda route: (
            f"{route.tags[0]}-{route.name}" if route.tags else route.name
        ),
    )

    app.state.config = config

    # Register routers
    register_routers(app)

    # Set up CORS middleware
    origins = [
        "http://localhost:3000",  # For local development
        "http://127.0.0.1:3000",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
