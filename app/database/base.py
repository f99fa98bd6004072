"""
Database base configuration following kkb_fastapi pattern.

Handles async engine creation and Alembic migrations.
"""
import asyncio
import contextlib
import functools
import logging
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config as alembic_config
from sqlalchemy import text
from sqlalchemy.engine.url import URL
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.core.config import Config

DEFAULT_DRIVERNAME = "postgresql+asyncpg"

engine_kw = {
    "pool_pre_ping": True,
    # feature will normally emit SQL equivalent to "SELECT 1" each time a connection is checked out from the pool
    "pool_size": 2,  # number of connections to keep open at a time
    "max_overflow": 4,  # number of connections to allow to be opened above pool_size
    "connect_args": {
        "prepared_statement_cache_size": 0,  # disable prepared statement cache
        "statement_cache_size": 0,  # disable statement cache
    },
}


def get_db_url(config: Config) -> URL:
    """
    Construct database URL from config.
    """
    config_db = dict(config.data["db"])
    drivername = config_db.pop("drivername", DEFAULT_DRIVERNAME)
    return URL.create(drivername=drivername, **config_db)


def get_engine_kw(async_db_url: URL) -> dict[str, Any]:
    """
    Engine keyword arguments suited to the database backend.

    The asyncpg pool settings do not apply to SQLite, which is used for tests.
    """
    if async_db_url.get_backend_name() == "sqlite":
        return {}
    return engine_kw


def get_async_engine(async_db_url: URL) -> AsyncEngine:
    """
    Create async database engine with connection pooling.
    """
    if async_db_url.get_backend_name() == "sqlite":
        return create_async_engine(async_db_url)

    async_engine = create_async_engine(
        async_db_url,
        pool_recycle=3600,
        pool_pre_ping=True,
        pool_size=60,
        max_overflow=80,
        pool_timeout=30,
    )
    return async_engine


async def create_database(config: Config) -> bool:
    """
    Ensures the database specified in the config exists.
    Connects to a maintenance database (e.g., 'postgres') to issue the CREATE DATABASE command.

    Args:
        config: The application configuration.

    Returns:
        True if the database was newly created by this function.
        False if the database already existed or the backend creates it implicitly.

    Raises:
        ValueError: If the database name is missing in the configuration.
    """
    db_params = dict(config.data["db"])
    drivername = db_params.pop("drivername", DEFAULT_DRIVERNAME)
    target_database_name = db_params.pop("database", None)

    if not target_database_name:
        logging.error("Database name not found in configuration for creation.")
        raise ValueError("Database name missing in configuration for creation.")

    if not drivername.startswith("postgresql"):
        # SQLite creates the database file on first connect
        return False

    logging.info("Creating database...")
    maintenance_url = URL.create(
        drivername=drivername, **{**db_params, "database": "postgres"}
    )
    maintenance_engine = get_async_engine(maintenance_url)
    try:
        logging.info(
            f"Attempting to create database '{target_database_name}' in {db_params.get('host')} if it does not exist."
        )
        async with maintenance_engine.connect() as connection:
            # CREATE DATABASE cannot run inside a transaction block
            autocommit_connection = await connection.execution_options(
                isolation_level="AUTOCOMMIT"
            )
            await autocommit_connection.execute(
                text(f'CREATE DATABASE "{target_database_name}"')
            )
        logging.info(f"Database '{target_database_name}' created successfully.")
        return True
    except DBAPIError as e:
        # PostgreSQL duplicate_database
        with contextlib.suppress(AttributeError):
            if getattr(e.orig, "pgcode", None) == "42P04":
                logging.warning(
                    f"Database '{target_database_name}' already exists. No action taken."
                )
                return False

        logging.error(
            f"A DBAPIError occurred while trying to create database '{target_database_name}': {e}"
        )
        raise
    finally:
        await maintenance_engine.dispose()


async def apply_db_migration(config: Config):
    """
    Apply Alembic migrations up to head.

    Blocks until all migrations are complete so the schema is consistent
    before anything reads or writes.

    Args:
        config: The application configuration containing database connection details.
    """
    await create_database(config)

    alembic_cfg = alembic_config(str(Path.cwd() / "alembic.ini"))
    alembic_cfg.set_main_option(
        "script_location", str(Path.cwd() / "alembic_migrations")
    )

    # Alembic runs with a synchronous driver
    async_url = get_db_url(config)
    sync_url = async_url.set(
        drivername=async_url.drivername.replace("+asyncpg", "").replace("+aiosqlite", "")
    )
    alembic_cfg.set_main_option(
        "sqlalchemy.url", sync_url.render_as_string(hide_password=False)
    )

    logging.info("Starting database migrations...")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, functools.partial(command.upgrade, alembic_cfg, "head")
    )
    logging.info("Database migration completed successfully")
