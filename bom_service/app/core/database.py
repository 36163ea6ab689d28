from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from bom_service.app.core.settings import get_settings
from bom_service.app.models.base import BomServiceBase

from ..utils.logging import setup_bom_logging as setup_logging

logger = setup_logging("bom_service.database", log_level=get_settings().LOG_LEVEL)


def _mask_url(database_url: str) -> str:
    if "@" not in database_url:
        return database_url
    scheme, _, rest = database_url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class BomServiceDatabaseManager:
    """Engine and session factory shared by every request of the BOM Service."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        settings = get_settings()
        self.database_url = database_url
        self.is_sqlite = database_url.startswith("sqlite")
        self.is_postgresql = database_url.startswith("postgresql")

        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}

        if self.is_sqlite:
            engine_kwargs["poolclass"] = NullPool
            engine_kwargs["connect_args"] = {"timeout": 60}
            pool_info: Dict[str, Any] = {"database_type": "sqlite"}
        else:
            engine_kwargs.update(
                {
                    "pool_size": settings.DATABASE_POOL_SIZE,
                    "max_overflow": settings.DATABASE_MAX_OVERFLOW,
                    "pool_timeout": 45,
                    "pool_recycle": 3600,
                    "pool_pre_ping": True,
                }
            )
            pool_info = {
                "database_type": "postgresql",
                "pool_size": settings.DATABASE_POOL_SIZE,
                "max_overflow": settings.DATABASE_MAX_OVERFLOW,
            }

        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(
                self.async_engine.sync_engine, "connect", _enable_sqlite_foreign_keys
            )
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "BOM Service database manager initialized",
            extra={
                "operation": "database_manager_init",
                "database_url": _mask_url(database_url),
                "echo": echo,
                "event_type": "database_manager_ready",
                **pool_info,
            },
        )

    async def create_tables(self) -> None:
        """Create all BOM Service tables, partial unique indexes included."""

        async with self.async_engine.begin() as conn:
            await conn.run_sync(BomServiceBase.metadata.create_all, checkfirst=True)
        logger.info(
            "Database tables created successfully",
            extra={
                "operation": "create_tables",
                "event_type": "database_tables_created",
            },
        )

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        """Dispose of the engine and every pooled connection."""

        logger.info(
            "Closing BOM Service database connections",
            extra={"operation": "database_close", "event_type": "database_shutdown"},
        )
        await self.async_engine.dispose()


settings = get_settings()
if not settings.BOM_DATABASE_URL:
    error_msg = "BOM_DATABASE_URL is required for BOM Service but not configured"
    logger.error(
        error_msg,
        extra={
            "operation": "global_database_init",
            "database_configured": False,
            "event_type": "database_config_missing",
        },
    )
    raise ValueError(error_msg)

database_manager = BomServiceDatabaseManager(
    database_url=settings.BOM_DATABASE_URL, echo=settings.DEBUG
)


def get_database_manager() -> BomServiceDatabaseManager:
    """Return the process-wide manager; looked up at call time so it can be swapped."""
    return database_manager


def set_database_manager(manager: BomServiceDatabaseManager) -> None:
    global database_manager
    database_manager = manager
