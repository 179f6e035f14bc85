# ABOUTME: SQLAlchemy implementation of AbstractDataStore
# ABOUTME: Owns the engine, creates the schema and hands out transactional units of work

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from gatehouse.config.storage import StorageSettings
from gatehouse.exceptions import PersistenceError, StorageError
from gatehouse.interfaces.storage import AbstractDataStore

from .engine import create_db_engine
from .schema import metadata
from .unit_of_work import SqlAlchemyUnitOfWork


class SqlAlchemyDataStore(AbstractDataStore):
    """
    Relational data store built on SQLAlchemy Core.

    SQLAlchemy Core (not the ORM) over an async engine is enough here:
    entities are immutable pydantic models and every operation runs in a
    short explicit transaction.
    """

    def __init__(self, engine: AsyncEngine, max_list_limit: int = 100):
        if max_list_limit < 1:
            raise ValueError("max_list_limit must be >= 1")
        self.engine = engine
        self.max_list_limit = max_list_limit
        self._closed = False
        self._logger = logger.bind(name=__name__)

    @classmethod
    def from_url(cls, url: str, echo: bool = False, max_list_limit: int = 100) -> "SqlAlchemyDataStore":
        return cls(create_db_engine(url, echo=echo), max_list_limit=max_list_limit)

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "SqlAlchemyDataStore":
        return cls.from_url(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, max_list_limit=settings.LIST_MAX_LIMIT)

    def ensure_open(self) -> None:
        if self._closed:
            raise StorageError("Data store is closed", code="STORE_CLOSED")

    async def initialize(self) -> None:
        """Create missing tables. Idempotent."""
        self.ensure_open()
        try:
            async with self.engine.begin() as connection:
                await connection.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            raise PersistenceError("Could not initialize the database schema", code="SCHEMA_INIT_FAILED") from e
        self._logger.info(f"Database schema ready on {self.engine.url.render_as_string(hide_password=True)}")

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self)

    async def close(self) -> None:
        self._closed = True
        await self.engine.dispose()
