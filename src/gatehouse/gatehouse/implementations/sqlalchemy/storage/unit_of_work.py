# ABOUTME: SQLAlchemy unit of work wrapping one connection and one database transaction
# ABOUTME: Commit maps constraint violations to ConflictError and backend failures to PersistenceError

from typing import TYPE_CHECKING, Dict, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncTransaction

from gatehouse.exceptions import ConflictError, PersistenceError, StorageError
from gatehouse.interfaces.storage import AbstractUnitOfWork
from gatehouse.models.account.entity import Entity

from .repository import SqlAlchemyRepository
from .schema import ENTITY_TABLES

if TYPE_CHECKING:
    from .data_store import SqlAlchemyDataStore

E = TypeVar("E", bound=Entity)


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Unit of work mapped onto a database transaction.

    An async connection is checked out on ``begin`` and returned to the pool
    when the unit commits or rolls back.
    """

    def __init__(self, store: "SqlAlchemyDataStore"):
        super().__init__()
        self._store = store
        self._connection: Optional[AsyncConnection] = None
        self._transaction: Optional[AsyncTransaction] = None
        self._repositories: Dict[Type[Entity], SqlAlchemyRepository] = {}

    @property
    def connection(self) -> AsyncConnection:
        if self._connection is None:
            raise StorageError("Unit of work has no open connection", code="UOW_NOT_ACTIVE")
        return self._connection

    async def _begin(self) -> None:
        self._store.ensure_open()
        try:
            self._connection = await self._store.engine.connect()
            self._transaction = await self._connection.begin()
        except SQLAlchemyError as e:
            await self._close_connection()
            raise PersistenceError("Could not open a database transaction", code="UOW_BEGIN_FAILED") from e

    async def _commit(self) -> None:
        try:
            await self._transaction.commit()
        except IntegrityError as e:
            raise ConflictError("Commit violates a uniqueness constraint", code="NATURAL_KEY_CONFLICT") from e
        except SQLAlchemyError as e:
            raise PersistenceError("Could not commit the database transaction", code="UOW_COMMIT_FAILED") from e
        await self._close_connection()

    async def _rollback(self) -> None:
        try:
            if self._transaction is not None and self._transaction.is_active:
                await self._transaction.rollback()
        except SQLAlchemyError as e:
            raise PersistenceError("Could not roll back the database transaction", code="UOW_ROLLBACK_FAILED") from e
        finally:
            await self._close_connection()

    async def _close_connection(self) -> None:
        if self._connection is not None:
            await self._connection.close()
        self._connection = None
        self._transaction = None

    def _repository(self, entity_type: Type[E]) -> SqlAlchemyRepository[E]:
        if entity_type not in ENTITY_TABLES:
            raise StorageError(
                f"{entity_type.__name__} is not stored by this data store",
                code="UNKNOWN_ENTITY_TYPE",
            )
        repository = self._repositories.get(entity_type)
        if repository is None:
            repository = SqlAlchemyRepository(self, entity_type, max_list_limit=self._store.max_list_limit)
            self._repositories[entity_type] = repository
        return repository
