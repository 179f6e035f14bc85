# ABOUTME: Abstract unit of work grouping repository mutations into one atomic commit
# ABOUTME: Owns the begin/commit/rollback lifecycle; backends provide the storage-specific steps

from abc import ABC, abstractmethod
from enum import Enum
from types import TracebackType
from typing import Optional, Type, TypeVar

from loguru import logger

from gatehouse.exceptions import CoreException, PersistenceError, StorageError
from gatehouse.interfaces.storage.repository import AbstractRepository
from gatehouse.models.account.entity import Entity

E = TypeVar("E", bound=Entity)


class UnitOfWorkState(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class AbstractUnitOfWork(ABC):
    """
    Groups repository calls that must commit or roll back together.

    Used as an async context manager. Leaving the block without a successful
    ``commit()`` rolls everything back, whether the block raised, was
    cancelled, or simply forgot to commit::

        async with store.unit_of_work() as uow:
            user = await uow.repository(User).create(user)
            await uow.repository(UserProfile).create(UserProfile(user_id=user.id))
            await uow.commit()

    A unit of work is owned by one operation and is single-use.
    """

    def __init__(self) -> None:
        self._state = UnitOfWorkState.NEW
        self._logger = logger.bind(name=f"{__name__}.{type(self).__name__}")

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == UnitOfWorkState.ACTIVE

    async def __aenter__(self) -> "AbstractUnitOfWork":
        await self.begin()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        if self.is_active:
            if exc_type is not None:
                self._logger.debug(f"Rolling back after {exc_type.__name__}")
            await self.rollback()
        return False

    async def begin(self) -> None:
        if self._state != UnitOfWorkState.NEW:
            raise StorageError("Unit of work can only be started once", code="UOW_ALREADY_STARTED")
        try:
            await self._begin()
        except CoreException:
            raise
        except Exception as e:
            raise PersistenceError("Failed to start unit of work", code="UOW_BEGIN_FAILED", details={"error": str(e)}) from e
        self._state = UnitOfWorkState.ACTIVE

    async def commit(self) -> None:
        """
        Make every change of the unit durable, atomically.

        Raises:
            StorageError: If the unit is not active.
            ConflictError: If a uniqueness constraint is violated at commit time.
            PersistenceError: If the backend fails; nothing has been applied.
        """
        self.ensure_active()
        try:
            await self._commit()
        except BaseException:
            await self.rollback()
            raise
        self._state = UnitOfWorkState.COMMITTED

    async def rollback(self) -> None:
        """Discard every change of the unit. A no-op once the unit has finished."""
        if not self.is_active:
            return
        try:
            await self._rollback()
        finally:
            self._state = UnitOfWorkState.ROLLED_BACK

    def repository(self, entity_type: Type[E]) -> AbstractRepository[E]:
        """
        Repository for ``entity_type`` bound to this unit.

        Raises:
            StorageError: If the unit is not active or the type is not stored.
        """
        self.ensure_active()
        return self._repository(entity_type)

    def ensure_active(self) -> None:
        if not self.is_active:
            raise StorageError(
                f"Unit of work is not active (state: {self._state.value})",
                code="UOW_NOT_ACTIVE",
            )

    @abstractmethod
    async def _begin(self) -> None:
        pass

    @abstractmethod
    async def _commit(self) -> None:
        pass

    @abstractmethod
    async def _rollback(self) -> None:
        pass

    @abstractmethod
    def _repository(self, entity_type: Type[E]) -> AbstractRepository[E]:
        pass
