# ABOUTME: In-memory unit of work staging writes until commit
# ABOUTME: Tracks the natural keys the unit claimed or released so the store can arbitrate between units

import uuid
from typing import TYPE_CHECKING, Dict, Optional, Set, Tuple, Type, TypeVar

from gatehouse.exceptions import ConflictError, StorageError
from gatehouse.interfaces.storage import AbstractUnitOfWork
from gatehouse.models.account.entity import Entity

from .repository import InMemoryRepository

if TYPE_CHECKING:
    from .data_store import InMemoryDataStore

E = TypeVar("E", bound=Entity)
ReservationKey = Tuple[Type[Entity], str]


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Unit of work over an `InMemoryDataStore`.

    Writes are staged per entity type as ``id -> entity`` (``None`` marks a
    deletion) and published by the store in one step on commit. Rollback
    drops the staged writes and frees every natural key the unit claimed.
    """

    def __init__(self, store: "InMemoryDataStore"):
        super().__init__()
        self.id = uuid.uuid4().hex
        self._store = store
        self._staged: Dict[Type[Entity], Dict[str, Optional[Entity]]] = {}
        self._reserved: Set[ReservationKey] = set()
        self._released: Set[ReservationKey] = set()
        self._repositories: Dict[Type[Entity], InMemoryRepository] = {}

    @property
    def store(self) -> "InMemoryDataStore":
        return self._store

    async def _begin(self) -> None:
        self._store.ensure_open()

    async def _commit(self) -> None:
        self._store.apply(self.id, self._staged, self._reserved)
        self._reserved.clear()

    async def _rollback(self) -> None:
        self._store.release(self._reserved, self.id)
        self._reserved.clear()
        self._released.clear()
        self._staged.clear()

    def _repository(self, entity_type: Type[E]) -> InMemoryRepository[E]:
        if not self._store.supports(entity_type):
            raise StorageError(
                f"{entity_type.__name__} is not stored by this data store",
                code="UNKNOWN_ENTITY_TYPE",
            )
        repository = self._repositories.get(entity_type)
        if repository is None:
            repository = InMemoryRepository(self, entity_type, max_list_limit=self._store.max_list_limit)
            self._repositories[entity_type] = repository
        return repository

    def staged(self, entity_type: Type[Entity]) -> Dict[str, Optional[Entity]]:
        return self._staged.setdefault(entity_type, {})

    def claim_key(self, entity_type: Type[Entity], key: str) -> None:
        """
        Reserve natural key ``key`` for this unit.

        Raises:
            ConflictError: If the key is committed to another entity or claimed by another unit.
        """
        if not self._store.try_reserve(entity_type, key, self.id, self._released):
            raise ConflictError(
                f"{entity_type.__name__} with key '{key}' already exists",
                code="NATURAL_KEY_CONFLICT",
                details={"entity": entity_type.__name__, "key": key},
            )
        self._reserved.add((entity_type, key))

    def release_key(self, entity_type: Type[Entity], key: str) -> None:
        """Give up ``key``: drop our own claim, or mark a committed key as freed by this unit."""
        reservation = (entity_type, key)
        if reservation in self._reserved and self._store.committed_id_for_key(entity_type, key) is None:
            self._store.release([reservation], self.id)
            self._reserved.discard(reservation)
        else:
            self._released.add(reservation)
