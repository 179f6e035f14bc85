# ABOUTME: In-memory implementation of AbstractDataStore with natural-key reservations
# ABOUTME: Holds committed entities per type and arbitrates natural keys between concurrent units of work

import threading
from typing import Dict, Iterable, List, Optional, Type

from loguru import logger

from gatehouse.config.storage import StorageSettings
from gatehouse.exceptions import ConflictError, StorageError
from gatehouse.interfaces.storage import AbstractDataStore
from gatehouse.models.account import Entity, User, UserProfile

from .unit_of_work import InMemoryUnitOfWork, ReservationKey


class InMemoryDataStore(AbstractDataStore):
    """
    Process-local data store.

    Committed state is one ordered dict per entity type plus a natural-key
    index. Units of work stage their writes privately and publish them in a
    single step on commit.

    Natural-key uniqueness across concurrent units of work is enforced by
    reservations: a unit that creates (or moves an entity onto) a natural
    key claims it with a compare-and-set, and any other unit claiming the
    same key gets ``ConflictError`` until the holder commits or rolls back.
    The store lock is only held for these O(1) steps, never across an
    ``await``.

    Features:
    - Read-your-writes inside a unit of work
    - All-or-nothing commit
    - Insertion-ordered listing
    """

    def __init__(self, entity_types: Iterable[Type[Entity]] = (User, UserProfile), max_list_limit: int = 100):
        """
        Args:
            entity_types: Entity classes this store persists.
            max_list_limit: Upper bound for ``list`` page sizes.
        """
        if max_list_limit < 1:
            raise ValueError("max_list_limit must be >= 1")

        self.max_list_limit = max_list_limit
        self._tables: Dict[Type[Entity], Dict[str, Entity]] = {t: {} for t in entity_types}
        self._natural_index: Dict[Type[Entity], Dict[str, str]] = {t: {} for t in entity_types}
        self._reservations: Dict[ReservationKey, str] = {}

        self._lock = threading.RLock()
        self._closed = False
        self._logger = logger.bind(name=__name__)

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "InMemoryDataStore":
        return cls(max_list_limit=settings.LIST_MAX_LIMIT)

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

    async def close(self) -> None:
        with self._lock:
            self._closed = True
            self._reservations.clear()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def supports(self, entity_type: Type[Entity]) -> bool:
        return entity_type in self._tables

    def ensure_open(self) -> None:
        if self._closed:
            raise StorageError("Data store is closed", code="STORE_CLOSED")

    # Committed state, read under the lock.

    def get_committed(self, entity_type: Type[Entity], entity_id: str) -> Optional[Entity]:
        with self._lock:
            return self._tables[entity_type].get(entity_id)

    def committed_id_for_key(self, entity_type: Type[Entity], key: str) -> Optional[str]:
        with self._lock:
            return self._natural_index[entity_type].get(key)

    def committed_values(self, entity_type: Type[Entity]) -> List[Entity]:
        with self._lock:
            return list(self._tables[entity_type].values())

    def count_committed(self, entity_type: Type[Entity]) -> int:
        with self._lock:
            return len(self._tables[entity_type])

    # Natural-key reservations.

    def try_reserve(self, entity_type: Type[Entity], key: str, owner: str, released: Iterable[ReservationKey]) -> bool:
        """
        Claim ``key`` for unit ``owner``.

        Fails if a committed entity holds the key (unless ``owner`` is about
        to release it) or if another unit has already claimed it.
        """
        reservation = (entity_type, key)
        with self._lock:
            holder_id = self._natural_index[entity_type].get(key)
            if holder_id is not None and reservation not in set(released):
                return False
            holder = self._reservations.get(reservation)
            if holder is not None and holder != owner:
                return False
            self._reservations[reservation] = owner
            return True

    def release(self, reservations: Iterable[ReservationKey], owner: str) -> None:
        with self._lock:
            for reservation in reservations:
                if self._reservations.get(reservation) == owner:
                    del self._reservations[reservation]

    def apply(
        self,
        owner: str,
        staged: Dict[Type[Entity], Dict[str, Optional[Entity]]],
        reservations: Iterable[ReservationKey],
    ) -> None:
        """
        Publish the staged writes of unit ``owner`` atomically and release its reservations.

        Raises:
            ConflictError: If a staged natural key is held by an entity the unit
                           does not replace. Nothing is applied in that case.
        """
        reservations = list(reservations)
        with self._lock:
            self.ensure_open()
            self._check_keys(staged)

            for entity_type, changes in staged.items():
                table = self._tables[entity_type]
                index = self._natural_index[entity_type]
                for entity_id in changes:
                    old = table.get(entity_id)
                    if old is not None and old.natural_key is not None and index.get(old.natural_key) == entity_id:
                        del index[old.natural_key]
                for entity_id, entity in changes.items():
                    if entity is None:
                        table.pop(entity_id, None)
                        continue
                    table[entity_id] = entity
                    if entity.natural_key is not None:
                        index[entity.natural_key] = entity_id

            for reservation in reservations:
                if self._reservations.get(reservation) == owner:
                    del self._reservations[reservation]

        self._logger.debug(f"Unit {owner} committed {sum(len(c) for c in staged.values())} changes")

    def _check_keys(self, staged: Dict[Type[Entity], Dict[str, Optional[Entity]]]) -> None:
        for entity_type, changes in staged.items():
            index = self._natural_index[entity_type]
            for entity_id, entity in changes.items():
                if entity is None or entity.natural_key is None:
                    continue
                holder_id = index.get(entity.natural_key)
                if holder_id is None or holder_id == entity_id:
                    continue
                if holder_id in changes:
                    holder_change = changes[holder_id]
                    if holder_change is None or holder_change.natural_key != entity.natural_key:
                        continue
                raise ConflictError(
                    f"{entity_type.__name__} with key '{entity.natural_key}' already exists",
                    code="NATURAL_KEY_CONFLICT",
                    details={"entity": entity_type.__name__, "key": entity.natural_key},
                )
