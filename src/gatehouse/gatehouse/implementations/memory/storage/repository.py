# ABOUTME: In-memory implementation of AbstractRepository bound to one unit of work
# ABOUTME: Merges the unit's staged writes over committed state for read-your-writes

import uuid
from typing import TYPE_CHECKING, List, Optional, Type

from gatehouse.exceptions import ConflictError
from gatehouse.interfaces.storage.repository import AbstractRepository, E
from gatehouse.models.types import EntityPatch

if TYPE_CHECKING:
    from .unit_of_work import InMemoryUnitOfWork


class InMemoryRepository(AbstractRepository[E]):
    """
    Repository view of one entity type inside an `InMemoryUnitOfWork`.

    Nothing is written to the store before the unit commits; reads see
    committed state overlaid with the unit's own pending changes.
    """

    def __init__(self, uow: "InMemoryUnitOfWork", entity_type: Type[E], max_list_limit: int = 100):
        super().__init__(max_list_limit=max_list_limit)
        self.entity_type = entity_type
        self._uow = uow

    def _pending(self):
        self._uow.ensure_active()
        return self._uow.staged(self.entity_type)

    async def create(self, entity: E) -> E:
        pending = self._pending()
        entity_id = uuid.uuid4().hex
        stored = entity.model_copy(update={"id": entity_id})

        if stored.natural_key is not None:
            self._claim(stored.natural_key, entity_id)

        pending[entity_id] = stored
        return stored

    async def get_by_id(self, entity_id: str) -> Optional[E]:
        pending = self._pending()
        if entity_id in pending:
            return pending[entity_id]
        return self._uow.store.get_committed(self.entity_type, entity_id)

    async def get_by_natural_key(self, key: str) -> Optional[E]:
        pending = self._pending()
        for entity in pending.values():
            if entity is not None and entity.natural_key == key:
                return entity

        committed_id = self._uow.store.committed_id_for_key(self.entity_type, key)
        if committed_id is None or committed_id in pending:
            return None
        return self._uow.store.get_committed(self.entity_type, committed_id)

    async def update(self, entity_id: str, patch: EntityPatch) -> Optional[E]:
        current = await self.get_by_id(entity_id)
        if current is None:
            return None

        updated = current.apply_patch(patch)
        if updated.natural_key != current.natural_key:
            if updated.natural_key is not None:
                self._claim(updated.natural_key, entity_id)
            if current.natural_key is not None:
                self._uow.release_key(self.entity_type, current.natural_key)

        self._pending()[entity_id] = updated
        return updated

    async def delete(self, entity_id: str) -> bool:
        current = await self.get_by_id(entity_id)
        if current is None:
            return False

        if current.natural_key is not None:
            self._uow.release_key(self.entity_type, current.natural_key)
        self._pending()[entity_id] = None
        return True

    async def list(self, offset: int = 0, limit: Optional[int] = None) -> List[E]:
        offset, limit = self._page_bounds(offset, limit)
        return self._visible()[offset : offset + limit]

    async def count(self) -> int:
        return len(self._visible())

    def _visible(self) -> List[E]:
        pending = self._pending()
        committed = self._uow.store.committed_values(self.entity_type)
        committed_ids = {entity.id for entity in committed}

        visible = []
        for entity in committed:
            current = pending[entity.id] if entity.id in pending else entity
            if current is not None:
                visible.append(current)
        for entity_id, entity in pending.items():
            if entity_id not in committed_ids and entity is not None:
                visible.append(entity)
        return visible

    def _claim(self, key: str, entity_id: str) -> None:
        for other_id, other in self._pending().items():
            if other_id != entity_id and other is not None and other.natural_key == key:
                raise ConflictError(
                    f"{self.entity_type.__name__} with key '{key}' already exists",
                    code="NATURAL_KEY_CONFLICT",
                    details={"entity": self.entity_type.__name__, "key": key},
                )
        self._uow.claim_key(self.entity_type, key)
