# ABOUTME: Abstract repository interface for persisted aggregate entities
# ABOUTME: Defines CRUD plus bounded listing with natural-key uniqueness for one aggregate type

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from gatehouse.models.account.entity import Entity
from gatehouse.models.types import EntityPatch

E = TypeVar("E", bound=Entity)


class AbstractRepository(ABC, Generic[E]):
    """
    [L0] Abstract repository for one aggregate type.

    Repositories are only handed out by an active `AbstractUnitOfWork`; every
    call is part of that unit and becomes durable only when it commits.
    Reads see the unit's own pending writes.

    Architecture note: implementations may back this with any store as long
    as natural-key uniqueness holds across concurrent units of work and the
    unit's writes are applied all-or-nothing.
    """

    def __init__(self, max_list_limit: int = 100):
        self.max_list_limit = max_list_limit

    @abstractmethod
    async def create(self, entity: E) -> E:
        """Persist a new entity and assign its identifier.

        Args:
            entity (E): The entity to store. Its ``id`` is ignored.

        Returns:
            E: The stored entity carrying its assigned ``id``.

        Raises:
            ConflictError: If another entity (committed, or pending in another
                           unit of work) already holds the same natural key.
            PersistenceError: If the storage backend fails.
        """
        pass

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> Optional[E]:
        """Return the entity with ``entity_id``, or None."""
        pass

    @abstractmethod
    async def get_by_natural_key(self, key: str) -> Optional[E]:
        """Return the entity holding natural key ``key``, or None."""
        pass

    @abstractmethod
    async def update(self, entity_id: str, patch: EntityPatch) -> Optional[E]:
        """Apply ``patch`` to the entity with ``entity_id``.

        Args:
            entity_id (str): Identifier of the entity to change.
            patch (EntityPatch): Field names mapped to new values. ``id`` and
                                 ``created_at`` cannot be patched.

        Returns:
            Optional[E]: The updated entity, or None if it does not exist.

        Raises:
            ConflictError: If the patch moves the entity onto a natural key already taken.
            ValidationException: If the patched entity fails model validation.
        """
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Delete the entity with ``entity_id``. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def list(self, offset: int = 0, limit: Optional[int] = None) -> list[E]:
        """Return one page of entities ordered by creation.

        Args:
            offset (int): Number of entities to skip, >= 0.
            limit (Optional[int]): Page size, >= 1. Capped at ``max_list_limit``;
                                   None means ``max_list_limit``.

        Raises:
            ValueError: If ``offset`` or ``limit`` is out of range.
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of entities visible to the unit of work."""
        pass

    def _page_bounds(self, offset: int, limit: Optional[int]) -> tuple[int, int]:
        if offset < 0:
            raise ValueError("offset must be >= 0")
        if limit is None:
            return offset, self.max_list_limit
        if limit < 1:
            raise ValueError("limit must be >= 1")
        return offset, min(limit, self.max_list_limit)
