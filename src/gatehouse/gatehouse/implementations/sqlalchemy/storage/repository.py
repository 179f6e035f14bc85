# ABOUTME: SQLAlchemy Core implementation of AbstractRepository bound to one unit of work
# ABOUTME: Maps entities to rows and database errors to ConflictError or PersistenceError

import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from gatehouse.exceptions import ConflictError, DataIntegrityException, PersistenceError
from gatehouse.interfaces.storage.repository import AbstractRepository, E
from gatehouse.models.types import EntityPatch

from .schema import ENTITY_TABLES, NATURAL_KEY_COLUMNS

if TYPE_CHECKING:
    from .unit_of_work import SqlAlchemyUnitOfWork


class SqlAlchemyRepository(AbstractRepository[E]):
    """
    Repository for one entity type executing on the unit of work's connection.

    Every statement is awaited on the unit's async connection inside its
    transaction. Natural-key uniqueness is enforced by the table's unique
    constraint, so concurrent units racing on the same key are arbitrated by
    the database.
    """

    def __init__(self, uow: "SqlAlchemyUnitOfWork", entity_type: Type[E], max_list_limit: int = 100):
        super().__init__(max_list_limit=max_list_limit)
        self.entity_type = entity_type
        self.table = ENTITY_TABLES[entity_type]
        self._natural_key_column = self.table.c[NATURAL_KEY_COLUMNS[entity_type]]
        self._uow = uow

    @property
    def _connection(self) -> AsyncConnection:
        self._uow.ensure_active()
        return self._uow.connection

    async def _execute(self, statement: Any, entity: Optional[E] = None):
        try:
            return await self._connection.execute(statement)
        except IntegrityError as e:
            raise self._integrity_error(e, entity) from e
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"{self.entity_type.__name__} storage operation failed",
                code="PERSISTENCE_ERROR",
                details={"error": str(e.orig) if getattr(e, "orig", None) is not None else str(e)},
            ) from e

    def _integrity_error(self, error: IntegrityError, entity: Optional[E]) -> DataIntegrityException:
        message = str(error.orig)
        if "UNIQUE" in message.upper():
            key = entity.natural_key if entity is not None else None
            return ConflictError(
                f"{self.entity_type.__name__} with key '{key}' already exists",
                code="NATURAL_KEY_CONFLICT",
                details={"entity": self.entity_type.__name__, "key": key},
            )
        return DataIntegrityException(
            f"{self.entity_type.__name__} violates a storage constraint",
            code="INTEGRITY_ERROR",
            details={"error": message},
        )

    def _to_row(self, entity: E) -> Dict[str, Any]:
        data = entity.model_dump(mode="json")
        if "scopes" in data:
            data["scopes"] = sorted(data["scopes"])
        return {name: value for name, value in data.items() if name in self.table.c}

    def _from_row(self, row) -> E:
        data = {key: value for key, value in row._mapping.items() if key != "seq"}
        return self.entity_type.model_validate(data)

    async def create(self, entity: E) -> E:
        stored = entity.model_copy(update={"id": uuid.uuid4().hex})
        await self._execute(insert(self.table).values(**self._to_row(stored)), stored)
        return stored

    async def get_by_id(self, entity_id: str) -> Optional[E]:
        row = (await self._execute(select(self.table).where(self.table.c.id == entity_id))).first()
        return self._from_row(row) if row is not None else None

    async def get_by_natural_key(self, key: str) -> Optional[E]:
        row = (await self._execute(select(self.table).where(self._natural_key_column == key))).first()
        return self._from_row(row) if row is not None else None

    async def update(self, entity_id: str, patch: EntityPatch) -> Optional[E]:
        current = await self.get_by_id(entity_id)
        if current is None:
            return None

        updated = current.apply_patch(patch)
        values = self._to_row(updated)
        values.pop("id", None)
        values.pop("created_at", None)
        await self._execute(update(self.table).where(self.table.c.id == entity_id).values(**values), updated)
        return updated

    async def delete(self, entity_id: str) -> bool:
        result = await self._execute(delete(self.table).where(self.table.c.id == entity_id))
        return result.rowcount > 0

    async def list(self, offset: int = 0, limit: Optional[int] = None) -> List[E]:
        offset, limit = self._page_bounds(offset, limit)
        statement = select(self.table).order_by(self.table.c.seq).offset(offset).limit(limit)
        return [self._from_row(row) for row in await self._execute(statement)]

    async def count(self) -> int:
        result = await self._execute(select(func.count()).select_from(self.table))
        return result.scalar_one()
