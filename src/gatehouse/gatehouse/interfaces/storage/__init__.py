# ABOUTME: Storage interfaces package exports
# ABOUTME: Exports abstract repository, unit of work and data store

from .repository import AbstractRepository
from .unit_of_work import AbstractUnitOfWork, UnitOfWorkState
from .data_store import AbstractDataStore

__all__ = [
    "AbstractRepository",
    "AbstractUnitOfWork",
    "UnitOfWorkState",
    "AbstractDataStore",
]
