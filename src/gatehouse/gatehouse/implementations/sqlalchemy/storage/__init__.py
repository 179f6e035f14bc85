# ABOUTME: SQLAlchemy storage implementations package
# ABOUTME: Provides the relational data store, unit of work, repository and schema

from .data_store import SqlAlchemyDataStore
from .engine import create_db_engine
from .repository import SqlAlchemyRepository
from .schema import metadata
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = ["SqlAlchemyDataStore", "SqlAlchemyRepository", "SqlAlchemyUnitOfWork", "create_db_engine", "metadata"]
