# ABOUTME: SQLAlchemy-backed implementations
# ABOUTME: Exports the relational data store

from .storage import SqlAlchemyDataStore

__all__ = ["SqlAlchemyDataStore"]
