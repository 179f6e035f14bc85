# ABOUTME: Memory-based storage implementations package
# ABOUTME: Provides the in-memory data store, unit of work and repository

from .repository import InMemoryRepository
from .unit_of_work import InMemoryUnitOfWork
from .data_store import InMemoryDataStore

__all__ = ["InMemoryDataStore", "InMemoryUnitOfWork", "InMemoryRepository"]
