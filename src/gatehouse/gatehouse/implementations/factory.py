# ABOUTME: Factories wiring concrete implementations from settings
# ABOUTME: Selects the storage backend from DATABASE_URL and builds the token service

from typing import Optional

from gatehouse.config.security import SecuritySettings
from gatehouse.config.storage import StorageSettings
from gatehouse.interfaces.auth import AbstractRevocationStore
from gatehouse.interfaces.storage import AbstractDataStore
from gatehouse.models.types import Clock

from .jwt import JwtTokenService
from .memory.storage import InMemoryDataStore
from .sqlalchemy import SqlAlchemyDataStore


def create_data_store(settings: StorageSettings) -> AbstractDataStore:
    """
    ``memory://`` gives an `InMemoryDataStore`; any other URL a `SqlAlchemyDataStore`.

    Call ``initialize()`` on the result before the first unit of work.
    """
    if settings.uses_memory_backend:
        return InMemoryDataStore.from_settings(settings)
    return SqlAlchemyDataStore.from_settings(settings)


def create_token_service(
    settings: SecuritySettings,
    clock: Optional[Clock] = None,
    revocation_store: Optional[AbstractRevocationStore] = None,
) -> JwtTokenService:
    return JwtTokenService.from_settings(settings, clock=clock, revocation_store=revocation_store)
