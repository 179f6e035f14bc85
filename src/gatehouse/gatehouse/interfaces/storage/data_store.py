# ABOUTME: Abstract data store interface handing out units of work
# ABOUTME: One store per storage backend; services depend on it to open a transaction per operation

from abc import ABC, abstractmethod

from gatehouse.interfaces.storage.unit_of_work import AbstractUnitOfWork


class AbstractDataStore(ABC):
    """
    [L0] Entry point to a storage backend.

    Domain services receive a data store through their constructor and open
    a fresh unit of work for every operation.
    """

    @abstractmethod
    def unit_of_work(self) -> AbstractUnitOfWork:
        """Return a new, not yet started unit of work."""
        pass

    async def initialize(self) -> None:
        """Prepare the backend (create tables...). Idempotent."""
        return None

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources. Units of work cannot be opened afterwards."""
        pass
