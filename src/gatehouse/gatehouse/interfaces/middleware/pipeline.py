# ABOUTME: Abstract request pipeline interface for managing guard chains
# ABOUTME: Defines the contract for pipelines that run guards in priority order

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gatehouse.models.middleware.context import RequestContext
    from gatehouse.models.middleware.result import PipelineResult
    from .middleware import AbstractMiddleware


class AbstractMiddlewarePipeline(ABC):
    """
    Abstract base class for request pipelines.

    Guards run in ascending priority; the first failed guard stops the chain
    and its result becomes the pipeline's ``failure``.
    """

    @abstractmethod
    async def add_middleware(self, middleware: "AbstractMiddleware") -> None:
        """
        Insert ``middleware`` according to its priority.
        """
        pass

    @abstractmethod
    async def remove_middleware(self, middleware: "AbstractMiddleware") -> None:
        """
        Remove ``middleware`` from the pipeline.

        Raises:
            ValueError: If the middleware is not in the pipeline.
        """
        pass

    @abstractmethod
    async def execute(self, context: "RequestContext") -> "PipelineResult":
        """
        Run every applicable guard against ``context``.

        Args:
            context: Per-request state; guards may enrich it.

        Returns:
            PipelineResult: ``allowed`` is True when no guard rejected the request;
            otherwise ``failure`` holds the rejecting guard's result.
        """
        pass

    @abstractmethod
    async def get_middleware_count(self) -> int:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    @abstractmethod
    async def get_middleware_by_priority(self) -> list["AbstractMiddleware"]:
        """
        Returns:
            list[AbstractMiddleware]: Guards in execution order.
        """
        pass
