# ABOUTME: Abstract guard interface for the request pipeline
# ABOUTME: Every guard (rate limit, authentication, scope check) inherits from AbstractMiddleware

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from gatehouse.models.middleware.priority import GuardPriority

if TYPE_CHECKING:
    from gatehouse.models.middleware.context import RequestContext
    from gatehouse.models.middleware.result import MiddlewareResult


class AbstractMiddleware(ABC):
    """
    Abstract base class for request guards.

    A guard inspects the `RequestContext`, may enrich it (for example by
    setting the principal), and returns a `MiddlewareResult`. A failed result
    stops the pipeline.
    """

    def __init__(self, priority: GuardPriority | int = GuardPriority.NORMAL):
        """
        Args:
            priority: Execution order. Lower values run first.
        """
        self.priority = priority

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def process(self, context: "RequestContext") -> "MiddlewareResult":
        """
        Run the guard against ``context``.

        Args:
            context: Per-request state shared with the other guards.

        Returns:
            MiddlewareResult: Passed, or failed with the boundary status code
            (401, 403, 429...) and error details.
        """
        pass

    def can_process(self, context: "RequestContext") -> bool:
        """
        Whether the guard applies to ``context``. Guards that do not apply are
        recorded as skipped.
        """
        return True

    def __lt__(self, other: "AbstractMiddleware") -> bool:
        return self.priority < other.priority

    def __le__(self, other: "AbstractMiddleware") -> bool:
        return self.priority <= other.priority

    def __gt__(self, other: "AbstractMiddleware") -> bool:
        return self.priority > other.priority

    def __ge__(self, other: "AbstractMiddleware") -> bool:
        return self.priority >= other.priority

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(priority={self._get_priority_name()})"

    def _get_priority_name(self) -> str:
        try:
            return GuardPriority(self.priority).name
        except ValueError:
            return str(int(self.priority))
