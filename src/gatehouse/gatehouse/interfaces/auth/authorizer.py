# ABOUTME: Abstract scope authorizer interface for checking a principal against required scopes
# ABOUTME: Defines the contract used before any operation that needs specific permissions

from abc import ABC, abstractmethod
from typing import Iterable

from gatehouse.exceptions import InsufficientScopeError
from gatehouse.models.auth.principal import Principal


class AbstractScopeAuthorizer(ABC):
    """
    Abstract authorizer deciding whether a principal may perform an operation.
    """

    @abstractmethod
    def authorize(self, principal: Principal, required_scopes: Iterable[str]) -> None:
        """
        Checks that ``principal`` holds every scope in ``required_scopes``.

        Args:
            principal (Principal): The authenticated caller.
            required_scopes (Iterable[str]): Scopes the operation needs. Order
                                             is irrelevant; an empty collection
                                             always passes.

        Returns:
            None: This method does not return a value; it raises an exception on failure.

        Raises:
            InsufficientScopeError: Naming the scopes the principal is missing.
        """
        pass

    def has_scopes(self, principal: Principal, required_scopes: Iterable[str]) -> bool:
        """Non-raising variant of ``authorize``."""
        try:
            self.authorize(principal, required_scopes)
            return True
        except InsufficientScopeError:
            return False
