# ABOUTME: Abstract authenticator interface for establishing the principal behind a request
# ABOUTME: Defines the contract for components that extract and validate request credentials

from abc import ABC, abstractmethod

from gatehouse.models.auth.auth_request import AuthRequest
from gatehouse.models.auth.principal import Principal


class AbstractAuthenticator(ABC):
    """
    Abstract authenticator for incoming requests.

    Extracts the credential from an `AuthRequest` (e.g. the ``Authorization``
    header) and delegates its verification to an `AbstractTokenValidator`.
    """

    @abstractmethod
    async def authenticate(self, request: AuthRequest) -> Principal:
        """
        Authenticates an incoming request and returns its principal.

        Args:
            request (AuthRequest): The incoming request.

        Returns:
            Principal: The authenticated caller.

        Raises:
            MissingCredentialsError: If the request carries no bearer credential.
            AuthenticationException: Any token validation failure, unchanged.
        """
        pass
