# ABOUTME: Abstract token issuer interface for creating signed bearer tokens
# ABOUTME: Defines the contract for stateless issuance from a principal identity and granted scopes

from abc import ABC, abstractmethod
from typing import Iterable


class AbstractTokenIssuer(ABC):
    """
    Abstract issuer of bearer tokens.

    Issuance is stateless: the token carries everything a validator needs,
    and nothing is stored server-side. Checking that the requested scopes are
    a subset of what the principal is entitled to is the caller's job (the
    login step that produced ``principal_id``).
    """

    @abstractmethod
    def issue(self, principal_id: str, scopes: Iterable[str], lifetime: float | None = None) -> str:
        """
        Creates a signed token for ``principal_id`` carrying ``scopes``.

        The token's ``iat`` is the current time and ``exp`` is ``iat + lifetime``.

        Args:
            principal_id (str): Stable, non-empty identifier of the principal.
            scopes (Iterable[str]): Scopes granted to the token.
            lifetime (float | None): Validity in seconds. ``None`` uses the
                                     configured default lifetime.

        Returns:
            str: The encoded token, three ``.``-separated base64url segments.

        Raises:
            ValidationException: If ``principal_id`` is empty or ``lifetime`` is not positive.
            SigningError: If no signing secret is available.
        """
        pass
