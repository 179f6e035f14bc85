# ABOUTME: Abstract revocation store interface for the opt-in token revocation extension
# ABOUTME: Defines the contract for recording token ids that must be rejected before they expire

from abc import ABC, abstractmethod


class AbstractRevocationStore(ABC):
    """
    Abstract store of revoked token ids.

    Tokens are stateless and expire by time; a revocation store is the
    explicit extension that lets a deployment cut a token short (logout,
    compromise). Entries are only needed until the token's own expiry.
    """

    @abstractmethod
    def revoke(self, token_id: str, expires_at: float) -> None:
        """
        Records ``token_id`` as revoked until ``expires_at``.

        Args:
            token_id (str): The ``jti`` claim of the token.
            expires_at (float): The token's ``exp``; the entry may be dropped after it.
        """
        pass

    @abstractmethod
    def is_revoked(self, token_id: str) -> bool:
        """
        Returns whether ``token_id`` has been revoked.
        """
        pass

    @abstractmethod
    def purge_expired(self) -> int:
        """
        Drops entries whose token has expired anyway.

        Returns:
            int: Number of entries removed.
        """
        pass
