# ABOUTME: Abstract token validator interface for verifying presented bearer tokens
# ABOUTME: Defines the contract that turns a token string into a Principal or a specific authentication error

from abc import ABC, abstractmethod

from gatehouse.models.auth.principal import Principal


class AbstractTokenValidator(ABC):
    """
    Abstract validator of bearer tokens.

    Validation is pure: it depends only on the token, the signing secrets and
    the clock, so any number of processes can validate without shared
    session state.
    """

    @abstractmethod
    def validate(self, token: str) -> Principal:
        """
        Verifies ``token`` and extracts its principal.

        Checks run in order and stop at the first failure: structure,
        signature, expiry.

        Args:
            token (str): The encoded token as presented by the caller.

        Returns:
            Principal: Subject and scopes of the verified token.

        Raises:
            MalformedTokenError: If the token is not three decodable segments.
            InvalidSignatureError: If no active signing secret produced the signature.
            ExpiredTokenError: If the current time is past the token's ``exp``.
        """
        pass
