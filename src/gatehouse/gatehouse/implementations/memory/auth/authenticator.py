# ABOUTME: Bearer-token implementation of AbstractAuthenticator
# ABOUTME: Reads the Authorization header of a request and delegates verification to a token validator

from loguru import logger

from gatehouse.exceptions import MissingCredentialsError
from gatehouse.interfaces.auth.authenticator import AbstractAuthenticator
from gatehouse.interfaces.auth.token_validator import AbstractTokenValidator
from gatehouse.models.auth.auth_request import AuthRequest
from gatehouse.models.auth.principal import Principal

from .utils import extract_bearer_token


class BearerAuthenticator(AbstractAuthenticator):
    """
    Authenticates requests carrying ``Authorization: Bearer <token>``.

    No state is kept between requests: every call validates the presented
    token from scratch.
    """

    def __init__(self, validator: AbstractTokenValidator, header_name: str = "Authorization"):
        """
        Args:
            validator: Token validator used for every request.
            header_name: Header carrying the bearer credential.
        """
        self.validator = validator
        self.header_name = header_name
        self._logger = logger.bind(name=__name__)

    async def authenticate(self, request: AuthRequest) -> Principal:
        auth_header = request.get_header(self.header_name)
        if not auth_header:
            raise MissingCredentialsError(
                f"Missing {self.header_name} header",
                code="MISSING_CREDENTIALS",
                details={"header": self.header_name},
            )

        try:
            token = extract_bearer_token(auth_header)
        except ValueError as e:
            raise MissingCredentialsError(
                "Authorization header does not carry a bearer token",
                code="MISSING_CREDENTIALS",
                details={"header": self.header_name},
            ) from e

        principal = self.validator.validate(token)
        self._logger.debug(f"Authenticated {principal.subject} (client: {request.client_id})")
        return principal
