# ABOUTME: Scope-based implementation of AbstractScopeAuthorizer
# ABOUTME: Grants an operation iff every required scope is held by the principal

from typing import Iterable

from loguru import logger

from gatehouse.exceptions import InsufficientScopeError
from gatehouse.interfaces.auth.authorizer import AbstractScopeAuthorizer
from gatehouse.models.auth.principal import Principal
from gatehouse.models.auth.scope import normalize_scopes


class ScopeAuthorizer(AbstractScopeAuthorizer):
    """
    Set-inclusion authorizer: every required scope must be in ``principal.scopes``.

    Scopes are opaque strings compared exactly; there is no hierarchy and no
    wildcard. Stateless and safe to share between requests.
    """

    def __init__(self) -> None:
        self._logger = logger.bind(name=__name__)

    def authorize(self, principal: Principal, required_scopes: Iterable[str]) -> None:
        required = normalize_scopes(required_scopes)
        if not required:
            return

        missing = principal.missing_scopes(required)
        if missing:
            self._logger.debug(f"Denied {principal.subject}: missing scopes {sorted(missing)}")
            raise InsufficientScopeError(missing, details={"subject": principal.subject})
