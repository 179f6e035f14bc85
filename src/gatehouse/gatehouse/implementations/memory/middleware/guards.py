# ABOUTME: Request guards enforcing admission control, authentication and scope checks
# ABOUTME: Each guard records its outcome as a MiddlewareResult carrying the 429, 401 or 403 status

from typing import Iterable, Optional

from gatehouse.exceptions import (
    AuthenticationException,
    InsufficientScopeError,
    MissingCredentialsError,
    RateLimitExceeded,
)
from gatehouse.interfaces.auth import AbstractAuthenticator, AbstractScopeAuthorizer
from gatehouse.interfaces.common import AbstractRateLimiter
from gatehouse.interfaces.middleware import AbstractMiddleware
from gatehouse.models.middleware import GuardPriority, MiddlewareResult, RequestContext

from .pipeline import InMemoryMiddlewarePipeline


class RateLimitMiddleware(AbstractMiddleware):
    """
    Admission control guard.

    Counts the request against ``context.rate_limit_key()``. Requests
    without any identifiable caller are not limited by this guard.
    """

    def __init__(self, rate_limiter: AbstractRateLimiter, priority: GuardPriority | int = GuardPriority.RATE_LIMIT):
        super().__init__(priority)
        self.rate_limiter = rate_limiter

    def can_process(self, context: RequestContext) -> bool:
        return context.rate_limit_key() is not None

    async def process(self, context: RequestContext) -> MiddlewareResult:
        key = context.rate_limit_key()
        decision = await self.rate_limiter.check(key)
        context.set_metadata("rate_limit", decision.to_dict())
        context.set_metadata("rate_limit_headers", decision.to_headers())

        if decision.allowed:
            return MiddlewareResult.passed(self.name, data=decision.to_dict())

        result = MiddlewareResult.rejected(
            self.name,
            RateLimitExceeded(
                key=key, retry_at=decision.retry_at, retry_after=decision.retry_after, limit=decision.limit
            ),
        )
        result.metadata["headers"] = decision.to_headers()
        return result


class AuthenticationMiddleware(AbstractMiddleware):
    """
    Authentication guard. Sets ``context.principal`` on success.
    """

    def __init__(
        self, authenticator: AbstractAuthenticator, priority: GuardPriority | int = GuardPriority.AUTHENTICATION
    ):
        super().__init__(priority)
        self.authenticator = authenticator

    async def process(self, context: RequestContext) -> MiddlewareResult:
        if context.principal is not None:
            return MiddlewareResult.passed(self.name, data=context.principal.subject, reused=True)

        if context.request is None:
            return MiddlewareResult.rejected(
                self.name, MissingCredentialsError("No request to authenticate", code="MISSING_CREDENTIALS")
            )

        try:
            principal = await self.authenticator.authenticate(context.request)
        except AuthenticationException as e:
            return MiddlewareResult.rejected(self.name, e)

        context.principal = principal
        return MiddlewareResult.passed(self.name, data=principal.subject)


class ScopeMiddleware(AbstractMiddleware):
    """
    Authorization guard checking ``context.required_scopes`` against the principal.

    Requests that require no scope skip this guard.
    """

    def __init__(
        self, authorizer: AbstractScopeAuthorizer, priority: GuardPriority | int = GuardPriority.AUTHORIZATION
    ):
        super().__init__(priority)
        self.authorizer = authorizer

    def can_process(self, context: RequestContext) -> bool:
        return bool(context.required_scopes)

    async def process(self, context: RequestContext) -> MiddlewareResult:
        if context.principal is None:
            return MiddlewareResult.rejected(
                self.name,
                MissingCredentialsError("Scope check requires an authenticated caller", code="MISSING_CREDENTIALS"),
            )

        try:
            self.authorizer.authorize(context.principal, context.required_scopes)
        except InsufficientScopeError as e:
            return MiddlewareResult.rejected(self.name, e)

        return MiddlewareResult.passed(self.name, data=sorted(context.required_scopes))


async def build_access_pipeline(
    authenticator: AbstractAuthenticator,
    authorizer: AbstractScopeAuthorizer,
    rate_limiter: Optional[AbstractRateLimiter] = None,
    extra_guards: Iterable[AbstractMiddleware] = (),
    name: str = "AccessPipeline",
) -> InMemoryMiddlewarePipeline:
    """
    Build the standard pipeline: rate limit, then authentication, then scopes.

    Args:
        authenticator: Establishes the principal from the request.
        authorizer: Checks the principal against the operation's scopes.
        rate_limiter: Admission control; omitted means no rate limiting.
        extra_guards: Additional guards, placed by their own priority.
        name: Pipeline name used in logs.
    """
    pipeline = InMemoryMiddlewarePipeline(name=name)
    if rate_limiter is not None:
        await pipeline.add_middleware(RateLimitMiddleware(rate_limiter))
    await pipeline.add_middleware(AuthenticationMiddleware(authenticator))
    await pipeline.add_middleware(ScopeMiddleware(authorizer))
    for guard in extra_guards:
        await pipeline.add_middleware(guard)
    return pipeline
