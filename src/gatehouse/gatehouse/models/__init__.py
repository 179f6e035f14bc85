# ABOUTME: Models package initialization
# ABOUTME: Exports all core data models and related classes

from .auth import AuthRequest, Principal, TokenClaims, StandardScope, normalize_scopes
from .account import Entity, User, UserProfile, NewAccount, UserPatch
from .ratelimit import RateLimitDecision
from .middleware import RequestContext, GuardPriority, MiddlewareResult, MiddlewareStatus, PipelineResult
from .types import TokenPayload, EntityPatch, Clock

__all__ = [
    # Authentication
    "AuthRequest",
    "Principal",
    "TokenClaims",
    "StandardScope",
    "normalize_scopes",
    # Accounts
    "Entity",
    "User",
    "UserProfile",
    "NewAccount",
    "UserPatch",
    # Rate limiting
    "RateLimitDecision",
    # Middleware
    "RequestContext",
    "GuardPriority",
    "MiddlewareResult",
    "MiddlewareStatus",
    "PipelineResult",
    # Type definitions
    "TokenPayload",
    "EntityPatch",
    "Clock",
]
