# ABOUTME: Scope vocabulary and helpers for scope-based authorization
# ABOUTME: Scopes are plain strings; StandardScope names the ones the core itself requires

from enum import Enum
from collections.abc import Iterable


class StandardScope(str, Enum):
    """
    Scopes required by the operations shipped with the core.

    Applications are free to mint their own scope strings; these are only the
    names the account service checks.
    """

    READ = "read"
    WRITE = "write"
    ACCOUNTS_READ = "accounts:read"
    ACCOUNTS_WRITE = "accounts:write"
    ACCOUNTS_ADMIN = "accounts:admin"


def normalize_scopes(scopes: Iterable[str | StandardScope] | str | None) -> frozenset[str]:
    """
    Coerce a scope collection into a frozenset of non-empty strings.

    A single string is treated as a space-delimited list, the OAuth 2.0
    ``scope`` convention.

    Raises:
        ValueError: If a scope is not a string or is blank.
    """
    if scopes is None:
        return frozenset()
    if isinstance(scopes, StandardScope):
        scopes = [scopes]
    elif isinstance(scopes, str):
        scopes = scopes.split()
    elif not isinstance(scopes, Iterable):
        raise ValueError(f"Scopes must be a collection of strings, got {type(scopes).__name__}")

    normalized = set()
    for scope in scopes:
        if isinstance(scope, StandardScope):
            scope = scope.value
        if not isinstance(scope, str):
            raise ValueError(f"Scope must be a string, got {type(scope).__name__}")
        scope = scope.strip()
        if not scope:
            raise ValueError("Scope must not be blank")
        if any(ch.isspace() for ch in scope):
            raise ValueError(f"Scope '{scope}' must not contain whitespace")
        normalized.add(scope)
    return frozenset(normalized)
