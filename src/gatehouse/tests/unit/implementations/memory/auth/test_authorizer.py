# ABOUTME: Unit tests for ScopeAuthorizer
# ABOUTME: Tests set-inclusion authorization and the missing scopes reported on failure

import pytest

from gatehouse.exceptions import InsufficientScopeError
from gatehouse.implementations.memory.auth import ScopeAuthorizer
from gatehouse.models.auth import Principal, StandardScope


@pytest.fixture
def authorizer():
    return ScopeAuthorizer()


@pytest.fixture
def reader():
    return Principal(subject="u1", scopes=frozenset({"read", "accounts:read"}))


class TestScopeAuthorizer:
    """Test ScopeAuthorizer."""

    @pytest.mark.unit
    def test_subset_granted(self, authorizer, reader):
        """Test that held scopes are granted."""
        authorizer.authorize(reader, {"read"})
        authorizer.authorize(reader, ["read", "accounts:read"])
        authorizer.authorize(reader, [StandardScope.ACCOUNTS_READ])

    @pytest.mark.unit
    def test_empty_requirement_always_granted(self, authorizer):
        """Test that an operation requiring nothing is allowed for anyone."""
        authorizer.authorize(Principal(subject="u1", scopes=frozenset()), [])

    @pytest.mark.unit
    def test_missing_scopes_reported(self, authorizer, reader):
        """Test that exactly the missing scopes are reported."""
        with pytest.raises(InsufficientScopeError) as exc_info:
            authorizer.authorize(reader, {"read", "write", "admin"})

        assert exc_info.value.missing_scopes == ["admin", "write"]
        assert exc_info.value.details["subject"] == "u1"

    @pytest.mark.unit
    def test_no_hierarchy(self, authorizer):
        """Test that scopes are compared exactly, with no implied scopes."""
        admin = Principal(subject="u1", scopes=frozenset({"accounts:admin"}))

        with pytest.raises(InsufficientScopeError):
            authorizer.authorize(admin, {"accounts:read"})

    @pytest.mark.unit
    def test_has_scopes(self, authorizer, reader):
        """Test the non-raising variant."""
        assert authorizer.has_scopes(reader, {"read"})
        assert not authorizer.has_scopes(reader, {"write"})
