# ABOUTME: Unit tests for the gatehouse exception hierarchy
# ABOUTME: Tests boundary categories, status codes, details and serialization

import pytest

from gatehouse.exceptions import (
    AuthenticationException,
    AuthorizationError,
    ConfigurationException,
    ConflictError,
    CoreException,
    DataIntegrityException,
    ExpiredTokenError,
    InsufficientScopeError,
    InvalidSignatureError,
    MalformedTokenError,
    NotFoundError,
    PersistenceError,
    RateLimitExceeded,
    SigningError,
    StorageError,
    ValidationException,
)


class TestCoreException:
    """Test the base exception."""

    @pytest.mark.unit
    def test_message_code_and_details(self):
        """Test that message, code and details are stored."""
        error = CoreException("boom", code="BOOM", details={"a": 1})

        assert str(error) == "boom"
        assert error.code == "BOOM"
        assert error.details == {"a": 1}
        assert error.category == "internal"
        assert error.status_code == 500

    @pytest.mark.unit
    def test_details_are_copied(self):
        """Test that later changes to the passed dict do not leak into the error."""
        details = {"a": 1}
        error = CoreException("boom", details=details)
        details["b"] = 2

        assert error.details == {"a": 1}

    @pytest.mark.unit
    def test_to_dict(self):
        """Test serialization for the boundary layer."""
        error = ValidationException("bad", code="BAD", details={"field": "email"})

        assert error.to_dict() == {
            "error": "ValidationException",
            "category": "bad_request",
            "status_code": 400,
            "message": "bad",
            "code": "BAD",
            "details": {"field": "email"},
        }


class TestTaxonomy:
    """Test the classification of every error."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error_class,category,status_code",
        [
            (MalformedTokenError, "unauthenticated", 401),
            (InvalidSignatureError, "unauthenticated", 401),
            (ExpiredTokenError, "unauthenticated", 401),
            (AuthorizationError, "forbidden", 403),
            (ValidationException, "bad_request", 400),
            (NotFoundError, "not_found", 404),
            (ConflictError, "conflict", 409),
            (PersistenceError, "unavailable", 503),
            (SigningError, "internal", 500),
        ],
    )
    def test_category_and_status(self, error_class, category, status_code):
        """Test the boundary classification of each error class."""
        error = error_class("message")

        assert error.category == category
        assert error.status_code == status_code
        assert isinstance(error, CoreException)

    @pytest.mark.unit
    def test_hierarchy(self):
        """Test parent classes used by broad except clauses."""
        assert issubclass(ExpiredTokenError, AuthenticationException)
        assert issubclass(ConflictError, DataIntegrityException)
        assert issubclass(PersistenceError, StorageError)
        assert issubclass(SigningError, ConfigurationException)
        assert issubclass(InsufficientScopeError, AuthorizationError)


class TestInsufficientScopeError:
    """Test the scope failure carrying the missing scopes."""

    @pytest.mark.unit
    def test_missing_scopes_sorted_and_unique(self):
        """Test that missing scopes are exposed sorted."""
        error = InsufficientScopeError(["write", "admin", "write"])

        assert error.missing_scopes == ["admin", "write"]
        assert error.details["missing_scopes"] == ["admin", "write"]
        assert error.code == "INSUFFICIENT_SCOPE"
        assert "admin, write" in error.message

    @pytest.mark.unit
    def test_extra_details_merged(self):
        """Test that extra details are merged with the missing scopes."""
        error = InsufficientScopeError({"write"}, details={"subject": "u1"})

        assert error.details == {"missing_scopes": ["write"], "subject": "u1"}


class TestRateLimitExceeded:
    """Test the admission failure."""

    @pytest.mark.unit
    def test_carries_retry_time(self):
        """Test that the retry time is exposed."""
        error = RateLimitExceeded(key="client:1", retry_at=160.0, retry_after=12.5, limit=5)

        assert error.status_code == 429
        assert error.category == "rate_limited"
        assert error.retry_at == 160.0
        assert error.retry_after == 12.5
        assert error.details == {"key": "client:1", "retry_at": 160.0, "retry_after": 12.5, "limit": 5}

    @pytest.mark.unit
    def test_negative_retry_after_clamped(self):
        """Test that retry_after never goes below zero."""
        assert RateLimitExceeded(key="k", retry_at=1.0, retry_after=-3.0).retry_after == 0.0
