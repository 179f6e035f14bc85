# ABOUTME: Unit tests for JwtTokenService issuance and validation
# ABOUTME: Tests wire format, tampering, expiry boundaries, key rotation, malformed input and revocation

import base64
import json

import jwt
import pytest
import time_machine

from gatehouse.config import SecuritySettings
from gatehouse.exceptions import (
    ConfigurationException,
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    RevokedTokenError,
    SigningError,
    ValidationException,
)
from gatehouse.implementations import create_token_service
from gatehouse.implementations.jwt import JwtTokenService
from gatehouse.implementations.memory.auth import InMemoryRevocationStore
from gatehouse.models.auth import Principal


def b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def unb64(segment: str) -> dict:
    return json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))


@pytest.fixture
def service(signing_secret, clock):
    return JwtTokenService(signing_secret=signing_secret, clock=clock)


class TestConstruction:
    """Test configuration checks."""

    @pytest.mark.unit
    def test_weak_secret_rejected(self):
        """Test that short secrets are refused."""
        with pytest.raises(ConfigurationException) as exc_info:
            JwtTokenService(signing_secret="short")

        assert exc_info.value.code == "WEAK_SIGNING_SECRET"

    @pytest.mark.unit
    def test_unsupported_algorithm(self, signing_secret):
        """Test that only HMAC algorithms are accepted."""
        with pytest.raises(ConfigurationException, match="Unsupported token algorithm"):
            JwtTokenService(signing_secret=signing_secret, algorithm="none")

    @pytest.mark.unit
    def test_previous_secret_requires_current(self, previous_secret):
        """Test that a validate-only rotation secret needs a current secret."""
        with pytest.raises(ConfigurationException):
            JwtTokenService(signing_secret=None, previous_secret=previous_secret)

    @pytest.mark.unit
    def test_non_positive_default_lifetime(self, signing_secret):
        """Test that the default lifetime must be positive."""
        with pytest.raises(ConfigurationException):
            JwtTokenService(signing_secret=signing_secret, default_lifetime=0)

    @pytest.mark.unit
    def test_from_settings(self, signing_secret, clock):
        """Test construction from SecuritySettings."""
        settings = SecuritySettings(
            SIGNING_SECRET=signing_secret, TOKEN_ALGORITHM="HS384", TOKEN_LIFETIME_SECONDS=60, _env_file=None
        )
        service = JwtTokenService.from_settings(settings, clock=clock)

        token = service.issue("u1", {"read"})
        claims = service.decode_claims(token)

        assert service.algorithm == "HS384"
        assert claims.expires_at - claims.issued_at == 60

    @pytest.mark.unit
    def test_factory_with_revocation(self, signing_secret, clock):
        """Test the settings factory wiring a revocation store."""
        store = InMemoryRevocationStore(clock=clock)
        service = create_token_service(
            SecuritySettings(SIGNING_SECRET=signing_secret, _env_file=None), clock=clock, revocation_store=store
        )

        token = service.issue("u1", {"read"})
        service.revoke(token)

        assert len(store) == 1
        with pytest.raises(RevokedTokenError):
            service.validate(token)


class TestIssue:
    """Test token issuance."""

    @pytest.mark.unit
    def test_wire_format(self, service, clock):
        """Test the three-segment format with its header and claims."""
        token = service.issue("u1", {"write", "read"}, lifetime=30)

        header, payload, signature = token.split(".")
        assert unb64(header) == {"alg": "HS256", "typ": "JWT"}
        claims = unb64(payload)
        assert claims["sub"] == "u1"
        assert claims["scopes"] == ["read", "write"]
        assert claims["iat"] == clock.now
        assert claims["exp"] == clock.now + 30
        assert claims["jti"]
        assert signature

    @pytest.mark.unit
    def test_default_lifetime(self, signing_secret, clock):
        """Test that the configured lifetime is used when none is given."""
        service = JwtTokenService(signing_secret=signing_secret, default_lifetime=120, clock=clock)

        claims = service.decode_claims(service.issue("u1", []))

        assert claims.expires_at == clock.now + 120

    @pytest.mark.unit
    def test_unique_token_ids(self, service):
        """Test that every token gets its own id."""
        first = service.decode_claims(service.issue("u1", {"read"}, lifetime=30))
        second = service.decode_claims(service.issue("u1", {"read"}, lifetime=30))

        assert first.token_id != second.token_id

    @pytest.mark.unit
    def test_missing_secret(self, clock):
        """Test that issuing without a secret raises SigningError."""
        service = JwtTokenService(signing_secret=None, clock=clock)

        with pytest.raises(SigningError) as exc_info:
            service.issue("u1", {"read"}, lifetime=30)

        assert exc_info.value.code == "SIGNING_SECRET_MISSING"

    @pytest.mark.unit
    def test_empty_secret_treated_as_missing(self, clock):
        """Test that empty secrets construct a service that cannot issue."""
        service = JwtTokenService(signing_secret="", previous_secret="", clock=clock)

        with pytest.raises(SigningError) as exc_info:
            service.issue("u1", {"read"}, lifetime=30)

        assert exc_info.value.code == "SIGNING_SECRET_MISSING"

    @pytest.mark.unit
    @pytest.mark.parametrize("principal_id", ["", "   ", None])
    def test_empty_principal(self, service, principal_id):
        """Test that the principal id must be a non-empty string."""
        with pytest.raises(ValidationException) as exc_info:
            service.issue(principal_id, {"read"}, lifetime=30)

        assert exc_info.value.code == "INVALID_PRINCIPAL"

    @pytest.mark.unit
    @pytest.mark.parametrize("lifetime", [0, -5])
    def test_non_positive_lifetime(self, service, lifetime):
        """Test that a token must live for a positive duration."""
        with pytest.raises(ValidationException) as exc_info:
            service.issue("u1", {"read"}, lifetime=lifetime)

        assert exc_info.value.code == "INVALID_TOKEN_LIFETIME"

    @pytest.mark.unit
    def test_invalid_scope(self, service):
        """Test that blank scopes are rejected."""
        with pytest.raises(ValidationException) as exc_info:
            service.issue("u1", ["read", ""], lifetime=30)

        assert exc_info.value.code == "INVALID_SCOPE"


class TestValidate:
    """Test token validation."""

    @pytest.mark.unit
    def test_roundtrip(self, service):
        """Test that a fresh token validates to the same subject and scopes."""
        token = service.issue("u1", {"read", "write"}, lifetime=30)

        principal = service.validate(token)

        assert principal == Principal(subject="u1", scopes=frozenset({"read", "write"}))

    @pytest.mark.unit
    def test_expiry_boundaries(self, service, clock):
        """Test validation one second before, at and after expiry."""
        token = service.issue("u1", {"read"}, lifetime=30)

        clock.advance(29)
        assert service.validate(token).subject == "u1"

        clock.advance(1)
        assert service.validate(token).subject == "u1"

        clock.advance(1)
        with pytest.raises(ExpiredTokenError) as exc_info:
            service.validate(token)
        assert exc_info.value.code == "TOKEN_EXPIRED"

    @pytest.mark.unit
    def test_expiry_with_system_clock(self, signing_secret):
        """Test expiry against the default wall clock."""
        service = JwtTokenService(signing_secret=signing_secret)

        with time_machine.travel("2024-01-01 12:00:00", tick=False) as traveller:
            token = service.issue("u1", {"read"}, lifetime=30)
            traveller.shift(29)
            assert service.validate(token).subject == "u1"
            traveller.shift(2)
            with pytest.raises(ExpiredTokenError):
                service.validate(token)

    @pytest.mark.unit
    def test_tampered_payload(self, service):
        """Test that changing the payload invalidates the signature."""
        header, payload, signature = service.issue("u1", {"read"}, lifetime=30).split(".")
        claims = unb64(payload)
        claims["scopes"] = ["read", "admin"]

        with pytest.raises(InvalidSignatureError):
            service.validate(".".join([header, b64(claims), signature]))

    @pytest.mark.unit
    def test_tampered_subject(self, service):
        """Test that changing the subject invalidates the signature."""
        header, payload, signature = service.issue("u1", {"read"}, lifetime=30).split(".")
        claims = unb64(payload)
        claims["sub"] = "u2"

        with pytest.raises(InvalidSignatureError):
            service.validate(".".join([header, b64(claims), signature]))

    @pytest.mark.unit
    @pytest.mark.parametrize("replacement", ["!", "*", "~", "$"])
    def test_payload_character_outside_alphabet(self, service, replacement):
        """Test that a payload byte outside base64url fails the signature check, not decoding."""
        header, payload, signature = service.issue("u1", {"read"}, lifetime=30).split(".")
        payload = payload[:5] + replacement + payload[6:]

        with pytest.raises(InvalidSignatureError):
            service.validate(".".join([header, payload, signature]))

    @pytest.mark.unit
    def test_signature_character_outside_alphabet(self, service):
        """Test that a signature segment outside base64url is malformed."""
        header, payload, signature = service.issue("u1", {"read"}, lifetime=30).split(".")

        with pytest.raises(MalformedTokenError):
            service.validate(".".join([header, payload, "!" + signature[1:]]))

    @pytest.mark.unit
    def test_tampered_header(self, service):
        """Test that changing a header field invalidates the signature."""
        _, payload, signature = service.issue("u1", {"read"}, lifetime=30).split(".")
        header = b64({"alg": "HS256", "typ": "JWT", "kid": "other"})

        with pytest.raises(InvalidSignatureError):
            service.validate(".".join([header, payload, signature]))

    @pytest.mark.unit
    def test_foreign_secret(self, service, clock):
        """Test that tokens signed with an unknown secret are rejected."""
        other = JwtTokenService(signing_secret="x" * 48, clock=clock)

        with pytest.raises(InvalidSignatureError):
            service.validate(other.issue("u1", {"read"}, lifetime=30))

    @pytest.mark.unit
    def test_signature_checked_before_expiry(self, service, clock):
        """Test that a forged expired token reports the signature failure."""
        other = JwtTokenService(signing_secret="x" * 48, clock=clock)
        token = other.issue("u1", {"read"}, lifetime=30)
        clock.advance(60)

        with pytest.raises(InvalidSignatureError):
            service.validate(token)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "token",
        ["", "abc", "a.b", "a..c", "a.b.c.d", "!!!.@@@.###", 12345, None],
    )
    def test_malformed_structure(self, service, token):
        """Test tokens that are not three decodable segments."""
        with pytest.raises(MalformedTokenError):
            service.validate(token)

    @pytest.mark.unit
    def test_unexpected_algorithm(self, service):
        """Test that a header naming another algorithm is malformed."""
        _, payload, signature = service.issue("u1", {"read"}, lifetime=30).split(".")
        header = b64({"alg": "none", "typ": "JWT"})

        with pytest.raises(MalformedTokenError):
            service.validate(".".join([header, payload, signature]))

    @pytest.mark.unit
    def test_signed_non_json_payload(self, service, signing_secret):
        """Test that a correctly signed but undecodable payload is malformed."""
        token = jwt.PyJWS().encode(b"not json", signing_secret, algorithm="HS256")

        with pytest.raises(MalformedTokenError):
            service.validate(token)

    @pytest.mark.unit
    def test_missing_scopes_claim(self, service, signing_secret, clock):
        """Test that a signed payload without scopes is malformed."""
        token = jwt.encode({"sub": "u1", "iat": clock.now, "exp": clock.now + 30}, signing_secret, algorithm="HS256")

        with pytest.raises(MalformedTokenError) as exc_info:
            service.validate(token)

        assert exc_info.value.details["missing"] == ["scopes"]

    @pytest.mark.unit
    def test_missing_expiry_claim(self, service, signing_secret, clock):
        """Test that a signed payload without exp is malformed."""
        token = jwt.encode({"sub": "u1", "scopes": [], "iat": clock.now}, signing_secret, algorithm="HS256")

        with pytest.raises(MalformedTokenError):
            service.validate(token)

    @pytest.mark.unit
    def test_expiry_not_after_issue(self, service, signing_secret, clock):
        """Test that a signed payload with exp <= iat is malformed."""
        token = jwt.encode(
            {"sub": "u1", "scopes": [], "iat": clock.now, "exp": clock.now}, signing_secret, algorithm="HS256"
        )

        with pytest.raises(MalformedTokenError):
            service.validate(token)


class TestRotation:
    """Test signing secret rotation."""

    @pytest.mark.unit
    def test_previous_secret_still_validates(self, signing_secret, previous_secret, clock):
        """Test that tokens signed before a rotation keep validating."""
        before = JwtTokenService(signing_secret=previous_secret, clock=clock)
        after = JwtTokenService(signing_secret=signing_secret, previous_secret=previous_secret, clock=clock)
        old_token = before.issue("u1", {"read"}, lifetime=30)

        assert after.validate(old_token).subject == "u1"

    @pytest.mark.unit
    def test_new_tokens_use_current_secret(self, signing_secret, previous_secret, clock):
        """Test that tokens are always signed with the current secret."""
        after = JwtTokenService(signing_secret=signing_secret, previous_secret=previous_secret, clock=clock)
        only_previous = JwtTokenService(signing_secret=previous_secret, clock=clock)
        only_current = JwtTokenService(signing_secret=signing_secret, clock=clock)
        token = after.issue("u1", {"read"}, lifetime=30)

        assert only_current.validate(token).subject == "u1"
        with pytest.raises(InvalidSignatureError):
            only_previous.validate(token)

    @pytest.mark.unit
    def test_retired_secret_rejected(self, signing_secret, previous_secret, clock):
        """Test that dropping the previous secret ends its tokens."""
        before = JwtTokenService(signing_secret=previous_secret, clock=clock)
        after = JwtTokenService(signing_secret=signing_secret, clock=clock)

        with pytest.raises(InvalidSignatureError):
            after.validate(before.issue("u1", {"read"}, lifetime=30))


class TestRevocation:
    """Test the opt-in revocation extension."""

    @pytest.fixture
    def store(self, clock):
        return InMemoryRevocationStore(clock=clock)

    @pytest.fixture
    def revocable(self, signing_secret, clock, store):
        return JwtTokenService(signing_secret=signing_secret, clock=clock, revocation_store=store)

    @pytest.mark.unit
    def test_revoked_token_rejected(self, revocable, store):
        """Test that a revoked token no longer validates."""
        token = revocable.issue("u1", {"read"}, lifetime=30)
        revocable.revoke(token)

        with pytest.raises(RevokedTokenError):
            revocable.validate(token)
        assert len(store) == 1

    @pytest.mark.unit
    def test_other_tokens_unaffected(self, revocable):
        """Test that revoking one token leaves others valid."""
        first = revocable.issue("u1", {"read"}, lifetime=30)
        second = revocable.issue("u1", {"read"}, lifetime=30)
        revocable.revoke(first)

        assert revocable.validate(second).subject == "u1"

    @pytest.mark.unit
    def test_revoke_requires_store(self, service):
        """Test that revocation is unavailable without a store."""
        token = service.issue("u1", {"read"}, lifetime=30)

        with pytest.raises(ConfigurationException) as exc_info:
            service.revoke(token)

        assert exc_info.value.code == "REVOCATION_DISABLED"

    @pytest.mark.unit
    def test_refresh_revokes_old_token(self, revocable, clock):
        """Test that refreshing issues a new token and revokes the presented one."""
        token = revocable.issue("u1", {"read", "write"}, lifetime=30)
        clock.advance(20)

        fresh = revocable.refresh(token, lifetime=30)

        claims = revocable.decode_claims(fresh)
        assert claims.subject == "u1"
        assert claims.scopes == frozenset({"read", "write"})
        assert claims.expires_at == clock.now + 30
        with pytest.raises(RevokedTokenError):
            revocable.validate(token)

    @pytest.mark.unit
    def test_refresh_without_store(self, service):
        """Test that refresh works without revocation, leaving the old token valid."""
        token = service.issue("u1", {"read"}, lifetime=30)

        fresh = service.refresh(token)

        assert service.validate(fresh).subject == "u1"
        assert service.validate(token).subject == "u1"

    @pytest.mark.unit
    def test_refresh_expired_token(self, revocable, clock):
        """Test that an expired token cannot be refreshed."""
        token = revocable.issue("u1", {"read"}, lifetime=30)
        clock.advance(31)

        with pytest.raises(ExpiredTokenError):
            revocable.refresh(token)
