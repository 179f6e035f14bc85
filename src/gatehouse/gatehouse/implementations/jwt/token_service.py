# ABOUTME: HMAC-signed JWT implementation of the token issuer and validator interfaces
# ABOUTME: Issues stateless bearer tokens and verifies them against the current and previous signing secrets

import binascii
import json
import re
import time
from typing import Iterable, Optional

import jwt
from jwt.algorithms import get_default_algorithms
from jwt.utils import base64url_decode
from loguru import logger
from pydantic import ValidationError

from gatehouse.config.security import MIN_SECRET_LENGTH, SecuritySettings
from gatehouse.exceptions import (
    ConfigurationException,
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    RevokedTokenError,
    SigningError,
    ValidationException,
)
from gatehouse.interfaces.auth.revocation_store import AbstractRevocationStore
from gatehouse.interfaces.auth.token_issuer import AbstractTokenIssuer
from gatehouse.interfaces.auth.token_validator import AbstractTokenValidator
from gatehouse.models.auth.claims import TokenClaims
from gatehouse.models.auth.principal import Principal
from gatehouse.models.auth.scope import normalize_scopes
from gatehouse.models.types import Clock

SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")
REQUIRED_CLAIMS = ("sub", "scopes", "iat", "exp")
BASE64URL_SEGMENT = re.compile(r"[A-Za-z0-9_-]+")

# Expiry is checked against the injected clock, not by PyJWT.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
    "require": ["sub", "iat", "exp"],
}


class JwtTokenService(AbstractTokenIssuer, AbstractTokenValidator):
    """
    Issues and validates compact JWS tokens signed with a shared HMAC secret.

    Wire format: ``base64url(header).base64url(payload).base64url(signature)``
    with header ``{"alg": "HS256", "typ": "JWT"}`` and payload claims
    ``sub``, ``scopes``, ``iat``, ``exp`` and ``jti``.

    Key rotation: new tokens are always signed with ``signing_secret``;
    tokens signed with ``previous_secret`` keep validating until they expire.

    Revocation is opt-in: without a revocation store, validation depends only
    on the token, the secrets and the clock.

    Example:
        >>> service = JwtTokenService(signing_secret="x" * 32)
        >>> token = service.issue("u1", {"read"}, lifetime=30)
        >>> service.validate(token).subject
        'u1'
    """

    def __init__(
        self,
        signing_secret: Optional[str],
        previous_secret: Optional[str] = None,
        algorithm: str = "HS256",
        default_lifetime: float = 900.0,
        clock: Optional[Clock] = None,
        revocation_store: Optional[AbstractRevocationStore] = None,
    ):
        """
        Args:
            signing_secret: Current secret. None or empty leaves the service
                            without a signing key: issuing then raises
                            ``SigningError`` and no token validates.
            previous_secret: Secret of the previous rotation, validation only.
            algorithm: One of HS256, HS384, HS512.
            default_lifetime: Lifetime in seconds used when ``issue`` gets none.
            clock: Source of the current Unix time (defaults to ``time.time``).
            revocation_store: Optional store of revoked token ids.

        Raises:
            ConfigurationException: On an unsupported algorithm, a secret
                                    shorter than the minimum length or a
                                    non-positive default lifetime.
        """
        signing_secret = signing_secret or None
        previous_secret = previous_secret or None
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationException(
                f"Unsupported token algorithm '{algorithm}'",
                code="UNSUPPORTED_ALGORITHM",
                details={"supported": list(SUPPORTED_ALGORITHMS)},
            )
        for secret in (signing_secret, previous_secret):
            if secret is not None and len(secret) < MIN_SECRET_LENGTH:
                raise ConfigurationException(
                    f"Signing secrets must be at least {MIN_SECRET_LENGTH} characters long",
                    code="WEAK_SIGNING_SECRET",
                )
        if previous_secret is not None and signing_secret is None:
            raise ConfigurationException("A previous secret requires a current signing secret")
        if default_lifetime <= 0:
            raise ConfigurationException("default_lifetime must be > 0", code="INVALID_TOKEN_LIFETIME")

        self.algorithm = algorithm
        self.default_lifetime = float(default_lifetime)
        self.revocation_store = revocation_store
        self._signing_secret = signing_secret
        self._previous_secret = previous_secret
        self._hmac = get_default_algorithms()[algorithm]
        self._clock = clock if clock is not None else time.time
        self._logger = logger.bind(name=__name__)

    @classmethod
    def from_settings(
        cls,
        settings: SecuritySettings,
        clock: Optional[Clock] = None,
        revocation_store: Optional[AbstractRevocationStore] = None,
    ) -> "JwtTokenService":
        current = settings.SIGNING_SECRET.get_secret_value() if settings.SIGNING_SECRET else None
        previous = settings.PREVIOUS_SIGNING_SECRET.get_secret_value() if settings.PREVIOUS_SIGNING_SECRET else None
        return cls(
            signing_secret=current,
            previous_secret=previous,
            algorithm=settings.TOKEN_ALGORITHM,
            default_lifetime=settings.TOKEN_LIFETIME_SECONDS,
            clock=clock,
            revocation_store=revocation_store,
        )

    @property
    def _active_secrets(self) -> list[str]:
        return [secret for secret in (self._signing_secret, self._previous_secret) if secret]

    def issue(self, principal_id: str, scopes: Iterable[str], lifetime: float | None = None) -> str:
        if not self._signing_secret:
            raise SigningError("No signing secret configured", code="SIGNING_SECRET_MISSING")
        if not isinstance(principal_id, str) or not principal_id.strip():
            raise ValidationException("principal_id must be a non-empty string", code="INVALID_PRINCIPAL")

        lifetime = self.default_lifetime if lifetime is None else lifetime
        if lifetime <= 0:
            raise ValidationException(
                "Token lifetime must be positive", code="INVALID_TOKEN_LIFETIME", details={"lifetime": lifetime}
            )

        try:
            granted = normalize_scopes(scopes)
        except ValueError as e:
            raise ValidationException(str(e), code="INVALID_SCOPE") from e

        now = self._clock()
        claims = TokenClaims(subject=principal_id, scopes=granted, issued_at=now, expires_at=now + lifetime)
        token = jwt.encode(
            claims.to_payload(),
            self._signing_secret,
            algorithm=self.algorithm,
            headers={"typ": "JWT"},
        )
        self._logger.debug(f"Issued token {claims.token_id} for {principal_id}, expires at {claims.expires_at}")
        return token

    def validate(self, token: str) -> Principal:
        return self.decode_claims(token).to_principal()

    def decode_claims(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its full claims.

        Raises:
            MalformedTokenError: Bad structure, header, encoding or claims.
            InvalidSignatureError: No active secret produced the signature.
            ExpiredTokenError: The clock is past ``exp``.
            RevokedTokenError: The token id is in the revocation store.
        """
        self._check_structure(token)

        secret = self._matching_secret(token)
        if secret is None:
            self._logger.debug("Rejected token with unknown signature")
            raise InvalidSignatureError("Token signature is invalid", code="INVALID_SIGNATURE")

        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm], options=_DECODE_OPTIONS)
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError("Token could not be decoded", code="MALFORMED_TOKEN") from e

        missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            raise MalformedTokenError(
                "Token payload is missing required claims", code="MALFORMED_TOKEN", details={"missing": missing}
            )
        try:
            claims = TokenClaims.model_validate(payload)
        except (ValidationError, ValueError) as e:
            raise MalformedTokenError("Token payload has invalid claims", code="MALFORMED_TOKEN") from e

        now = self._clock()
        if now > claims.expires_at:
            raise ExpiredTokenError(
                "Token has expired",
                code="TOKEN_EXPIRED",
                details={"expired_at": claims.expires_at, "now": now},
            )

        if self.revocation_store is not None and self.revocation_store.is_revoked(claims.token_id):
            raise RevokedTokenError("Token has been revoked", code="TOKEN_REVOKED", details={"jti": claims.token_id})

        return claims

    def _check_structure(self, token: str) -> None:
        if not isinstance(token, str):
            raise MalformedTokenError(
                "Token must be a string", code="MALFORMED_TOKEN", details={"token_type": type(token).__name__}
            )

        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise MalformedTokenError("Token must have three non-empty segments", code="MALFORMED_TOKEN")

        if not (BASE64URL_SEGMENT.fullmatch(segments[0]) and BASE64URL_SEGMENT.fullmatch(segments[2])):
            raise MalformedTokenError("Token header and signature must be base64url", code="MALFORMED_TOKEN")

        # Only the header is decoded here; the payload waits for the signature.
        try:
            header = json.loads(base64url_decode(segments[0]))
        except (binascii.Error, ValueError) as e:
            raise MalformedTokenError("Token header could not be decoded", code="MALFORMED_TOKEN") from e
        if not isinstance(header, dict):
            raise MalformedTokenError("Token header must be a JSON object", code="MALFORMED_TOKEN")

        if header.get("alg") != self.algorithm:
            raise MalformedTokenError(
                "Token header names an unexpected algorithm",
                code="MALFORMED_TOKEN",
                details={"alg": header.get("alg"), "expected": self.algorithm},
            )

    def _matching_secret(self, token: str) -> Optional[str]:
        """
        Return the active secret whose HMAC over ``header.payload`` equals the
        signature, or None. The payload is not decoded before this succeeds.
        """
        signing_input, _, signature_segment = token.rpartition(".")
        try:
            signature = base64url_decode(signature_segment)
        except (binascii.Error, ValueError) as e:
            raise MalformedTokenError("Token signature could not be decoded", code="MALFORMED_TOKEN") from e

        message = signing_input.encode("utf-8")
        for secret in self._active_secrets:
            if self._hmac.verify(message, self._hmac.prepare_key(secret), signature):
                return secret
        return None

    def refresh(self, token: str, lifetime: float | None = None) -> str:
        """
        Exchange a valid token for a fresh one with the same subject and scopes.

        The presented token is revoked when a revocation store is configured.
        """
        claims = self.decode_claims(token)
        new_token = self.issue(claims.subject, claims.scopes, lifetime)
        if self.revocation_store is not None:
            self.revocation_store.revoke(claims.token_id, claims.expires_at)
        return new_token

    def revoke(self, token: str) -> None:
        """
        Revoke a valid token before its expiry.

        Raises:
            ConfigurationException: If no revocation store is configured.
        """
        if self.revocation_store is None:
            raise ConfigurationException("Token revocation requires a revocation store", code="REVOCATION_DISABLED")
        claims = self.decode_claims(token)
        self.revocation_store.revoke(claims.token_id, claims.expires_at)
        self._logger.debug(f"Revoked token {claims.token_id} for {claims.subject}")
