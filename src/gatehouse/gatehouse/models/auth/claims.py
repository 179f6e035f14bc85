# ABOUTME: Token claims model shared by the issuer and the validator
# ABOUTME: Validates the decoded payload and maps it to the wire claim names

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gatehouse.models.auth.principal import Principal
from gatehouse.models.auth.scope import normalize_scopes
from gatehouse.models.types import TokenPayload


class TokenClaims(BaseModel):
    """
    Claims carried in a token payload.

    Wire names follow the JWT registered claims (``sub``, ``iat``, ``exp``,
    ``jti``) plus a ``scopes`` list. Scopes are serialized sorted so that the
    same claims always produce the same payload bytes.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    subject: str = Field(alias="sub", min_length=1)
    scopes: frozenset[str] = Field(default_factory=frozenset)
    issued_at: float = Field(alias="iat")
    expires_at: float = Field(alias="exp")
    token_id: str = Field(alias="jti", default_factory=lambda: uuid.uuid4().hex)

    @field_validator("subject")
    @classmethod
    def subject_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("subject must not be blank")
        return v

    @field_validator("scopes", mode="before")
    @classmethod
    def coerce_scopes(cls, v: Any) -> frozenset[str]:
        return normalize_scopes(v)

    @model_validator(mode="after")
    def expiry_after_issue(self) -> "TokenClaims":
        if self.expires_at <= self.issued_at:
            raise ValueError("exp must be greater than iat")
        return self

    def to_payload(self) -> TokenPayload:
        """Render the claims with their wire names."""
        return {
            "sub": self.subject,
            "scopes": sorted(self.scopes),
            "iat": self.issued_at,
            "exp": self.expires_at,
            "jti": self.token_id,
        }

    def to_principal(self) -> Principal:
        return Principal(
            subject=self.subject,
            scopes=self.scopes,
            issued_at=self.issued_at,
            expires_at=self.expires_at,
            token_id=self.token_id,
        )
