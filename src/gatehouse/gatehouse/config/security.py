# ABOUTME: Security configuration for token signing and credential verification
# ABOUTME: Supplies signing secrets (current and previous for rotation), algorithm and token lifetime

from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SECRET_LENGTH = 32


class SecuritySettings(BaseSettings):
    """Token and credential settings.

    ``SIGNING_SECRET`` may be left unset at load time (e.g. in a process that
    only validates through another component); issuing a token without it
    raises ``SigningError``. ``PREVIOUS_SIGNING_SECRET`` is accepted for
    validation only, so a rotation can proceed without invalidating tokens
    that are still in flight.
    """

    SIGNING_SECRET: SecretStr | None = Field(default=None, description="Current HMAC signing secret.")
    PREVIOUS_SIGNING_SECRET: SecretStr | None = Field(
        default=None,
        description="Previous signing secret, accepted for validation during rotation.",
    )
    TOKEN_ALGORITHM: Literal["HS256", "HS384", "HS512"] = Field(default="HS256")
    TOKEN_LIFETIME_SECONDS: int = Field(default=900, gt=0, description="Default token lifetime in seconds.")
    PASSWORD_HASH_ITERATIONS: int = Field(default=210_000, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("TOKEN_ALGORITHM", mode="before")
    @classmethod
    def normalise_algorithm(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("SIGNING_SECRET", "PREVIOUS_SIGNING_SECRET")
    @classmethod
    def validate_secret_length(cls, v: SecretStr | None) -> SecretStr | None:
        if v is not None and len(v.get_secret_value()) < MIN_SECRET_LENGTH:
            raise ValueError(f"Signing secrets must be at least {MIN_SECRET_LENGTH} characters long")
        return v

    @model_validator(mode="after")
    def check_rotation_pair(self) -> "SecuritySettings":
        if self.PREVIOUS_SIGNING_SECRET is not None and self.SIGNING_SECRET is None:
            raise ValueError("PREVIOUS_SIGNING_SECRET requires SIGNING_SECRET to be set")
        if (
            self.PREVIOUS_SIGNING_SECRET is not None
            and self.SIGNING_SECRET is not None
            and self.PREVIOUS_SIGNING_SECRET.get_secret_value() == self.SIGNING_SECRET.get_secret_value()
        ):
            raise ValueError("PREVIOUS_SIGNING_SECRET must differ from SIGNING_SECRET")
        return self
