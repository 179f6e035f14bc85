# ABOUTME: User aggregate, its profile record and the commands that create or change them
# ABOUTME: Email is the natural key, stored lower-cased; only a password verifier is ever persisted

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gatehouse.models.account.entity import Entity
from gatehouse.models.auth.scope import normalize_scopes


class User(Entity):
    """
    User account.

    ``email`` is unique across accounts, compared case-insensitively.
    ``password_hash`` holds a one-way verifier, never the password.
    ``scopes`` are the scopes the account is entitled to; a token issued at
    login may carry a subset of them.
    """

    email: str = Field(min_length=3, max_length=254)
    display_name: str = Field(min_length=1, max_length=100)
    password_hash: str = Field(repr=False)
    scopes: frozenset[str] = Field(default_factory=frozenset)
    is_active: bool = True

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("scopes", mode="before")
    @classmethod
    def coerce_scopes(cls, v: Any) -> frozenset[str]:
        return normalize_scopes(v)

    @property
    def natural_key(self) -> str:
        return self.email

    def public_dict(self) -> Dict[str, Any]:
        """Serializable view without the password verifier."""
        data = self.model_dump(exclude={"password_hash"})
        data["scopes"] = sorted(self.scopes)
        return data


class UserProfile(Entity):
    """
    Initialization record created together with every user.

    Exactly one profile exists per user, so ``user_id`` is its natural key.
    """

    user_id: str = Field(min_length=1)
    locale: str = "en"
    timezone: str = "UTC"
    preferences: Dict[str, Any] = Field(default_factory=dict)

    @property
    def natural_key(self) -> str:
        return self.user_id


class NewAccount(BaseModel):
    """
    Registration command.

    Deliberately loose: business rules are checked by ``AccountValidator`` so
    that every violation is reported as one ``ValidationException`` before
    storage is touched.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str
    password: str = Field(repr=False)
    display_name: str
    scopes: frozenset[str] = Field(default_factory=frozenset)
    locale: str = "en"
    timezone: str = "UTC"
    preferences: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("scopes", mode="before")
    @classmethod
    def coerce_scopes(cls, v: Any) -> frozenset[str]:
        return normalize_scopes(v)


class UserPatch(BaseModel):
    """Partial update of a user; only explicitly set fields are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = None
    display_name: Optional[str] = None
    scopes: Optional[frozenset[str]] = None
    is_active: Optional[bool] = None

    @field_validator("scopes", mode="before")
    @classmethod
    def coerce_scopes(cls, v: Any) -> Optional[frozenset[str]]:
        if v is None:
            return None
        return normalize_scopes(v)

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        if "email" in patch and patch["email"] is not None:
            patch["email"] = patch["email"].lower()
        return {key: value for key, value in patch.items() if value is not None}
