# ABOUTME: Base model for persisted aggregate entities
# ABOUTME: Declares the generated identifier, timestamps and the natural key hook repositories rely on

from datetime import datetime, UTC
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gatehouse.exceptions import ValidationException


class Entity(BaseModel):
    """
    Base class for entities stored through an ``AbstractRepository``.

    Entities are frozen: a repository hands out values, and changes go back
    through ``update(id, patch)`` which returns a new instance.

    Subclasses override ``natural_key`` when they carry a caller-meaningful
    unique attribute. The repository enforces its uniqueness.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    PROTECTED_FIELDS: ClassVar[frozenset[str]] = frozenset({"id", "created_at"})

    id: Optional[str] = Field(default=None, description="Identifier assigned by the repository on create")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: Optional[datetime] = Field(default=None)

    @property
    def natural_key(self) -> Optional[str]:
        return None

    def apply_patch(self, patch: Dict[str, Any]) -> "Entity":
        """
        Return a validated copy with ``patch`` applied and ``updated_at`` set to now.

        Raises:
            ValidationException: If the patch touches a protected or unknown
                                 field, or the result fails validation.
        """
        protected = self.PROTECTED_FIELDS.intersection(patch)
        if protected:
            raise ValidationException(
                "Patch cannot change protected fields",
                code="PROTECTED_FIELD",
                details={"fields": sorted(protected)},
            )
        unknown = set(patch) - set(type(self).model_fields)
        if unknown:
            raise ValidationException(
                "Patch names unknown fields", code="UNKNOWN_FIELD", details={"fields": sorted(unknown)}
            )

        data = self.model_dump()
        data.update(patch)
        data["updated_at"] = datetime.now(UTC)
        try:
            return type(self).model_validate(data)
        except ValidationError as e:
            raise ValidationException(
                f"Invalid {type(self).__name__} update",
                code="INVALID_ENTITY",
                details={"errors": [error["msg"] for error in e.errors()]},
            ) from e
