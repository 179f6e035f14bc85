# ABOUTME: RequestContext model carried through the request pipeline
# ABOUTME: Holds the incoming request, the caller key, the verified principal and the scopes the operation needs

from datetime import datetime, UTC
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gatehouse.models.auth.principal import Principal
from gatehouse.models.auth.scope import normalize_scopes


class RequestContext(BaseModel):
    """
    Per-request state shared by the guards of one pipeline execution.

    Guards read the request and write what they established: the rate-limit
    guard records its decision, the authentication guard sets ``principal``.
    A context is never shared between requests.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique context identifier")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    request: Optional[Any] = Field(default=None, description="Object conforming to the AuthRequest protocol")
    operation: Optional[str] = Field(default=None, description="Name of the operation being guarded")
    client_key: Optional[str] = Field(default=None, description="Explicit rate-limit key, overrides request.client_id")
    required_scopes: frozenset[str] = Field(default_factory=frozenset)

    principal: Optional[Principal] = Field(default=None)

    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_cancelled: bool = False
    execution_path: List[str] = Field(default_factory=list)

    @field_validator("required_scopes", mode="before")
    @classmethod
    def coerce_scopes(cls, v: Any) -> frozenset[str]:
        return normalize_scopes(v)

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    def rate_limit_key(self) -> Optional[str]:
        """
        Key the rate limiter counts against: explicit ``client_key`` first,
        then the authenticated subject, then the request's client id.
        """
        if self.client_key:
            return self.client_key
        if self.principal is not None:
            return f"sub:{self.principal.subject}"
        client_id = getattr(self.request, "client_id", None)
        if client_id:
            return f"client:{client_id}"
        return None

    def add_execution_step(self, guard_name: str) -> None:
        self.execution_path.append(guard_name)

    def cancel(self) -> None:
        self.is_cancelled = True

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)
