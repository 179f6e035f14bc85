# ABOUTME: MiddlewareResult and PipelineResult models for guard execution outcomes
# ABOUTME: Carries pass/fail status, the boundary status code and error details of each guard

from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from gatehouse.exceptions import CoreException


class MiddlewareStatus(str, Enum):
    """
    Guard execution status.
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


class MiddlewareResult(BaseModel):
    """
    Outcome of one guard (or of a whole pipeline).

    A failed result stops the pipeline and carries what the boundary layer
    needs to answer the caller: ``status_code`` (401, 403, 429...),
    ``error_code`` and ``error_details``. Guards return failures instead of
    raising so the chain stays explicit.
    """

    middleware_name: str = Field(description="Name of the guard that produced this result")
    status: MiddlewareStatus = Field(description="Execution status")

    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: Optional[datetime] = Field(default=None)
    execution_time_ms: Optional[float] = Field(default=None)

    data: Optional[Any] = Field(default=None, description="Result data from the guard")

    error: Optional[str] = Field(default=None, description="Error message if execution failed")
    error_code: Optional[str] = Field(default=None)
    status_code: Optional[int] = Field(default=None, description="Boundary status hint for failures")
    error_details: Optional[Dict[str, Any]] = Field(default=None)

    metadata: Dict[str, Any] = Field(default_factory=dict)

    should_continue: bool = Field(default=True, description="Whether the pipeline should continue execution")

    @classmethod
    def passed(cls, middleware_name: str, data: Any = None, **metadata: Any) -> "MiddlewareResult":
        result = cls(middleware_name=middleware_name, status=MiddlewareStatus.SUCCESS, data=data, metadata=metadata)
        result.mark_completed()
        return result

    @classmethod
    def rejected(cls, middleware_name: str, error: CoreException) -> "MiddlewareResult":
        """Build a failed result from a core exception, keeping its category and status."""
        result = cls(middleware_name=middleware_name, status=MiddlewareStatus.SUCCESS)
        result.mark_failed(
            error.message,
            error_details={"category": error.category, **error.details},
            error_code=error.code or type(error).__name__,
            status_code=error.status_code,
        )
        return result

    def mark_completed(self) -> None:
        self.completed_at = datetime.now(UTC)
        if self.started_at and self.execution_time_ms is None:
            self.execution_time_ms = (self.completed_at - self.started_at).total_seconds() * 1000

    def mark_failed(
        self,
        error_message: str,
        error_details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        """
        Mark the execution as failed and stop the pipeline.

        Args:
            error_message: Error message describing the failure.
            error_details: Optional detailed error information.
            error_code: Programmatic error code.
            status_code: Boundary status hint (e.g. 429).
        """
        self.status = MiddlewareStatus.FAILED
        self.error = error_message
        self.error_details = error_details if error_details is not None else {}
        self.error_code = error_code
        self.status_code = status_code
        self.should_continue = False
        self.mark_completed()

    def mark_skipped(self, reason: str) -> None:
        self.status = MiddlewareStatus.SKIPPED
        self.metadata["skip_reason"] = reason
        self.mark_completed()

    def mark_cancelled(self) -> None:
        self.status = MiddlewareStatus.CANCELLED
        self.should_continue = False
        self.mark_completed()

    def is_successful(self) -> bool:
        return self.status == MiddlewareStatus.SUCCESS

    def is_failed(self) -> bool:
        return self.status == MiddlewareStatus.FAILED

    def get_execution_summary(self) -> Dict[str, Any]:
        summary = {
            "middleware_name": self.middleware_name,
            "status": self.status.value,
            "execution_time_ms": self.execution_time_ms,
            "should_continue": self.should_continue,
        }
        if self.error is not None:
            summary["error"] = self.error
            summary["error_code"] = self.error_code
            summary["status_code"] = self.status_code
        return summary


class PipelineResult(BaseModel):
    """
    Aggregated outcome of one pipeline execution.

    ``status`` is FAILED as soon as one guard failed; the failing guard's
    result is exposed through ``failure`` so the boundary can answer with it.
    """

    pipeline_name: str = Field(default="RequestPipeline")
    status: MiddlewareStatus = Field(default=MiddlewareStatus.SUCCESS)

    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: Optional[datetime] = Field(default=None)

    middleware_results: List[MiddlewareResult] = Field(default_factory=list)

    total_middlewares: int = 0
    executed_middlewares: int = 0
    successful_middlewares: int = 0
    failed_middlewares: int = 0

    def add_middleware_result(self, result: MiddlewareResult) -> None:
        self.middleware_results.append(result)
        if result.status == MiddlewareStatus.SKIPPED:
            return

        self.executed_middlewares += 1
        if result.is_successful():
            self.successful_middlewares += 1
        elif result.is_failed():
            self.failed_middlewares += 1

    def mark_completed(self, cancelled: bool = False) -> None:
        self.completed_at = datetime.now(UTC)
        if cancelled:
            self.status = MiddlewareStatus.CANCELLED
        elif self.failed_middlewares > 0:
            self.status = MiddlewareStatus.FAILED
        elif self.executed_middlewares == 0:
            self.status = MiddlewareStatus.SKIPPED
        else:
            self.status = MiddlewareStatus.SUCCESS

    @property
    def allowed(self) -> bool:
        """True when no guard rejected the request."""
        return self.status in (MiddlewareStatus.SUCCESS, MiddlewareStatus.SKIPPED)

    @property
    def failure(self) -> Optional[MiddlewareResult]:
        for result in self.middleware_results:
            if result.is_failed():
                return result
        return None

    def get_execution_time_ms(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds() * 1000

    def get_summary(self) -> Dict[str, Any]:
        return {
            "pipeline_name": self.pipeline_name,
            "status": self.status.value,
            "total_middlewares": self.total_middlewares,
            "executed_middlewares": self.executed_middlewares,
            "successful_middlewares": self.successful_middlewares,
            "failed_middlewares": self.failed_middlewares,
            "execution_time_ms": self.get_execution_time_ms(),
        }
