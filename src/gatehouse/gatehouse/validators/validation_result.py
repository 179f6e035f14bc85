# ABOUTME: Validation result model collecting every rule violation found in one pass
# ABOUTME: Provides a standard result structure with severities, field paths and fix suggestions

from typing import List, Optional, Dict, Any
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict

from gatehouse.exceptions import ValidationException


class ValidationSeverity(str, Enum):
    """Severity of a validation issue."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationIssue(BaseModel):
    """One validation issue."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    code: str = Field(description="Stable identifier of the violated rule")
    severity: ValidationSeverity = Field(description="Issue severity")
    message: str = Field(description="Human-readable description")
    field_path: Optional[str] = Field(None, description="Path of the offending field")
    expected_value: Optional[Any] = Field(None, description="Expected value or constraint")
    actual_value: Optional[Any] = Field(None, description="Value that was supplied")
    suggestion: Optional[str] = Field(None, description="How to fix the issue")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


class ValidationResult(BaseModel):
    """
    Outcome of validating one command.

    Validators record every issue instead of stopping at the first one, so a
    caller gets the complete list in a single ``ValidationException``.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    is_valid: bool = Field(default=True, description="False once an ERROR or CRITICAL issue is recorded")
    issues: List[ValidationIssue] = Field(default_factory=list)
    validated_models: List[str] = Field(default_factory=list)
    validation_context: Dict[str, Any] = Field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL] for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(issue.severity == ValidationSeverity.WARNING for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(
            1 for issue in self.issues if issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
        )

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == ValidationSeverity.WARNING)

    def add_issue(
        self,
        code: str,
        severity: ValidationSeverity,
        message: str,
        field_path: Optional[str] = None,
        expected_value: Optional[Any] = None,
        actual_value: Optional[Any] = None,
        suggestion: Optional[str] = None,
        **metadata,
    ) -> None:
        """Record an issue. ERROR and CRITICAL issues make the result invalid."""
        issue = ValidationIssue(
            code=code,
            severity=severity,
            message=message,
            field_path=field_path,
            expected_value=expected_value,
            actual_value=actual_value,
            suggestion=suggestion,
            metadata=metadata,
        )
        self.issues.append(issue)

        if severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]:
            self.is_valid = False

    def get_issues_by_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    def get_summary(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "total_issues": len(self.issues),
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "validated_models": self.validated_models,
        }

    def raise_if_invalid(self, message: str = "Validation failed") -> None:
        """
        Raises:
            ValidationException: Listing every ERROR and CRITICAL issue, if any.
        """
        if self.is_valid:
            return
        errors = [
            issue.model_dump(include={"code", "field_path", "message"})
            for issue in self.issues
            if issue.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
        ]
        raise ValidationException(message, code="VALIDATION_FAILED", details={"issues": errors})
