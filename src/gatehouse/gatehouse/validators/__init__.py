# ABOUTME: Validators package for business rules checked before storage is touched
# ABOUTME: Provides the account validator and the shared validation result model

from .account_validator import AccountValidator
from .validation_result import ValidationResult, ValidationIssue, ValidationSeverity

__all__ = [
    "AccountValidator",
    "ValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
]
