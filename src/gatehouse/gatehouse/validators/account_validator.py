# ABOUTME: Business rule validator for account registration and account updates
# ABOUTME: Checks email format, password policy, display name, scopes and profile settings before storage is touched

import re
import zoneinfo
from typing import Iterable, Optional

from gatehouse.implementations.memory.auth.utils import MIN_PASSWORD_LENGTH, validate_password
from gatehouse.models.account.user import NewAccount, UserPatch
from .validation_result import ValidationResult, ValidationSeverity

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
LOCALE_PATTERN = re.compile(r"^[a-z]{2,3}(-[A-Za-z]{2,4})?$")
MAX_EMAIL_LENGTH = 254
MAX_DISPLAY_NAME_LENGTH = 100


class AccountValidator:
    """Validates account commands.

    Pure: no storage access. Uniqueness is not checked here; it belongs to the
    unit of work that writes the account.
    """

    def __init__(self, allowed_scopes: Optional[Iterable[str]] = None):
        """
        Args:
            allowed_scopes: If given, accounts may only be granted these scopes.
        """
        self.allowed_scopes = frozenset(allowed_scopes) if allowed_scopes is not None else None

    def validate_new_account(self, account: NewAccount) -> ValidationResult:
        result = ValidationResult(validated_models=["NewAccount"])

        self._check_email(account.email, result)
        self._check_password(account.password, result, email=account.email)
        self._check_display_name(account.display_name, result)
        self._check_scopes(account.scopes, result)
        self._check_locale(account.locale, result)
        self._check_timezone(account.timezone, result)

        return result

    def validate_patch(self, patch: UserPatch) -> ValidationResult:
        result = ValidationResult(validated_models=["UserPatch"])
        changes = patch.to_patch()

        if "email" in changes:
            self._check_email(changes["email"], result)
        if "display_name" in changes:
            self._check_display_name(changes["display_name"], result)
        if "scopes" in changes:
            self._check_scopes(changes["scopes"], result)
        if not changes:
            result.add_issue(
                code="EMPTY_PATCH",
                severity=ValidationSeverity.INFO,
                message="Patch does not change anything",
            )

        return result

    def validate_new_password(self, password: str, email: Optional[str] = None) -> ValidationResult:
        result = ValidationResult(validated_models=["Password"])
        self._check_password(password, result, email=email)
        return result

    def _check_email(self, email: str, result: ValidationResult) -> None:
        if not email or not EMAIL_PATTERN.match(email):
            result.add_issue(
                code="INVALID_EMAIL",
                severity=ValidationSeverity.ERROR,
                message="Email address is not valid",
                field_path="email",
                actual_value=email,
                suggestion="Use an address of the form name@example.com",
            )
        elif len(email) > MAX_EMAIL_LENGTH:
            result.add_issue(
                code="EMAIL_TOO_LONG",
                severity=ValidationSeverity.ERROR,
                message=f"Email address exceeds {MAX_EMAIL_LENGTH} characters",
                field_path="email",
                expected_value=f"<= {MAX_EMAIL_LENGTH} characters",
            )

    def _check_password(self, password: str, result: ValidationResult, email: Optional[str] = None) -> None:
        # Never echo the password back in the issue.
        if not validate_password(password):
            result.add_issue(
                code="WEAK_PASSWORD",
                severity=ValidationSeverity.ERROR,
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                field_path="password",
                expected_value=f">= {MIN_PASSWORD_LENGTH} characters",
            )
            return

        if email and password.lower() == email.split("@", 1)[0].lower():
            result.add_issue(
                code="PASSWORD_MATCHES_EMAIL",
                severity=ValidationSeverity.WARNING,
                message="Password is the local part of the email address",
                field_path="password",
                suggestion="Choose a password unrelated to the account name",
            )

    def _check_display_name(self, display_name: str, result: ValidationResult) -> None:
        if not display_name or not display_name.strip():
            result.add_issue(
                code="MISSING_DISPLAY_NAME",
                severity=ValidationSeverity.ERROR,
                message="Display name is required",
                field_path="display_name",
            )
        elif len(display_name) > MAX_DISPLAY_NAME_LENGTH:
            result.add_issue(
                code="DISPLAY_NAME_TOO_LONG",
                severity=ValidationSeverity.ERROR,
                message=f"Display name exceeds {MAX_DISPLAY_NAME_LENGTH} characters",
                field_path="display_name",
                expected_value=f"<= {MAX_DISPLAY_NAME_LENGTH} characters",
                actual_value=len(display_name),
            )

    def _check_scopes(self, scopes: Iterable[str], result: ValidationResult) -> None:
        if self.allowed_scopes is None:
            return
        unknown = sorted(set(scopes) - self.allowed_scopes)
        if unknown:
            result.add_issue(
                code="UNKNOWN_SCOPE",
                severity=ValidationSeverity.ERROR,
                message=f"Scopes not grantable: {', '.join(unknown)}",
                field_path="scopes",
                expected_value=sorted(self.allowed_scopes),
                actual_value=unknown,
            )

    def _check_locale(self, locale: str, result: ValidationResult) -> None:
        if not LOCALE_PATTERN.match(locale or ""):
            result.add_issue(
                code="INVALID_LOCALE",
                severity=ValidationSeverity.ERROR,
                message=f"Locale '{locale}' is not a language tag",
                field_path="locale",
                suggestion="Use a tag such as 'en' or 'pt-BR'",
            )

    def _check_timezone(self, timezone: str, result: ValidationResult) -> None:
        try:
            zoneinfo.ZoneInfo(timezone)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError, OSError):
            result.add_issue(
                code="INVALID_TIMEZONE",
                severity=ValidationSeverity.ERROR,
                message=f"Timezone '{timezone}' is not a valid IANA identifier",
                field_path="timezone",
                actual_value=timezone,
            )
