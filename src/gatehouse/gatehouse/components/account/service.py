# ABOUTME: Account domain service composing validation, authorization, storage and token issuance
# ABOUTME: Registers accounts with their profile atomically and serves login and account management

from typing import Iterable, List, Optional

from loguru import logger

from gatehouse.config.settings import CoreSettings
from gatehouse.exceptions import (
    ConfigurationException,
    ConflictError,
    InsufficientScopeError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationException,
)
from gatehouse.implementations.memory.auth.authorizer import ScopeAuthorizer
from gatehouse.implementations.memory.auth.utils import DEFAULT_HASH_ITERATIONS, hash_password, verify_password
from gatehouse.interfaces.auth import AbstractScopeAuthorizer, AbstractTokenIssuer
from gatehouse.interfaces.storage import AbstractDataStore, AbstractUnitOfWork
from gatehouse.models.account import NewAccount, User, UserPatch, UserProfile
from gatehouse.models.auth import Principal, StandardScope, normalize_scopes
from gatehouse.validators import AccountValidator, ValidationResult, ValidationSeverity

READ_SCOPES = frozenset({StandardScope.ACCOUNTS_READ.value})
WRITE_SCOPES = frozenset({StandardScope.ACCOUNTS_WRITE.value})
ADMIN_SCOPES = frozenset({StandardScope.ACCOUNTS_ADMIN.value})

# Fields only an administrator may change through update().
ADMIN_FIELDS = frozenset({"scopes", "is_active"})


class AccountService:
    """
    Domain service for user accounts.

    Every operation follows the same shape: check the caller's scopes (when
    a caller is given), validate the command without touching storage, then
    run all reads and writes in one unit of work. The unit commits only when
    every step succeeded; any exception rolls the whole unit back.

    Uniqueness of the email address is decided inside the unit of work. The
    optional ``precheck`` only rejects obvious duplicates earlier; two
    concurrent registrations can both pass it, and the in-transaction check
    (backed by the store's natural-key enforcement) still lets exactly one
    through.

    Operations called without an ``actor`` are trusted internal calls and
    skip the scope check; boundary layers pass the request principal.
    """

    def __init__(
        self,
        store: AbstractDataStore,
        token_issuer: Optional[AbstractTokenIssuer] = None,
        authorizer: Optional[AbstractScopeAuthorizer] = None,
        validator: Optional[AccountValidator] = None,
        password_iterations: int = DEFAULT_HASH_ITERATIONS,
        precheck: bool = False,
    ):
        """
        Args:
            store: Data store providing units of work for User and UserProfile.
            token_issuer: Issuer used by ``login``; login is unavailable without one.
            authorizer: Checks caller scopes. Defaults to ``ScopeAuthorizer``.
            validator: Business rule validator. Defaults to ``AccountValidator()``.
            password_iterations: PBKDF2 iterations for new password verifiers.
            precheck: Reject known duplicate emails before opening the write unit.
        """
        self.store = store
        self.token_issuer = token_issuer
        self.authorizer = authorizer or ScopeAuthorizer()
        self.validator = validator or AccountValidator()
        self.password_iterations = password_iterations
        self.precheck = precheck

        # Verified against when the email is unknown, so both failure paths cost the same.
        self._dummy_hash = hash_password("gatehouse-dummy-password", iterations=password_iterations)
        self._logger = logger.bind(name=__name__)

    @classmethod
    def from_settings(
        cls,
        settings: CoreSettings,
        store: AbstractDataStore,
        token_issuer: Optional[AbstractTokenIssuer] = None,
        **kwargs,
    ) -> "AccountService":
        return cls(store, token_issuer=token_issuer, password_iterations=settings.PASSWORD_HASH_ITERATIONS, **kwargs)

    async def register(self, account: NewAccount, actor: Optional[Principal] = None) -> User:
        """
        Create a user and its profile atomically.

        Args:
            account: Registration command.
            actor: Caller, if the registration is made on someone's behalf.
                   Requires ``accounts:write``; granting scopes requires
                   ``accounts:admin`` as well.

        Returns:
            User: The stored user.

        Raises:
            InsufficientScopeError: If ``actor`` lacks the required scopes.
            ValidationException: If the command breaks a business rule.
            ConflictError: If the email address is already registered.
            PersistenceError: If the store fails; nothing is written.
        """
        self._authorize(actor, WRITE_SCOPES | (ADMIN_SCOPES if account.scopes else frozenset()))
        self._check(self.validator.validate_new_account(account), "Invalid account")

        email = account.email.lower()
        if self.precheck:
            async with self.store.unit_of_work() as uow:
                if await uow.repository(User).get_by_natural_key(email) is not None:
                    raise self._email_taken(email)

        password_hash = hash_password(account.password, iterations=self.password_iterations)

        async with self.store.unit_of_work() as uow:
            users = uow.repository(User)
            if await users.get_by_natural_key(email) is not None:
                raise self._email_taken(email)

            user = await users.create(
                User(
                    email=email,
                    display_name=account.display_name,
                    password_hash=password_hash,
                    scopes=account.scopes,
                )
            )
            await uow.repository(UserProfile).create(
                UserProfile(
                    user_id=user.id,
                    locale=account.locale,
                    timezone=account.timezone,
                    preferences=account.preferences,
                )
            )
            await uow.commit()

        self._logger.info(f"Registered user {user.id}")
        return user

    async def login(
        self,
        email: str,
        password: str,
        scopes: Optional[Iterable[str]] = None,
        lifetime: Optional[float] = None,
    ) -> str:
        """
        Verify a credential and issue a bearer token.

        Args:
            email: Account email, matched case-insensitively.
            password: Plain text password.
            scopes: Scopes to put in the token, a subset of the account's
                    scopes. None requests all of them.
            lifetime: Token lifetime in seconds; None uses the issuer default.

        Returns:
            str: The signed token, whose subject is the user id.

        Raises:
            InvalidCredentialsError: Unknown email, wrong password or inactive account.
            InsufficientScopeError: If ``scopes`` exceeds the account's scopes.
            ConfigurationException: If the service has no token issuer.
        """
        if self.token_issuer is None:
            raise ConfigurationException("Login requires a token issuer", code="TOKEN_ISSUER_MISSING")

        async with self.store.unit_of_work() as uow:
            user = await uow.repository(User).get_by_natural_key((email or "").strip().lower())

        if user is None:
            verify_password(password, self._dummy_hash)
            raise self._invalid_credentials()
        if not verify_password(password, user.password_hash) or not user.is_active:
            raise self._invalid_credentials()

        requested = user.scopes if scopes is None else self._normalize(scopes)
        missing = requested - user.scopes
        if missing:
            raise InsufficientScopeError(missing, details={"subject": user.id})

        token = self.token_issuer.issue(user.id, requested, lifetime)
        self._logger.debug(f"User {user.id} logged in with scopes {sorted(requested)}")
        return token

    async def get(self, user_id: str, actor: Optional[Principal] = None) -> User:
        self._authorize(actor, READ_SCOPES)
        async with self.store.unit_of_work() as uow:
            user = await uow.repository(User).get_by_id(user_id)
        if user is None:
            raise self._not_found(user_id)
        return user

    async def get_by_email(self, email: str, actor: Optional[Principal] = None) -> User:
        self._authorize(actor, READ_SCOPES)
        async with self.store.unit_of_work() as uow:
            user = await uow.repository(User).get_by_natural_key(email.strip().lower())
        if user is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND", details={"email": email})
        return user

    async def get_profile(self, user_id: str, actor: Optional[Principal] = None) -> UserProfile:
        self._authorize(actor, READ_SCOPES)
        async with self.store.unit_of_work() as uow:
            profile = await uow.repository(UserProfile).get_by_natural_key(user_id)
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND", details={"user_id": user_id})
        return profile

    async def list(self, offset: int = 0, limit: Optional[int] = None, actor: Optional[Principal] = None) -> List[User]:
        self._authorize(actor, READ_SCOPES)
        async with self.store.unit_of_work() as uow:
            try:
                return await uow.repository(User).list(offset=offset, limit=limit)
            except ValueError as e:
                raise ValidationException(str(e), code="INVALID_PAGE", details={"offset": offset, "limit": limit}) from e

    async def update(self, user_id: str, patch: UserPatch, actor: Optional[Principal] = None) -> User:
        """
        Apply a partial update.

        An email change is re-checked for uniqueness inside the unit of work.
        Changing ``scopes`` or ``is_active`` requires ``accounts:admin``.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the new email belongs to another account.
        """
        changes = patch.to_patch()
        self._authorize(actor, WRITE_SCOPES | (ADMIN_SCOPES if ADMIN_FIELDS.intersection(changes) else frozenset()))
        self._check(self.validator.validate_patch(patch), "Invalid account update")

        async with self.store.unit_of_work() as uow:
            users = uow.repository(User)
            if "email" in changes:
                owner = await users.get_by_natural_key(changes["email"])
                if owner is not None and owner.id != user_id:
                    raise self._email_taken(changes["email"])

            updated = await users.update(user_id, changes) if changes else await users.get_by_id(user_id)
            if updated is None:
                raise self._not_found(user_id)
            await uow.commit()

        return updated

    async def change_password(
        self, user_id: str, current_password: str, new_password: str, actor: Optional[Principal] = None
    ) -> None:
        """
        Replace the password verifier after checking the current password.

        Raises:
            NotFoundError: If the user does not exist.
            InvalidCredentialsError: If ``current_password`` is wrong.
            ValidationException: If ``new_password`` breaks the password policy.
        """
        self._authorize(actor, WRITE_SCOPES)
        self._check(self.validator.validate_new_password(new_password), "Invalid password")
        new_hash = hash_password(new_password, iterations=self.password_iterations)

        async with self.store.unit_of_work() as uow:
            users = uow.repository(User)
            user = await users.get_by_id(user_id)
            if user is None:
                raise self._not_found(user_id)
            if not verify_password(current_password, user.password_hash):
                raise self._invalid_credentials()
            await users.update(user_id, {"password_hash": new_hash})
            await uow.commit()

        self._logger.info(f"Password changed for user {user_id}")

    async def deactivate(self, user_id: str, actor: Optional[Principal] = None) -> User:
        self._authorize(actor, WRITE_SCOPES | ADMIN_SCOPES)
        async with self.store.unit_of_work() as uow:
            user = await uow.repository(User).update(user_id, {"is_active": False})
            if user is None:
                raise self._not_found(user_id)
            await uow.commit()

        self._logger.info(f"Deactivated user {user_id}")
        return user

    async def delete(self, user_id: str, actor: Optional[Principal] = None) -> None:
        """
        Delete a user together with its profile.

        Raises:
            NotFoundError: If the user does not exist.
        """
        self._authorize(actor, ADMIN_SCOPES)
        async with self.store.unit_of_work() as uow:
            await self._delete_in(uow, user_id)
            await uow.commit()

        self._logger.info(f"Deleted user {user_id}")

    async def _delete_in(self, uow: AbstractUnitOfWork, user_id: str) -> None:
        users = uow.repository(User)
        if await users.get_by_id(user_id) is None:
            raise self._not_found(user_id)

        profiles = uow.repository(UserProfile)
        profile = await profiles.get_by_natural_key(user_id)
        if profile is not None:
            await profiles.delete(profile.id)
        await users.delete(user_id)

    def _authorize(self, actor: Optional[Principal], required: frozenset[str]) -> None:
        if actor is not None:
            self.authorizer.authorize(actor, required)

    def _check(self, result: ValidationResult, message: str) -> None:
        if not result.is_valid:
            self._logger.debug(f"{message}: {result.error_count} errors")
            result.raise_if_invalid(message)
        if result.has_warnings:
            codes = [issue.code for issue in result.get_issues_by_severity(ValidationSeverity.WARNING)]
            self._logger.warning(f"Accepted with warnings: {codes}")

    def _normalize(self, scopes: Iterable[str]) -> frozenset[str]:
        try:
            return normalize_scopes(scopes)
        except ValueError as e:
            raise ValidationException(str(e), code="INVALID_SCOPE") from e

    def _email_taken(self, email: str) -> ConflictError:
        self._logger.debug(f"Email already registered: {email}")
        return ConflictError("Email address is already registered", code="EMAIL_TAKEN", details={"email": email})

    def _invalid_credentials(self) -> InvalidCredentialsError:
        return InvalidCredentialsError("Invalid email or password", code="INVALID_CREDENTIALS")

    def _not_found(self, user_id: str) -> NotFoundError:
        return NotFoundError("User not found", code="USER_NOT_FOUND", details={"user_id": user_id})
