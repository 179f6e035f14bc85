# ABOUTME: Integration tests for AccountService over the in-memory and SQLite data stores
# ABOUTME: Tests registration atomicity, concurrent duplicate registration, login and account management

import asyncio

import pytest
import pytest_asyncio

from gatehouse.components.account import AccountService
from gatehouse.config import CoreSettings
from gatehouse.exceptions import (
    ConfigurationException,
    ConflictError,
    InsufficientScopeError,
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    ValidationException,
)
from gatehouse.implementations.jwt import JwtTokenService
from gatehouse.implementations.memory.storage import InMemoryDataStore, InMemoryUnitOfWork
from gatehouse.implementations.sqlalchemy import SqlAlchemyDataStore
from gatehouse.models.account import NewAccount, User, UserPatch, UserProfile
from gatehouse.models.auth import Principal

ITERATIONS = 1000


def new_account(email="ada@example.com", **overrides) -> NewAccount:
    data = {"email": email, "password": "correct horse", "display_name": "Ada"}
    data.update(overrides)
    return NewAccount(**data)


def admin() -> Principal:
    return Principal(
        subject="admin", scopes=frozenset({"accounts:read", "accounts:write", "accounts:admin"})
    )


class FailingProfileUnitOfWork(InMemoryUnitOfWork):
    """Unit of work whose profile repository fails on create."""

    def _repository(self, entity_type):
        repository = super()._repository(entity_type)
        if entity_type is UserProfile:

            async def fail(entity):
                raise PersistenceError("profile table unavailable", code="PERSISTENCE_ERROR")

            repository.create = fail
        return repository


class FailingProfileStore(InMemoryDataStore):
    def unit_of_work(self):
        return FailingProfileUnitOfWork(self)


class LockstepUnitOfWork(InMemoryUnitOfWork):
    """Unit of work whose user lookups wait for every concurrent registration to look up too."""

    def _repository(self, entity_type):
        cached = entity_type in self._repositories
        repository = super()._repository(entity_type)
        if entity_type is User and not cached:
            lookup = repository.get_by_natural_key
            store = self.store

            async def lookup_in_lockstep(key):
                found = await lookup(key)
                store.misses += found is None
                await asyncio.wait_for(store.barrier.wait(), timeout=5)
                return found

            repository.get_by_natural_key = lookup_in_lockstep
        return repository


class LockstepStore(InMemoryDataStore):
    def __init__(self, parties: int):
        super().__init__()
        self.barrier = asyncio.Barrier(parties)
        self.misses = 0

    def unit_of_work(self):
        return LockstepUnitOfWork(self)


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    if request.param == "memory":
        store = InMemoryDataStore()
    else:
        store = SqlAlchemyDataStore.from_url(f"sqlite:///{tmp_path / 'accounts.db'}")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def tokens(signing_secret, clock):
    return JwtTokenService(signing_secret=signing_secret, clock=clock)


@pytest.fixture
def service(store, tokens):
    return AccountService(store, token_issuer=tokens, password_iterations=ITERATIONS)


async def count(store, entity_type) -> int:
    async with store.unit_of_work() as uow:
        return await uow.repository(entity_type).count()


class TestRegister:
    """Test account registration."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_creates_user_and_profile(self, service, store):
        """Test that registration stores the user and its profile."""
        user = await service.register(new_account(email="Ada@Example.com", locale="pt-BR", scopes={"read"}))

        assert user.id
        assert user.email == "ada@example.com"
        assert user.scopes == frozenset({"read"})
        assert user.password_hash.startswith("pbkdf2_sha256$1000$")
        profile = await service.get_profile(user.id)
        assert profile.locale == "pt-BR"
        assert await count(store, User) == 1
        assert await count(store, UserProfile) == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_account_touches_nothing(self, service, store):
        """Test that validation failures are raised before any write."""
        with pytest.raises(ValidationException) as exc_info:
            await service.register(new_account(email="nope", password="short"))

        codes = {issue["code"] for issue in exc_info.value.details["issues"]}
        assert codes == {"INVALID_EMAIL", "WEAK_PASSWORD"}
        assert await count(store, User) == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_duplicate_email(self, service, store):
        """Test that a registered email cannot be registered again in any case."""
        await service.register(new_account())

        with pytest.raises(ConflictError) as exc_info:
            await service.register(new_account(email="ADA@example.com"))

        assert exc_info.value.code == "EMAIL_TAKEN"
        assert await count(store, User) == 1
        assert await count(store, UserProfile) == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_precheck(self, store, tokens):
        """Test that the optional precheck rejects duplicates early."""
        service = AccountService(store, token_issuer=tokens, password_iterations=ITERATIONS, precheck=True)
        await service.register(new_account())

        with pytest.raises(ConflictError):
            await service.register(new_account())

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_actor_scopes(self, service):
        """Test the scopes required from a caller registering on someone's behalf."""
        writer = Principal(subject="w", scopes=frozenset({"accounts:write"}))

        await service.register(new_account("one@example.com"), actor=writer)
        with pytest.raises(InsufficientScopeError) as exc_info:
            await service.register(new_account("two@example.com", scopes={"read"}), actor=writer)
        assert exc_info.value.missing_scopes == ["accounts:admin"]

        await service.register(new_account("two@example.com", scopes={"read"}), actor=admin())
        with pytest.raises(InsufficientScopeError):
            await service.register(new_account("three@example.com"), actor=Principal(subject="r", scopes=frozenset()))


class TestRegisterAtomicity:
    """Test that a registration commits completely or not at all."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_profile_failure_rolls_back_user(self):
        """Test that a failing profile write leaves no user behind."""
        store = FailingProfileStore()
        service = AccountService(store, password_iterations=ITERATIONS)

        with pytest.raises(PersistenceError):
            await service.register(new_account())

        async with store.unit_of_work() as uow:
            assert await uow.repository(User).count() == 0
            assert await uow.repository(User).get_by_natural_key("ada@example.com") is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_email_free_after_failed_registration(self):
        """Test that a rolled back registration releases the email for the next attempt."""
        store = FailingProfileStore()
        service = AccountService(store, password_iterations=ITERATIONS)

        with pytest.raises(PersistenceError):
            await service.register(new_account())

        async with store.unit_of_work() as uow:
            await uow.repository(User).create(
                User(email="ada@example.com", display_name="Ada", password_hash="pbkdf2_sha256$1$s$h")
            )
            await uow.commit()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_concurrent_registrations(self):
        """Test that exactly one of many interleaved registrations of one email succeeds."""
        store = LockstepStore(parties=10)
        service = AccountService(store, password_iterations=ITERATIONS)

        results = await asyncio.gather(
            *(service.register(new_account(display_name=f"Ada {i}")) for i in range(10)),
            return_exceptions=True,
        )

        users = [r for r in results if isinstance(r, User)]
        conflicts = [r for r in results if isinstance(r, ConflictError)]
        assert len(users) == 1
        assert len(conflicts) == 9
        assert store.misses == 10
        async with store.unit_of_work() as uow:
            assert await uow.repository(User).count() == 1
            assert await uow.repository(UserProfile).count() == 1


class TestLogin:
    """Test credential verification and token issuance."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_login_issues_token(self, service, tokens):
        """Test that a correct credential yields a token for the user id."""
        user = await service.register(new_account(scopes={"read", "write"}))

        token = await service.login("ADA@example.com", "correct horse", lifetime=60)
        principal = tokens.validate(token)

        assert principal.subject == user.id
        assert principal.scopes == frozenset({"read", "write"})

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_login_subset_of_scopes(self, service, tokens):
        """Test requesting fewer scopes than the account holds."""
        await service.register(new_account(scopes={"read", "write"}))

        token = await service.login("ada@example.com", "correct horse", scopes={"read"})

        assert tokens.validate(token).scopes == frozenset({"read"})

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_login_excess_scopes(self, service):
        """Test that scopes beyond the account's are refused."""
        await service.register(new_account(scopes={"read"}))

        with pytest.raises(InsufficientScopeError) as exc_info:
            await service.login("ada@example.com", "correct horse", scopes={"read", "admin"})

        assert exc_info.value.missing_scopes == ["admin"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [("ada@example.com", "wrong horse"), ("bob@example.com", "correct horse")])
    async def test_invalid_credentials(self, service, email, password):
        """Test that a wrong password and an unknown email fail the same way."""
        await service.register(new_account())

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await service.login(email, password)

        assert exc_info.value.code == "INVALID_CREDENTIALS"
        assert exc_info.value.status_code == 401

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_inactive_account(self, service):
        """Test that a deactivated account cannot log in."""
        user = await service.register(new_account())
        await service.deactivate(user.id)

        with pytest.raises(InvalidCredentialsError):
            await service.login("ada@example.com", "correct horse")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_login_without_issuer(self, store):
        """Test that login needs a token issuer."""
        service = AccountService(store, password_iterations=ITERATIONS)

        with pytest.raises(ConfigurationException):
            await service.login("ada@example.com", "correct horse")


class TestAccountManagement:
    """Test reads, updates and deletion."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_and_not_found(self, service):
        """Test reads by id and email."""
        user = await service.register(new_account())

        assert (await service.get(user.id)).email == "ada@example.com"
        assert (await service.get_by_email("Ada@example.com")).id == user.id
        with pytest.raises(NotFoundError):
            await service.get("missing")
        with pytest.raises(NotFoundError):
            await service.get_by_email("bob@example.com")
        with pytest.raises(NotFoundError):
            await service.get_profile("missing")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_read_requires_scope(self, service):
        """Test that reads on behalf of a caller need accounts:read."""
        user = await service.register(new_account())

        with pytest.raises(InsufficientScopeError):
            await service.get(user.id, actor=Principal(subject="x", scopes=frozenset({"read"})))
        assert (await service.get(user.id, actor=admin())).id == user.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list(self, service):
        """Test paging through accounts."""
        for i in range(3):
            await service.register(new_account(f"user{i}@example.com"))

        page = await service.list(offset=1, limit=1)

        assert [u.email for u in page] == ["user1@example.com"]
        with pytest.raises(ValidationException) as exc_info:
            await service.list(offset=-1)
        assert exc_info.value.code == "INVALID_PAGE"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update(self, service):
        """Test changing display name and email."""
        user = await service.register(new_account())

        updated = await service.update(user.id, UserPatch(email="Ada@Lovelace.org", display_name="Ada L."))

        assert updated.email == "ada@lovelace.org"
        assert updated.display_name == "Ada L."
        assert (await service.get_by_email("ada@lovelace.org")).id == user.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, service):
        """Test that an update cannot take another account's email."""
        await service.register(new_account("ada@example.com"))
        grace = await service.register(new_account("grace@example.com"))

        with pytest.raises(ConflictError):
            await service.update(grace.id, UserPatch(email="ada@example.com"))

        assert (await service.get(grace.id)).email == "grace@example.com"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_admin_fields(self, service):
        """Test that scope changes need accounts:admin."""
        user = await service.register(new_account())
        writer = Principal(subject="w", scopes=frozenset({"accounts:write"}))

        with pytest.raises(InsufficientScopeError):
            await service.update(user.id, UserPatch(scopes={"admin"}), actor=writer)

        updated = await service.update(user.id, UserPatch(scopes={"read"}), actor=admin())
        assert updated.scopes == frozenset({"read"})

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_missing_user(self, service):
        """Test updating an unknown user."""
        with pytest.raises(NotFoundError):
            await service.update("missing", UserPatch(display_name="x"))

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_change_password(self, service):
        """Test that the new password works and the old one stops working."""
        user = await service.register(new_account())

        with pytest.raises(InvalidCredentialsError):
            await service.change_password(user.id, "wrong horse", "battery staple")
        await service.change_password(user.id, "correct horse", "battery staple")

        await service.login("ada@example.com", "battery staple")
        with pytest.raises(InvalidCredentialsError):
            await service.login("ada@example.com", "correct horse")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_change_password_policy(self, service):
        """Test that a weak new password is rejected."""
        user = await service.register(new_account())

        with pytest.raises(ValidationException):
            await service.change_password(user.id, "correct horse", "short")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete(self, service, store):
        """Test that deletion removes the user and its profile and frees the email."""
        user = await service.register(new_account())

        with pytest.raises(InsufficientScopeError):
            await service.delete(user.id, actor=Principal(subject="w", scopes=frozenset({"accounts:write"})))
        await service.delete(user.id, actor=admin())

        assert await count(store, User) == 0
        assert await count(store, UserProfile) == 0
        with pytest.raises(NotFoundError):
            await service.delete(user.id)
        await service.register(new_account())

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_from_settings(self, store, tokens, signing_secret):
        """Test construction from settings."""
        settings = CoreSettings(SIGNING_SECRET=signing_secret, PASSWORD_HASH_ITERATIONS=ITERATIONS, _env_file=None)

        service = AccountService.from_settings(settings, store, token_issuer=tokens, precheck=True)

        assert service.password_iterations == ITERATIONS
        assert service.precheck is True
