"""SQLAlchemyRefreshTokenStore against the transactional SQLite session."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from tests.factories.user import UserFactory, fast_hasher
from vidtube.infra.sqlalchemy.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from vidtube.services._shared.errors import PrincipalNotFoundError, StoreUnavailableError
from vidtube.services._shared.ports import InMemoryPrincipalDirectory, StubTokenCodec
from vidtube.services.auth.dto import LoginIn
from vidtube.services.auth.service import SessionTokenManager


@pytest.fixture()
def store() -> SQLAlchemyRefreshTokenStore:
    return SQLAlchemyRefreshTokenStore()


@pytest.fixture()
def user():
    return UserFactory()


def test_backend_label(store):
    assert store.backend == "database"


def test_set_and_get(store, user):
    store.set_current_refresh_token(user.id, "rt-1")
    assert store.get_current_refresh_token(user.id) == "rt-1"


def test_get_without_session(store, user):
    assert store.get_current_refresh_token(user.id) is None


def test_clear(store, user):
    store.set_current_refresh_token(user.id, "rt-1")
    store.clear_current_refresh_token(user.id)
    store.clear_current_refresh_token(user.id)
    assert store.get_current_refresh_token(user.id) is None


def test_compare_and_swap(store, user):
    store.set_current_refresh_token(user.id, "rt-1")

    assert store.compare_and_swap(user.id, "rt-1", "rt-2") is True
    # Second swap from the same starting value loses
    assert store.compare_and_swap(user.id, "rt-1", "rt-3") is False
    assert store.get_current_refresh_token(user.id) == "rt-2"


def test_compare_and_swap_after_clear(store, user):
    store.set_current_refresh_token(user.id, "rt-1")
    store.clear_current_refresh_token(user.id)
    assert store.compare_and_swap(user.id, "rt-1", "rt-2") is False


def test_unknown_principal(store):
    with pytest.raises(PrincipalNotFoundError):
        store.set_current_refresh_token(999_999, "rt-x")
    assert store.get_current_refresh_token(999_999) is None
    assert store.compare_and_swap(999_999, "rt-x", "rt-y") is False


def test_login_for_missing_row_returns_no_tokens(store):
    """The principal resolves, but its ``users`` row is gone by the time the token is written."""
    directory = InMemoryPrincipalDirectory()
    ghost = directory.add(
        username="ghost", email="ghost@example.com", password_hash=fast_hasher.hash("pw")
    )
    manager = SessionTokenManager(
        codec=StubTokenCodec(), store=store, directory=directory, verifier=fast_hasher
    )

    with pytest.raises(PrincipalNotFoundError):
        manager.login(LoginIn(username="ghost", password="pw"))
    assert store.get_current_refresh_token(ghost.id) is None


def test_principals_are_isolated(store):
    a, b = UserFactory(), UserFactory()
    store.set_current_refresh_token(a.id, "rt-a")
    store.set_current_refresh_token(b.id, "rt-b")
    store.clear_current_refresh_token(a.id)
    assert store.get_current_refresh_token(b.id) == "rt-b"


class _FailingUoW:
    """UoW double whose repository calls fail like a timed-out pool."""

    class _Users:
        def __getattr__(self, name):
            def _fail(*args, **kwargs):
                raise OperationalError("SELECT 1", {}, Exception("pool timeout"))

            return _fail

    def __init__(self):
        self.users = self._Users()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.set_current_refresh_token(1, "rt"),
        lambda s: s.get_current_refresh_token(1),
        lambda s: s.clear_current_refresh_token(1),
        lambda s: s.compare_and_swap(1, "a", "b"),
    ],
)
def test_database_errors_surface_as_unavailable(call):
    store = SQLAlchemyRefreshTokenStore(uow_factory=_FailingUoW, ro_uow_factory=_FailingUoW)
    with pytest.raises(StoreUnavailableError) as info:
        call(store)
    assert info.value.store == "database"
