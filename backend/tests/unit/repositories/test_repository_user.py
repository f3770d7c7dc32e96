"""Unit tests for UserRepository."""

import pytest

from tests.factories.user import UserFactory
from vidtube.repositories.user import UserRepository


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_email_and_username_normalize(self, repo, session):
        u = UserFactory(email="alice@example.com", username="alice")
        session.commit()

        assert repo.get_by_email("  ALICE@example.com ").id == u.id
        assert repo.get_by_username("Alice").id == u.id

    def test_find_by_handle_or_contact(self, repo):
        a = UserFactory(username="first", email="first@example.com")
        b = UserFactory(username="second", email="second@example.com")

        assert repo.find_by_handle_or_contact(username="first").id == a.id
        assert repo.find_by_handle_or_contact(email="second@example.com").id == b.id
        # Either identifier may match; lowest id wins when both do
        assert repo.find_by_handle_or_contact(username="second", email="first@example.com").id == a.id
        assert repo.find_by_handle_or_contact(username="  ", email=None) is None

    def test_exists_by_email_excluding_self(self, repo):
        u = UserFactory(email="bob@example.com")

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("bob@example.com", exclude_id=u.id)
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_exists_by_username(self, repo):
        UserFactory(username="carol")
        assert repo.exists_by_username("CAROL")
        assert not repo.exists_by_username("dave")

    def test_update_password_hash(self, repo, session):
        u = UserFactory()
        assert repo.update_password_hash(u.id, "new-hash") is True
        assert repo.update_password_hash(999_999, "new-hash") is False
        session.expire_all()
        assert repo.get(u.id).password_hash == "new-hash"

    def test_refresh_token_column(self, repo):
        u = UserFactory()
        assert repo.get_refresh_token(u.id) is None

        assert repo.set_refresh_token(u.id, "rt-1") is True
        assert repo.get_refresh_token(u.id) == "rt-1"

        assert repo.set_refresh_token(u.id, None) is True
        assert repo.get_refresh_token(u.id) is None

    def test_swap_refresh_token_is_conditional(self, repo):
        u = UserFactory(refresh_token="rt-1")

        assert repo.swap_refresh_token(u.id, "rt-1", "rt-2") is True
        assert repo.swap_refresh_token(u.id, "rt-1", "rt-3") is False
        assert repo.get_refresh_token(u.id) == "rt-2"

    def test_safe_update_fields(self, repo):
        """Assign whitelisted fields and reject disallowed keys."""
        u = UserFactory()

        updated = repo.update(u, full_name="New Name", avatar="https://media.example.com/n.png")
        assert updated.full_name == "New Name"

        with pytest.raises(ValueError):
            repo.update(u, password_hash="x")
        with pytest.raises(ValueError):
            repo.update(u, refresh_token="x")
