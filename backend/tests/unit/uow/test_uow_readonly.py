import pytest

from tests.factories.user import UserFactory
from vidtube.models.user import User
from vidtube.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from vidtube.uow import SQLAlchemyUnitOfWork as RWuow


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_allows_reads(self, app, db, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, app, db, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_mutation_does_not_persist(self, app, db, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())
            user_id = user.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            original_email = u.email
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        session.rollback()
        with RWuow() as uow:
            assert uow.users.get(user_id).email == original_email

    def test_guard_removed_after_exit(self, app, db, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())

    def test_owned_transaction_is_closed_on_exit(self, app, db, session):
        # scoped_session proxies the Session API but not in_transaction()
        current = session()
        current.rollback()
        assert not current.in_transaction()

        with ROuow() as uow:
            assert uow.users.get_by_username("nobody") is None
            assert current.in_transaction()

        assert not current.in_transaction()
