"""Factory Boy base wired to the transactional session fixture."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Hold the session handed over by the ``_factories_session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        """Return the registered session.

        Raises
        ------
        RuntimeError
            If a factory runs outside a test that requested ``session``.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you pass the 'session' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flush-only persistence so rows roll back with the test SAVEPOINT."""

    class Meta:
        abstract = True
        # Callable, resolved per create() against the current test's session
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
