"""Factory Boy definition for :class:`vidtube.models.user.User`."""

from __future__ import annotations

import factory

from tests.factories import BaseFactory
from vidtube.core.security import CredentialVerifier
from vidtube.models.user import User

DEFAULT_PASSWORD = "Passw0rd!"

# Cheap hashing keeps the suite fast; verification is method-agnostic
fast_hasher = CredentialVerifier("pbkdf2:sha256:1000")


class UserFactory(BaseFactory):
    """
    Build persisted :class:`vidtube.models.user.User` instances.

    Pass ``password="..."`` to set a specific secret; the default is
    :data:`DEFAULT_PASSWORD`.
    """

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    username = factory.Sequence(lambda n: f"creator{n}")
    email = factory.Sequence(lambda n: f"creator{n}@example.com")
    full_name = factory.Faker("name")
    avatar = factory.Sequence(lambda n: f"https://media.example.com/avatars/{n}.png")
    cover_image = None
    password_hash = factory.LazyFunction(lambda: fast_hasher.hash(DEFAULT_PASSWORD))
    refresh_token = None

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Re-hash when an explicit password is given."""
        if extracted:
            obj.password_hash = fast_hasher.hash(extracted)
