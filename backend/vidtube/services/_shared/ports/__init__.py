"""
vidtube.services._shared.ports
==============================

Hexagonal *ports* the session layer depends on, plus in-memory doubles.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec` and :class:`~.TokenKind`; signs and validates bearer tokens.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`; the single current refresh token per principal.

- :mod:`principal_directory`:
    :class:`~.PrincipalDirectory`; principal lookup and secret-hash updates.

Concrete adapters (PyJWT, SQLAlchemy, Redis) live under ``vidtube.infra``.
"""

from __future__ import annotations

from .principal_directory import InMemoryPrincipalDirectory, PrincipalDirectory
from .refresh_token_store import InMemoryRefreshTokenStore, RefreshTokenStore
from .token_codec import StubTokenCodec, TokenCodec, TokenKind

__all__ = [
    "TokenCodec",
    "TokenKind",
    "StubTokenCodec",
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
    "PrincipalDirectory",
    "InMemoryPrincipalDirectory",
]
