from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol

from vidtube.services._shared.errors import StoreUnavailableError


class RefreshTokenStore(Protocol):
    """
    Holds the single currently-valid refresh token per principal.

    The store is the point of truth for revocation: a refresh token that is
    not textually equal to the stored value is dead, whatever its signature
    says. Every method may raise :class:`StoreUnavailableError`.
    """

    backend: str

    def set_current_refresh_token(self, principal_id: int, token: str) -> None:
        """Overwrite the stored token (no compare).

        Raises :class:`PrincipalNotFoundError` when the backend knows the
        principal does not exist; tokens must not be handed out in that case.
        """

    def get_current_refresh_token(self, principal_id: int) -> str | None:
        """Return the stored token, or ``None`` when the principal has no session."""

    def clear_current_refresh_token(self, principal_id: int) -> None:
        """Forget the stored token. Idempotent."""

    def compare_and_swap(self, principal_id: int, expected: str, new: str) -> bool:
        """
        Atomically replace ``expected`` with ``new``.

        :returns: ``False`` when the stored value is no longer ``expected``
            (another rotation or a logout won the race).
        """


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local store with per-principal locks.

    Used in unit tests and as a reference for the atomicity contract.
    Set ``unavailable`` to simulate an unreachable backend.
    """

    backend = "memory"

    def __init__(self) -> None:
        self._tokens: dict[int, str] = {}
        self._locks: defaultdict[int, threading.Lock] = defaultdict(threading.Lock)
        self._registry_lock = threading.Lock()
        self.unavailable = False
        self.writes = 0

    def _lock_for(self, principal_id: int) -> threading.Lock:
        with self._registry_lock:
            return self._locks[principal_id]

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailableError(self.backend)

    def set_current_refresh_token(self, principal_id: int, token: str) -> None:
        self._check()
        with self._lock_for(principal_id):
            self._tokens[principal_id] = token
            self.writes += 1

    def get_current_refresh_token(self, principal_id: int) -> str | None:
        self._check()
        with self._lock_for(principal_id):
            return self._tokens.get(principal_id)

    def clear_current_refresh_token(self, principal_id: int) -> None:
        self._check()
        with self._lock_for(principal_id):
            self._tokens.pop(principal_id, None)
            self.writes += 1

    def compare_and_swap(self, principal_id: int, expected: str, new: str) -> bool:
        self._check()
        with self._lock_for(principal_id):
            if self._tokens.get(principal_id) != expected:
                return False
            self._tokens[principal_id] = new
            self.writes += 1
            return True
