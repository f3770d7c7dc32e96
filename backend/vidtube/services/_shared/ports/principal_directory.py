from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from vidtube.services._shared.dto import PrincipalRecord
from vidtube.services._shared.errors import PrincipalNotFoundError


class PrincipalDirectory(Protocol):
    """Principal lookup and secret-hash persistence consumed by the session layer."""

    def find_by_handle_or_contact(
        self, *, username: str | None = None, email: str | None = None
    ) -> PrincipalRecord | None:
        """Match on handle OR contact address (case-insensitive)."""

    def get(self, principal_id: int) -> PrincipalRecord | None: ...

    def update_secret_hash(self, principal_id: int, secret_hash: str) -> None:
        """:raises PrincipalNotFoundError: when ``principal_id`` is unknown."""


class InMemoryPrincipalDirectory(PrincipalDirectory):
    """Dictionary-backed directory for unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[int, PrincipalRecord] = {}
        self._ids = itertools.count(1)

    def add(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        full_name: str = "Test User",
    ) -> PrincipalRecord:
        record = PrincipalRecord(
            id=next(self._ids),
            username=username.strip().lower(),
            email=email.strip().lower(),
            full_name=full_name,
            password_hash=password_hash,
        )
        self._by_id[record.id] = record
        return record

    def remove(self, principal_id: int) -> None:
        self._by_id.pop(principal_id, None)

    def find_by_handle_or_contact(
        self, *, username: str | None = None, email: str | None = None
    ) -> PrincipalRecord | None:
        handle = username.strip().lower() if username else None
        contact = email.strip().lower() if email else None
        for record in self._by_id.values():
            if (handle and record.username == handle) or (contact and record.email == contact):
                return record
        return None

    def get(self, principal_id: int) -> PrincipalRecord | None:
        return self._by_id.get(principal_id)

    def update_secret_hash(self, principal_id: int, secret_hash: str) -> None:
        current = self._by_id.get(principal_id)
        if current is None:
            raise PrincipalNotFoundError(principal_id)
        self._by_id[principal_id] = replace(current, password_hash=secret_hash)
