# vidtube/infra/redis/redis_refresh_token_store.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta

import redis  # type: ignore[import-untyped]

from vidtube.services._shared.errors import StoreUnavailableError
from vidtube.services._shared.ports import RefreshTokenStore

log = logging.getLogger(__name__)


class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    One string key per principal, ``session:refresh:<id>``, holding the
    current token. Keys expire with the refresh token lifetime so abandoned
    sessions clean themselves up. Rotation uses WATCH/MULTI/EXEC: the swap
    only commits if the key was not touched between the compare and the
    write.

    :param r: A Redis client (already connected, socket timeouts set).
    :param ttl: Lifetime applied to every write; ``None`` keeps keys forever.
    :param key_prefix: Namespace for the keys.
    """

    backend = "redis"

    def __init__(
        self,
        r: redis.Redis,
        *,
        ttl: timedelta | None = None,
        key_prefix: str = "session:refresh",
    ) -> None:
        self.r = r
        self.ttl = ttl
        self.key_prefix = key_prefix

    # -------------------- helpers --------------------

    def _k(self, principal_id: int) -> str:
        return f"{self.key_prefix}:{principal_id}"

    def _ex(self) -> int | None:
        if self.ttl is None:
            return None
        return max(1, int(self.ttl.total_seconds()))

    @staticmethod
    def _s(value: bytes | str | None) -> str | None:
        if isinstance(value, bytes | bytearray):
            return value.decode()
        return value

    @contextmanager
    def _unavailable_on_redis_error(self) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            log.error(
                "session store failure: %s",
                exc.__class__.__name__,
                extra={"event": "store.error", "store": self.backend},
            )
            raise StoreUnavailableError(self.backend) from exc

    # -------------------- API ------------------------

    def set_current_refresh_token(self, principal_id: int, token: str) -> None:
        with self._unavailable_on_redis_error():
            self.r.set(self._k(principal_id), token, ex=self._ex())

    def get_current_refresh_token(self, principal_id: int) -> str | None:
        with self._unavailable_on_redis_error():
            return self._s(self.r.get(self._k(principal_id)))

    def clear_current_refresh_token(self, principal_id: int) -> None:
        with self._unavailable_on_redis_error():
            self.r.delete(self._k(principal_id))

    def compare_and_swap(self, principal_id: int, expected: str, new: str) -> bool:
        """
        Replace ``expected`` with ``new`` if and only if it is still current.

        A concurrent write to the key aborts EXEC with ``WatchError``; the loop
        then re-reads, and the second pass sees the other writer's value and
        returns ``False``.
        """
        key = self._k(principal_id)
        with self._unavailable_on_redis_error():
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        if self._s(p.get(key)) != expected:
                            p.unwatch()
                            return False
                        p.multi()
                        p.set(key, new, ex=self._ex())
                        p.execute()
                    return True
                except redis.WatchError:
                    # Concurrent modification detected; retry loop
                    continue
