"""
Unit tests for RedisRefreshTokenStore using fakeredis.

They cover set/get/clear, compare-and-swap (including a threaded race),
key expiry and the mapping of connection failures to StoreUnavailableError.
"""

from __future__ import annotations

import threading
from datetime import timedelta

import fakeredis
import pytest
import redis

from vidtube.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from vidtube.services._shared.errors import StoreUnavailableError


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis(decode_responses=True)
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisRefreshTokenStore(fake_redis, ttl=timedelta(days=10))


def test_set_and_get(store, fake_redis):
    store.set_current_refresh_token(1, "rt-1")
    assert store.get_current_refresh_token(1) == "rt-1"
    assert fake_redis.get("session:refresh:1") == "rt-1"


def test_get_missing_returns_none(store):
    assert store.get_current_refresh_token(404) is None


def test_set_overwrites(store):
    store.set_current_refresh_token(1, "rt-1")
    store.set_current_refresh_token(1, "rt-2")
    assert store.get_current_refresh_token(1) == "rt-2"


def test_keys_expire_with_refresh_lifetime(store, fake_redis):
    store.set_current_refresh_token(1, "rt-1")
    ttl = fake_redis.ttl("session:refresh:1")
    assert 0 < ttl <= int(timedelta(days=10).total_seconds())


def test_clear_is_idempotent(store):
    store.set_current_refresh_token(1, "rt-1")
    store.clear_current_refresh_token(1)
    store.clear_current_refresh_token(1)
    assert store.get_current_refresh_token(1) is None


def test_principals_are_isolated(store):
    store.set_current_refresh_token(1, "rt-a")
    store.set_current_refresh_token(2, "rt-b")
    store.clear_current_refresh_token(1)
    assert store.get_current_refresh_token(2) == "rt-b"


def test_compare_and_swap_success(store):
    store.set_current_refresh_token(1, "rt-1")
    assert store.compare_and_swap(1, "rt-1", "rt-2") is True
    assert store.get_current_refresh_token(1) == "rt-2"


def test_compare_and_swap_stale_expected(store):
    store.set_current_refresh_token(1, "rt-2")
    assert store.compare_and_swap(1, "rt-1", "rt-3") is False
    assert store.get_current_refresh_token(1) == "rt-2"


def test_compare_and_swap_after_clear(store):
    store.set_current_refresh_token(1, "rt-1")
    store.clear_current_refresh_token(1)
    assert store.compare_and_swap(1, "rt-1", "rt-2") is False
    assert store.get_current_refresh_token(1) is None


def test_compare_and_swap_decodes_bytes_clients():
    store = RedisRefreshTokenStore(fakeredis.FakeRedis())
    store.set_current_refresh_token(1, "rt-1")
    assert store.get_current_refresh_token(1) == "rt-1"
    assert store.compare_and_swap(1, "rt-1", "rt-2") is True


def test_concurrent_swaps_single_winner(fake_redis):
    store = RedisRefreshTokenStore(fake_redis)
    store.set_current_refresh_token(1, "rt-0")
    workers = 6
    barrier = threading.Barrier(workers)
    wins: list[bool] = []
    lock = threading.Lock()

    def attempt(i: int):
        barrier.wait()
        won = store.compare_and_swap(1, "rt-0", f"rt-{i + 1}")
        with lock:
            wins.append(won)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert wins.count(True) == 1
    assert store.get_current_refresh_token(1) != "rt-0"


class _BrokenRedis:
    """Client double whose every call fails like an unreachable server."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise redis.ConnectionError("connection refused")

        return _fail


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.set_current_refresh_token(1, "rt"),
        lambda s: s.get_current_refresh_token(1),
        lambda s: s.clear_current_refresh_token(1),
        lambda s: s.compare_and_swap(1, "a", "b"),
    ],
)
def test_connection_errors_surface_as_unavailable(call):
    store = RedisRefreshTokenStore(_BrokenRedis())
    with pytest.raises(StoreUnavailableError) as info:
        call(store)
    assert info.value.store == "redis"


def test_timeouts_surface_as_unavailable(fake_redis, monkeypatch):
    store = RedisRefreshTokenStore(fake_redis)

    def _timeout(*args, **kwargs):
        raise redis.TimeoutError("timed out")

    monkeypatch.setattr(fake_redis, "get", _timeout)
    with pytest.raises(StoreUnavailableError):
        store.get_current_refresh_token(1)
