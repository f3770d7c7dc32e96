"""Configuration helpers and start-up validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from vidtube.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    engine_options_for,
    env_bool,
    env_seconds,
    get_config,
    validate_config,
)

GOOD = {
    "SESSION_STORE_BACKEND": "database",
    "SECRET_KEY": "real-flask-secret",
    "JWT_SECRET_KEY": "real-access-secret",
    "JWT_REFRESH_SECRET_KEY": "real-refresh-secret",
}


def test_env_bool(monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    assert env_bool("FLAG") is True
    monkeypatch.setenv("FLAG", "off")
    assert env_bool("FLAG", True) is False
    monkeypatch.delenv("FLAG")
    assert env_bool("FLAG", True) is True


def test_env_seconds(monkeypatch):
    monkeypatch.setenv("TTL_SECONDS", "90")
    assert env_seconds("TTL_SECONDS", 10) == timedelta(seconds=90)
    monkeypatch.setenv("TTL_SECONDS", "soon")
    assert env_seconds("TTL_SECONDS", 10) == timedelta(seconds=10)


def test_engine_options_only_for_postgres():
    assert engine_options_for("sqlite:///:memory:", 2.0) == {}
    opts = engine_options_for("postgresql+psycopg2://u:p@db/app", 2.5)
    assert opts["pool_timeout"] == 2.5
    assert opts["connect_args"] == {"connect_timeout": 2}


def test_default_lifetimes():
    assert TestingConfig.JWT_ACCESS_TOKEN_EXPIRES == timedelta(minutes=15)
    assert TestingConfig.JWT_REFRESH_TOKEN_EXPIRES == timedelta(days=10)


@pytest.mark.parametrize(
    "env, expected",
    [("production", ProductionConfig), ("testing", TestingConfig), ("unknown", DevelopmentConfig)],
)
def test_get_config(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected


def test_validate_accepts_good_config():
    validate_config(GOOD)


def test_validate_rejects_unknown_backend():
    with pytest.raises(RuntimeError, match="SESSION_STORE_BACKEND"):
        validate_config({**GOOD, "SESSION_STORE_BACKEND": "memcached"})


def test_validate_requires_redis_url():
    with pytest.raises(RuntimeError, match="REDIS_URL"):
        validate_config({**GOOD, "SESSION_STORE_BACKEND": "redis", "REDIS_URL": None})


def test_validate_requires_distinct_secrets():
    with pytest.raises(RuntimeError, match="must differ"):
        validate_config({**GOOD, "JWT_REFRESH_SECRET_KEY": GOOD["JWT_SECRET_KEY"]})


def test_validate_rejects_placeholders_in_production():
    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        validate_config({**GOOD, "JWT_SECRET_KEY": "CHANGE_ME_JWT"})


def test_validate_allows_placeholders_when_testing():
    validate_config({**GOOD, "SECRET_KEY": "CHANGE_ME", "TESTING": True})
