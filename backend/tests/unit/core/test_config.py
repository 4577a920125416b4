"""Unit tests for environment-driven configuration helpers."""

from __future__ import annotations

import pytest
from session_auth.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
)


@pytest.mark.parametrize(
    "raw,expected", [("1", True), ("Yes", True), ("on", True), ("0", False), ("nope", False)]
)
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("FLAG_UNDER_TEST", raw)
    assert env_bool("FLAG_UNDER_TEST") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("FLAG_UNDER_TEST", raising=False)
    assert env_bool("FLAG_UNDER_TEST", True) is True


def test_env_int(monkeypatch):
    monkeypatch.setenv("TTL_UNDER_TEST", "42")
    assert env_int("TTL_UNDER_TEST", 7) == 42
    monkeypatch.setenv("TTL_UNDER_TEST", " ")
    assert env_int("TTL_UNDER_TEST", 7) == 7


@pytest.mark.parametrize(
    "name,expected",
    [
        ("testing", TestingConfig),
        ("PRODUCTION", ProductionConfig),
        ("development", DevelopmentConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config(monkeypatch, name, expected):
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is expected


def test_testing_config_never_uses_redis():
    assert TestingConfig.REDIS_URL is None
    assert TestingConfig.TESTING is True
