"""Unit tests for environment parsing helpers."""

from __future__ import annotations

import pytest
from authgate.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
    parse_role_ttls,
)


def test_parse_role_ttls_keeps_raw_values() -> None:
    assert parse_role_ttls("admin:never, clerk:480 ,bad, :5,x:") == {
        "admin": "never",
        "clerk": "480",
        "x": "",
    }


def test_parse_role_ttls_empty() -> None:
    assert parse_role_ttls(None) == {}
    assert parse_role_ttls("") == {}


@pytest.mark.parametrize("raw, expected", [("15", 15), (" 7 ", 7), ("", 3), ("abc", 3)])
def test_env_int(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("AUTHGATE_TEST_INT", raw)
    assert env_int("AUTHGATE_TEST_INT", 3) == expected


def test_env_int_unset(monkeypatch) -> None:
    monkeypatch.delenv("AUTHGATE_TEST_INT", raising=False)
    assert env_int("AUTHGATE_TEST_INT", None) is None


@pytest.mark.parametrize("raw, expected", [("yes", True), ("On", True), ("0", False), ("no", False)])
def test_env_bool(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("AUTHGATE_TEST_FLAG", raw)
    assert env_bool("AUTHGATE_TEST_FLAG") is expected


@pytest.mark.parametrize(
    "name, cls",
    [("testing", TestingConfig), ("PRODUCTION", ProductionConfig), ("nope", DevelopmentConfig)],
)
def test_get_config(monkeypatch, name, cls) -> None:
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is cls
