"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from budgetledger.config import BaseConfig, TestConfig


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_DATA_DIR", str(tmp_path))
    for name in (
        "DEV_MODE",
        "DATABASE_URL",
        "COMPLETE_MONTH_THRESHOLD",
        "MAX_RETRIES",
        "STRICT_INVARIANTS",
        "ISOLATION_LEVEL",
    ):
        monkeypatch.delenv(f"BUDGETLEDGER_{name}", raising=False)


def test_defaults_point_into_data_dir(tmp_path):
    config = BaseConfig()

    assert config.DATA_DIR == tmp_path.resolve()
    assert config.DATABASE_URL == f"sqlite:///{tmp_path.resolve() / 'budgetledger.db'}"
    assert config.is_sqlite
    assert config.COMPLETE_MONTH_THRESHOLD == 10
    assert config.MAX_ASSIGNED_MILLIUNITS == 100_000_000_000_000
    assert config.MAX_RETRIES == 3


def test_threshold_from_environment(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_COMPLETE_MONTH_THRESHOLD", "4")
    assert BaseConfig().COMPLETE_MONTH_THRESHOLD == 4


def test_unparseable_integer_falls_back(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_COMPLETE_MONTH_THRESHOLD", "ten")
    assert BaseConfig().COMPLETE_MONTH_THRESHOLD == 10


def test_threshold_must_be_positive(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_COMPLETE_MONTH_THRESHOLD", "0")
    with pytest.raises(ValueError):
        BaseConfig()


@pytest.mark.parametrize(("dev_mode", "expected"), [("true", True), ("false", False)])
def test_strict_invariants_follow_dev_mode(monkeypatch, dev_mode, expected):
    monkeypatch.setenv("BUDGETLEDGER_DEV_MODE", dev_mode)
    assert BaseConfig().STRICT_INVARIANTS is expected


def test_strict_invariants_override(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_DEV_MODE", "true")
    monkeypatch.setenv("BUDGETLEDGER_STRICT_INVARIANTS", "off")
    assert BaseConfig().STRICT_INVARIANTS is False


def test_test_config_is_always_strict(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_STRICT_INVARIANTS", "false")
    assert TestConfig().STRICT_INVARIANTS is True


def test_retries_never_drop_below_one(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_MAX_RETRIES", "0")
    assert BaseConfig().MAX_RETRIES == 1


def test_sqlite_engine_options():
    options = BaseConfig().sqlalchemy_engine_options()

    assert options["connect_args"] == {"check_same_thread": False}
    assert options["isolation_level"] == "SERIALIZABLE"


def test_non_sqlite_engine_options(monkeypatch):
    monkeypatch.setenv("BUDGETLEDGER_DATABASE_URL", "postgresql://ledger@localhost/ledger")
    monkeypatch.setenv("BUDGETLEDGER_ISOLATION_LEVEL", "")
    options = BaseConfig().sqlalchemy_engine_options()

    assert not BaseConfig().is_sqlite
    assert options == {}
