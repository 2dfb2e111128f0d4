"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip().replace("_", ""))
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "BudgetLedger"
    ENV_PREFIX = "BUDGETLEDGER_"
    DB_FILENAME = "budgetledger.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    CREDIT_CARD_GROUP_NAME = "Credit Card Payments"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool(self._key("DEV_MODE"), default=True)
        self.DATABASE_URL = os.getenv(self._key("DATABASE_URL"), self._build_sqlite_url())
        self.LOG_LEVEL = os.getenv(self._key("LOG_LEVEL"), "INFO").upper()
        self.ISOLATION_LEVEL = os.getenv(self._key("ISOLATION_LEVEL"), "SERIALIZABLE")
        self.COMPLETE_MONTH_THRESHOLD = _env_int(self._key("COMPLETE_MONTH_THRESHOLD"), 10)
        self.MAX_ASSIGNED_MILLIUNITS = _env_int(
            self._key("MAX_ASSIGNED_MILLIUNITS"), 100_000_000_000_000
        )
        self.MAX_RETRIES = max(1, _env_int(self._key("MAX_RETRIES"), 3))
        self.STRICT_INVARIANTS = _env_bool(self._key("STRICT_INVARIANTS"), default=self.DEV_MODE)
        if self.COMPLETE_MONTH_THRESHOLD < 1:
            raise ValueError("BUDGETLEDGER_COMPLETE_MONTH_THRESHOLD must be at least 1.")

    def _key(self, name: str) -> str:
        return f"{self.ENV_PREFIX}{name}"

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv(self._key("DATA_DIR"), "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = Path(self.DATA_DIR) / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.is_sqlite:
            engine_options["connect_args"] = {"check_same_thread": False}
        if self.ISOLATION_LEVEL:
            engine_options["isolation_level"] = self.ISOLATION_LEVEL
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite: strict invariants, no dev console noise."""

    __test__ = False

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.STRICT_INVARIANTS = True
