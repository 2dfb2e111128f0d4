"""Zero-based budgeting ledger engine."""

from .config import BaseConfig, DevConfig, TestConfig

__all__ = ["BaseConfig", "DevConfig", "TestConfig"]

__version__ = "0.1.0"
