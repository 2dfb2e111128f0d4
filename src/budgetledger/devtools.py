"""Small helpers for dev-mode logging and invariant enforcement."""

from __future__ import annotations

import traceback
from typing import Any, Mapping, Sequence

from .config import BaseConfig
from .errors import InvariantViolation
from .logging_config import get_logger

logger = get_logger(__name__)


def in_dev_mode(config: BaseConfig | None) -> bool:
    """Return True when dev mode logging is enabled."""

    return bool(getattr(config, "DEV_MODE", False)) if config is not None else False


def dev_log(
    config: BaseConfig | None,
    message: str,
    *,
    exc: Exception | None = None,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Print developer-friendly diagnostics when dev mode is enabled."""

    if not in_dev_mode(config):
        return

    parts = [f"[DEV] {message}"]
    if context:
        extras = " ".join(f"{k}={v}" for k, v in context.items())
        if extras:
            parts.append(f"({extras})")
    print(" ".join(parts))
    if exc:
        traceback.print_exception(exc)


def enforce_invariants(
    config: BaseConfig | None, violations: Sequence[Any], *, operation: str
) -> None:
    """Log ledger invariant violations; raise when strict invariants are on."""

    if not violations:
        return
    for violation in violations:
        logger.error(
            f"Ledger invariant violated after {operation}: {violation}",
            extra={"operation": operation},
        )
    dev_log(config, "Ledger invariant violated", context={"operation": operation, "count": len(violations)})
    if getattr(config, "STRICT_INVARIANTS", True):
        raise InvariantViolation(list(violations))
