"""Exception taxonomy for the ledger engine."""

from __future__ import annotations


class LedgerError(Exception):
    """User-visible ledger failure.

    ``retryable`` tells the caller whether repeating the same request can succeed.
    """

    retryable = False

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class FinancialSafetyError(ValueError):
    """A monetary value is non-finite or outside the storable integer range."""


class AccountNotFoundError(LedgerError):
    """A transfer references an account that does not exist in the budget."""

    def __init__(self, account_id: int, *, budget_id: int) -> None:
        super().__init__(
            f"Account {account_id} not found in budget {budget_id}", operation="create_transfer"
        )
        self.account_id = account_id
        self.budget_id = budget_id


class LedgerUnavailableError(LedgerError):
    """The store kept rejecting a mutation; nothing was written."""

    retryable = True


class InvariantViolation(AssertionError):
    """A persisted ledger row breaks the cumulative or ghost-free invariant."""

    def __init__(self, violations: list) -> None:
        summary = "; ".join(str(v) for v in violations[:5])
        super().__init__(f"{len(violations)} ledger invariant violation(s): {summary}")
        self.violations = violations
