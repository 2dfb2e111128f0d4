"""Carryforward resolver: the opening balance a category inherits from earlier months."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..models.category import Category

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext


@dataclass(slots=True, frozen=True)
class OverspendingSplit:
    """Negative available decomposed by the kind of account that caused it."""

    cash: int = 0
    credit: int = 0

    @property
    def total(self) -> int:
        return self.cash + self.credit


def split_overspending(available: int, cash_spending: int) -> OverspendingSplit:
    """Split a negative available into cash and credit overspending.

    Cash overspending is capped by what was actually spent from cash accounts
    that month; the remainder came from cards.
    """

    if available >= 0:
        return OverspendingSplit()
    total = -available
    cash = min(total, max(0, cash_spending))
    return OverspendingSplit(cash=cash, credit=total - cash)


def compute_carryforward(
    prior_available: int, *, is_credit_card_payment: bool, cash_spending: int = 0
) -> int:
    """Carryforward from a prior row's available.

    Surpluses always roll. CC Payment debt persists unchanged. For regular
    categories only credit overspending persists; cash overspending resets.
    """

    if prior_available >= 0 or is_credit_card_payment:
        return prior_available
    return -split_overspending(prior_available, cash_spending).credit


def resolve_carryforward(ctx: "LedgerContext", category: Category, month: str) -> int:
    """Carryforward into ``month`` from the latest persisted row before it."""

    prior = ctx.ledger.latest_before(category.id, month, budget_id=ctx.budget_id)
    if prior is None:
        return 0
    if prior.available >= 0 or category.is_credit_card_payment:
        return compute_carryforward(
            prior.available, is_credit_card_payment=category.is_credit_card_payment
        )
    cash_spending = ctx.transactions.cash_spending(
        category.id, prior.month, budget_id=ctx.budget_id, today=ctx.today
    )
    return compute_carryforward(prior.available, is_credit_card_payment=False, cash_spending=cash_spending)
