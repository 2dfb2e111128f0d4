"""Cash-vs-credit overspending classification."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .carryforward import split_overspending
from .month_view import ledger_for_month

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

CASH = "cash"
CREDIT = "credit"


def classify_overspending(
    available: int, cash_spending: int, *, is_credit_card_payment: bool = False
) -> Optional[str]:
    """Label a category's overspending; ``None`` when it is not overspent.

    When both kinds are present cash wins, being the more urgent liability.
    """

    if available >= 0:
        return None
    if is_credit_card_payment:
        return CREDIT
    split = split_overspending(available, cash_spending)
    return CASH if split.cash > 0 else CREDIT


def calculate_cash_overspending(available: int, cash_spending: int) -> int:
    return split_overspending(available, cash_spending).cash


def cash_overspending_for_month(ctx: "LedgerContext", month: str) -> int:
    """Total cash overspending of regular categories in ``month``."""

    total = 0
    for row, category in ctx.ledger.rows_for_month(month, budget_id=ctx.budget_id):
        if row.available >= 0 or category.is_credit_card_payment:
            continue
        cash_spending = ctx.transactions.cash_spending(
            category.id, month, budget_id=ctx.budget_id, today=ctx.today
        )
        total += calculate_cash_overspending(row.available, cash_spending)
    return total


def overspending_types(ctx: "LedgerContext", month: str) -> dict[int, str]:
    """Map of overspent category id to ``"cash"`` or ``"credit"``.

    Months without a row still count: debt carried into them shows on the
    virtual row, with no cash spending behind it.
    """

    result: dict[int, str] = {}
    for line in ledger_for_month(ctx, month):
        if line.available >= 0:
            continue
        is_payment = line.linked_account_id is not None
        cash_spending = 0
        if line.persisted and not is_payment:
            cash_spending = ctx.transactions.cash_spending(
                line.category_id, month, budget_id=ctx.budget_id, today=ctx.today
            )
        verdict = classify_overspending(line.available, cash_spending, is_credit_card_payment=is_payment)
        if verdict is not None:
            result[line.category_id] = verdict
    return result
