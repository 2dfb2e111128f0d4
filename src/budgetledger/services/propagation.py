"""Forward propagation of ledger rows through time.

The walk only visits rows that already exist (plus months explicitly asked
for), in month order, as an iterative loop. It never materializes
speculative future months.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from ..logging_config import get_logger
from ..models.budget_month import BudgetMonth
from ..models.category import Category
from .activity import recompute_category_month
from .credit_card import recompute_payment_month

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

logger = get_logger(__name__)


def recompute(
    ctx: "LedgerContext", category: Category, month: str, *, assigned: Optional[int] = None
) -> Optional[BudgetMonth]:
    """Rebuild one row with the rule matching the category kind."""

    if category.is_credit_card_payment:
        return recompute_payment_month(ctx, category, month, assigned=assigned)
    return recompute_category_month(ctx, category, month, assigned=assigned)


def propagate(
    ctx: "LedgerContext", category: Category, month: str, *, include: Iterable[str] = ()
) -> list[str]:
    """Recompute every existing row after ``month``; return the months visited.

    ``include`` adds months that must be visited even without a row yet
    (months where real card activity now needs funding).
    """

    later = ctx.ledger.rows_after(category.id, month, budget_id=ctx.budget_id, for_update=True)
    months = sorted({row.month for row in later} | {m for m in include if m > month})
    for current in months:
        recompute(ctx, category, current)
    if months:
        logger.debug(
            f"Propagated category {category.id} from {month} through {len(months)} month(s)",
            extra={"budget_id": ctx.budget_id, "category_id": category.id, "rows": len(months)},
        )
    return months


def _carryforward_is_linear(category: Category, before: int, after: int) -> bool:
    if category.is_credit_card_payment:
        return True
    return before >= 0 and after >= 0


def propagate_delta(
    ctx: "LedgerContext", category: Category, month: str, *, before: int, after: int
) -> list[str]:
    """Shift later rows by a change of ``available`` at ``month``.

    Additive while the carryforward passes the change through unchanged;
    from the first row where that no longer holds, falls back to full
    recomputation for the rest of the chain.
    """

    visited: list[str] = []
    previous_before, previous_after = before, after
    for row in ctx.ledger.rows_after(category.id, month, budget_id=ctx.budget_id, for_update=True):
        if not _carryforward_is_linear(category, previous_before, previous_after):
            recompute(ctx, category, row.month)
            visited.append(row.month)
            visited.extend(propagate(ctx, category, row.month))
            logger.debug(
                f"Delta propagation for category {category.id} fell back to recompute at {row.month}",
                extra={"budget_id": ctx.budget_id, "category_id": category.id, "month": row.month},
            )
            break
        shift = previous_after - previous_before
        if shift == 0:
            break
        old_available = row.available
        new_available = old_available + shift
        ctx.ledger.upsert(
            category.id,
            row.month,
            budget_id=ctx.budget_id,
            assigned=row.assigned,
            activity=row.activity,
            available=new_available,
        )
        visited.append(row.month)
        previous_before, previous_after = old_available, new_available
    return visited


def fund_credit_cards(ctx: "LedgerContext", category: Category, months: Iterable[str]) -> None:
    """Re-fund the CC Payment rows of cards carrying ``category`` spending in ``months``."""

    if category.is_credit_card_payment:
        return
    pending: dict[int, set[str]] = {}
    for month in months:
        for account_id in ctx.transactions.cards_with_spending(
            category.id, month, budget_id=ctx.budget_id, today=ctx.today
        ):
            pending.setdefault(account_id, set()).add(month)

    for account_id, card_months in sorted(pending.items()):
        payment = ctx.categories.get_by_linked_account(account_id, budget_id=ctx.budget_id)
        if payment is None:
            continue
        ordered = sorted(card_months)
        recompute(ctx, payment, ordered[0])
        propagate(ctx, payment, ordered[0], include=ordered[1:])


def settle(
    ctx: "LedgerContext", category: Category, month: str, *, assigned: Optional[int] = None
) -> Optional[BudgetMonth]:
    """Recompute (category, month), walk its chain, then re-fund affected cards."""

    if ctx.is_income(category):
        return None
    row = recompute(ctx, category, month, assigned=assigned)
    visited = propagate(ctx, category, month)
    fund_credit_cards(ctx, category, [month, *visited])
    return row


def refresh_all(ctx: "LedgerContext", month: str) -> int:
    """Recompute every non-income category for ``month`` and its chain.

    Regular categories go first since card funding reads their available.
    Returns the number of categories refreshed.
    """

    regular: list[Category] = []
    payments: list[Category] = []
    for category, _group in ctx.categories.list_with_groups(budget_id=ctx.budget_id):
        (payments if category.is_credit_card_payment else regular).append(category)

    touched: set[str] = {month}
    for category in regular:
        recompute(ctx, category, month)
        touched.update(propagate(ctx, category, month))

    for payment in payments:
        card_months = ctx.transactions.card_activity_months(
            payment.linked_account_id, budget_id=ctx.budget_id, today=ctx.today
        )
        recompute(ctx, payment, month)
        propagate(ctx, payment, month, include=[m for m in card_months if m in touched])

    logger.info(
        f"Refreshed {len(regular) + len(payments)} categories for {month}",
        extra={"budget_id": ctx.budget_id, "month": month},
    )
    return len(regular) + len(payments)
