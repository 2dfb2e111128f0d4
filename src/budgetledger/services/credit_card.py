"""Credit-card funding engine.

A card's CC Payment category accumulates the *funded* part of the card's
spending: money that was already budgeted in the spending category and is
now reserved to pay the card. Unfunded spending stays behind as credit
overspending on the spending category.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..logging_config import get_logger
from ..models.account import Account
from ..models.budget_month import BudgetMonth
from ..models.category import Category, CategoryGroup
from .activity import available_for, calculate_available
from .carryforward import resolve_carryforward

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

logger = get_logger(__name__)


@dataclass(slots=True)
class CreditCardFunding:
    """Breakdown of one card's payment-category activity for a month."""

    funded_by_category: dict[int, int] = field(default_factory=dict)
    payments: int = 0

    @property
    def total_funded(self) -> int:
        return sum(self.funded_by_category.values())

    @property
    def activity(self) -> int:
        return self.total_funded - self.payments


def calculate_funded_amount(net_spending: int, available_after: int) -> int:
    """Portion of a category's card spending that moves to the payment category.

    Net refunds move in full (negative). Spending moves only up to the
    cushion the category had before the spending.
    """

    if net_spending <= 0:
        return net_spending
    available_before = available_after + net_spending
    return min(max(0, available_before), net_spending)


def calculate_payment_category(ctx: "LedgerContext", account_id: int, month: str) -> CreditCardFunding:
    """Funded spending and payments for one card in one month."""

    spending = ctx.transactions.card_spending(
        account_id, month, budget_id=ctx.budget_id, today=ctx.today
    )
    funding = CreditCardFunding()
    for category_id, net_spending in spending.items():
        category = ctx.category(category_id)
        if category is None:
            continue
        available_after = available_for(ctx, category, month)
        funding.funded_by_category[category_id] = calculate_funded_amount(net_spending, available_after)
    funding.payments = ctx.transactions.card_payments(
        account_id, month, budget_id=ctx.budget_id, today=ctx.today
    )
    return funding


def recompute_payment_month(
    ctx: "LedgerContext", payment_category: Category, month: str, *, assigned: Optional[int] = None
) -> Optional[BudgetMonth]:
    """Rebuild a CC Payment category's row from its card's funded activity."""

    funding = calculate_payment_category(ctx, payment_category.linked_account_id, month)
    if assigned is None:
        existing = ctx.ledger.get(payment_category.id, month, budget_id=ctx.budget_id)
        assigned = existing.assigned if existing is not None else 0
    carryforward = resolve_carryforward(ctx, payment_category, month)
    return ctx.ledger.upsert(
        payment_category.id,
        month,
        budget_id=ctx.budget_id,
        assigned=assigned,
        activity=funding.activity,
        available=calculate_available(carryforward, assigned, funding.activity),
    )


def ensure_payment_category(
    ctx: "LedgerContext", account: Account, name: Optional[str] = None
) -> tuple[Optional[Category], bool]:
    """Find or create the CC Payment category of a credit account.

    Returns ``(category, created)``; non-credit accounts yield ``(None, False)``.
    """

    if not account.is_credit:
        return None, False
    existing = ctx.categories.get_by_linked_account(account.id, budget_id=ctx.budget_id)
    if existing is not None:
        return existing, False

    group_name = ctx.config.CREDIT_CARD_GROUP_NAME
    group = ctx.categories.find_group_by_name(group_name, budget_id=ctx.budget_id)
    if group is None:
        group = ctx.categories.create_group(CategoryGroup(name=group_name), budget_id=ctx.budget_id)
    category = ctx.categories.create_category(
        Category(group_id=group.id, name=name or account.name, linked_account_id=account.id),
        budget_id=ctx.budget_id,
    )
    logger.info(
        f"Created CC Payment category '{category.name}' for account {account.id}",
        extra={"budget_id": ctx.budget_id, "account_id": account.id, "category_id": category.id},
    )
    return category, True
