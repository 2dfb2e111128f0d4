"""Ready to Assign: cash not yet given a job."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from ..months import parse_month, previous_month
from .month_view import ledger_for_month
from .overspending import cash_overspending_for_month

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext


@dataclass(slots=True, frozen=True)
class RTAInputs:
    """Aggregates feeding the Ready to Assign figure."""

    cash_balance: int
    positive_cc_balances: int
    total_available: int = 0
    future_assigned: int = 0
    total_overspending: int = 0
    cash_overspending: int = 0
    has_complete_month: bool = True
    is_past_month: bool = False


def calculate_ready_to_assign(inputs: RTAInputs) -> int:
    """Combine the aggregates; past months never show a negative figure."""

    rta = inputs.cash_balance + inputs.positive_cc_balances
    if inputs.has_complete_month:
        credit_overspending_correction = inputs.total_overspending - inputs.cash_overspending
        rta -= inputs.total_available + inputs.future_assigned + credit_overspending_correction
    if inputs.is_past_month and rta < 0:
        return 0
    return rta


@dataclass(slots=True, frozen=True)
class RTABreakdown:
    ready_to_assign: int
    left_over_from_previous_month: int
    inflow_this_month: int
    positive_cc_balances: int
    cash_overspending_previous_month: int
    assigned_this_month: int
    assigned_in_future: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def calculate_breakdown(
    *,
    ready_to_assign: int,
    inflow_this_month: int,
    positive_cc_balances: int,
    cash_overspending_previous_month: int,
    assigned_this_month: int,
    assigned_in_future: int,
) -> RTABreakdown:
    """Derive "left over from last month" so the breakdown adds up to the RTA."""

    left_over = (
        ready_to_assign
        - inflow_this_month
        - positive_cc_balances
        + assigned_this_month
        + assigned_in_future
        + cash_overspending_previous_month
    )
    return RTABreakdown(
        ready_to_assign=ready_to_assign,
        left_over_from_previous_month=left_over,
        inflow_this_month=inflow_this_month,
        positive_cc_balances=positive_cc_balances,
        cash_overspending_previous_month=cash_overspending_previous_month,
        assigned_this_month=assigned_this_month,
        assigned_in_future=assigned_in_future,
    )


def positive_cc_balances(ctx: "LedgerContext") -> int:
    """Cards in credit count as cash."""

    balances = ctx.transactions.credit_balances(budget_id=ctx.budget_id, today=ctx.today)
    return sum(max(0, balance) for balance in balances.values())


def gather_inputs(ctx: "LedgerContext", month: str) -> RTAInputs:
    cash_balance = ctx.transactions.cash_balance(budget_id=ctx.budget_id, today=ctx.today)
    positive = positive_cc_balances(ctx)
    is_past = parse_month(month) < parse_month(ctx.current_month)

    complete = ctx.ledger.latest_month_with_at_least(
        ctx.config.COMPLETE_MONTH_THRESHOLD, budget_id=ctx.budget_id, up_to=month
    )
    if complete is None:
        return RTAInputs(
            cash_balance=cash_balance,
            positive_cc_balances=positive,
            has_complete_month=False,
            is_past_month=is_past,
        )

    lines = ledger_for_month(ctx, complete)
    total_available = sum(line.available for line in lines)
    total_overspending = sum(
        -line.available
        for line in lines
        if line.available < 0 and line.linked_account_id is None
    )
    return RTAInputs(
        cash_balance=cash_balance,
        positive_cc_balances=positive,
        total_available=total_available,
        future_assigned=ctx.ledger.sum_assigned(budget_id=ctx.budget_id, after=complete),
        total_overspending=total_overspending,
        cash_overspending=cash_overspending_for_month(ctx, complete),
        is_past_month=is_past,
    )


def ready_to_assign(ctx: "LedgerContext", month: str) -> int:
    return calculate_ready_to_assign(gather_inputs(ctx, month))


def ready_to_assign_breakdown(ctx: "LedgerContext", month: str) -> RTABreakdown:
    return calculate_breakdown(
        ready_to_assign=ready_to_assign(ctx, month),
        inflow_this_month=ctx.transactions.income_inflow(month, budget_id=ctx.budget_id, today=ctx.today),
        positive_cc_balances=positive_cc_balances(ctx),
        cash_overspending_previous_month=cash_overspending_for_month(ctx, previous_month(month)),
        assigned_this_month=ctx.ledger.sum_assigned(budget_id=ctx.budget_id, month=month),
        assigned_in_future=ctx.ledger.sum_assigned(budget_id=ctx.budget_id, after=month),
    )
