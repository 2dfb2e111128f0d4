"""Command-line interface for the ledger engine."""

from __future__ import annotations

import click

from .config import BaseConfig
from .infra.database import bootstrap_database
from .logging_config import setup_logging
from .money import format_milliunits
from .services.ledger_service import LedgerService


def _service(ctx: click.Context) -> LedgerService:
    """Build the service on first use; tests may pre-seed ``obj['service']``."""

    ctx.ensure_object(dict)
    if "service" not in ctx.obj:
        config = ctx.obj.get("config") or BaseConfig()
        setup_logging(config)
        _engine, session_factory = bootstrap_database(config)
        ctx.obj["config"] = config
        ctx.obj["service"] = LedgerService(session_factory, config=config)
    return ctx.obj["service"]


def _money(value: int) -> str:
    return format_milliunits(value)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Zero-based budget ledger."""

    ctx.ensure_object(dict)


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""

    _service(ctx)
    click.echo(f"Database ready: {ctx.obj['config'].DATABASE_URL}")


@cli.command("create-budget")
@click.argument("name")
@click.option("--currency", default="USD", show_default=True, help="ISO-4217 currency code")
@click.pass_context
def create_budget(ctx: click.Context, name: str, currency: str) -> None:
    """Create a budget and print its id."""

    budget = _service(ctx).create_budget(name, currency_code=currency)
    click.echo(f"Created budget {budget.id}: {budget.name}")


@cli.command("refresh-month")
@click.argument("budget_id", type=int)
@click.argument("month")
@click.pass_context
def refresh_month(ctx: click.Context, budget_id: int, month: str) -> None:
    """Recompute every category of MONTH (YYYY-MM)."""

    count = _service(ctx).refresh_all_activity(budget_id, month)
    click.echo(f"Refreshed {count} categories for {month}")


@cli.command("rta")
@click.argument("budget_id", type=int)
@click.argument("month")
@click.option("--breakdown", is_flag=True, default=False, help="Show how the figure is built")
@click.pass_context
def rta(ctx: click.Context, budget_id: int, month: str, breakdown: bool) -> None:
    """Print Ready to Assign for MONTH."""

    service = _service(ctx)
    if not breakdown:
        click.echo(f"Ready to Assign {month}: {_money(service.get_ready_to_assign(budget_id, month))}")
        return
    result = service.get_ready_to_assign_breakdown(budget_id, month)
    for label, value in result.to_dict().items():
        click.echo(f"{label.replace('_', ' ')}: {_money(value)}")


@cli.command("overspending")
@click.argument("budget_id", type=int)
@click.argument("month")
@click.pass_context
def overspending(ctx: click.Context, budget_id: int, month: str) -> None:
    """List overspent categories and whether cash or credit caused it."""

    types = _service(ctx).get_overspending_types(budget_id, month)
    if not types:
        click.echo("No overspending")
        return
    for category_id, kind in sorted(types.items()):
        click.echo(f"{category_id}\t{kind}")


@cli.command("ledger")
@click.argument("budget_id", type=int)
@click.argument("month")
@click.pass_context
def ledger(ctx: click.Context, budget_id: int, month: str) -> None:
    """Print the ledger rows of MONTH."""

    for line in _service(ctx).get_ledger_for_month(budget_id, month):
        click.echo(
            f"{line.group_name} / {line.category_name}\t"
            f"{_money(line.assigned)}\t{_money(line.activity)}\t{_money(line.available)}"
        )


@cli.command("verify")
@click.argument("budget_id", type=int)
@click.pass_context
def verify(ctx: click.Context, budget_id: int) -> None:
    """Check every ledger row; exits non-zero on violations."""

    violations = _service(ctx).verify_ledger(budget_id)
    if not violations:
        click.echo("Ledger OK")
        return
    for violation in violations:
        click.echo(str(violation))
    ctx.exit(1)


if __name__ == "__main__":  # pragma: no cover
    cli()
