"""Typer console interface for ``budget_facade``.

Each command opens the budget given by ``--budget-sync-id`` (or
``ACTUAL_BUDGET_SYNC_ID``), runs one facade operation, prints the result as
JSON (month categories render as a ``rich`` table), and shuts the client down.
Connection settings come from the environment; a local ``.env`` is loaded by
the root callback without overriding variables that are already set.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, TypeVar

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .budget import Budget, open_budget
from .errors import BudgetFacadeError
from .logging_setup import configure_logging
from .models import CategoryTransfer

T = TypeVar("T")

app = typer.Typer(
    name="budget-facade",
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Read and update an Actual budget through an actual-http-api server. "
        "Loads ACTUAL_SERVER_URL and ACTUAL_API_KEY from a local .env before running."
    ),
)
console = Console()

SyncIdOption = Annotated[
    str,
    typer.Option(
        "--budget-sync-id",
        envvar="ACTUAL_BUDGET_SYNC_ID",
        help="Sync id of the budget file to open.",
    ),
]


def _run(budget_sync_id: str, operation: Callable[[Budget], Awaitable[T]]) -> T:
    """Open the budget, await ``operation`` on it, and always shut down."""

    async def _main() -> T:
        async with open_budget(budget_sync_id) as budget:
            return await operation(budget)

    try:
        return asyncio.run(_main())
    except (BudgetFacadeError, httpx.HTTPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e


def _emit(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2, default=str))


def _load_json(raw: str, what: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"Error: {what} is not valid JSON: {e}", file=sys.stderr)
        raise typer.Exit(1) from e


# ---- months --------------------------------------------------------------------


@app.command("months")
def months_cmd(budget_sync_id: SyncIdOption) -> None:
    """List the budget months (``YYYY-MM``)."""
    _emit(_run(budget_sync_id, lambda b: b.get_months()))


@app.command("month")
def month_cmd(
    month: Annotated[str, typer.Argument(help="Month as YYYY-MM")],
    budget_sync_id: SyncIdOption,
) -> None:
    """Show a budget month snapshot."""
    _emit(_run(budget_sync_id, lambda b: b.get_month(month)))


@app.command("month-categories")
def month_categories_cmd(
    month: Annotated[str, typer.Argument(help="Month as YYYY-MM")],
    budget_sync_id: SyncIdOption,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
) -> None:
    """Show every category of a month with its budgeted amount."""
    categories = _run(budget_sync_id, lambda b: b.get_month_categories(month))
    if as_json:
        _emit(categories)
        return

    table = Table(title=f"Categories {month}")
    table.add_column("id", style="dim")
    table.add_column("name")
    table.add_column("budgeted", justify="right")
    table.add_column("carryover", justify="center")
    for category in categories:
        table.add_row(
            str(category.get("id", "")),
            str(category.get("name", "")),
            str(category.get("budgeted", "")),
            "yes" if category.get("carryover") else "",
        )
    console.print(table)


@app.command("set-budget")
def set_budget_cmd(
    month: Annotated[str, typer.Argument(help="Month as YYYY-MM")],
    category_id: Annotated[str, typer.Argument(help="Category id")],
    budget_sync_id: SyncIdOption,
    budgeted: Annotated[int | None, typer.Option(help="Budgeted amount in minor units")] = None,
    carryover: Annotated[bool | None, typer.Option("--carryover/--no-carryover", help="Carryover flag")] = None,
) -> None:
    """Update the budgeted amount and/or carryover of a month category."""
    _run(
        budget_sync_id,
        lambda b: b.update_month_category(month, category_id, budgeted=budgeted, carryover=carryover),
    )
    typer.echo("ok")


@app.command("transfer")
def transfer_cmd(
    month: Annotated[str, typer.Argument(help="Month as YYYY-MM")],
    amount: Annotated[int, typer.Option("--amount", help="Amount in minor units; may be negative")],
    budget_sync_id: SyncIdOption,
    from_category_id: Annotated[str | None, typer.Option("--from", help="Source category id")] = None,
    to_category_id: Annotated[str | None, typer.Option("--to", help="Destination category id")] = None,
) -> None:
    """Move budgeted money between two categories of a month."""
    transfer = CategoryTransfer(amount=amount, from_category_id=from_category_id, to_category_id=to_category_id)
    _run(budget_sync_id, lambda b: b.add_category_transfer(month, transfer))
    typer.echo("ok")


# ---- accounts / transactions ---------------------------------------------------


@app.command("accounts")
def accounts_cmd(budget_sync_id: SyncIdOption) -> None:
    """List accounts."""
    _emit(_run(budget_sync_id, lambda b: b.get_accounts()))


@app.command("transactions")
def transactions_cmd(
    account_id: Annotated[str, typer.Argument(help="Account id")],
    since_date: Annotated[str, typer.Argument(help="First date, YYYY-MM-DD")],
    budget_sync_id: SyncIdOption,
    until_date: Annotated[str | None, typer.Option("--until", help="Last date, YYYY-MM-DD (default: today)")] = None,
) -> None:
    """List transactions of an account in a date range."""
    _emit(_run(budget_sync_id, lambda b: b.get_transactions(account_id, since_date, until_date)))


@app.command("add-transaction")
def add_transaction_cmd(
    account_id: Annotated[str, typer.Argument(help="Account id")],
    transaction_json: Annotated[str, typer.Argument(help="Transaction object as JSON")],
    budget_sync_id: SyncIdOption,
) -> None:
    """Add one transaction and print what the server returned for it."""
    transaction = _load_json(transaction_json, "transaction")
    result = _run(budget_sync_id, lambda b: b.add_transaction(account_id, transaction))
    _emit(result.value)


# ---- categories / payees -------------------------------------------------------


@app.command("categories")
def categories_cmd(budget_sync_id: SyncIdOption) -> None:
    """List categories."""
    _emit(_run(budget_sync_id, lambda b: b.get_categories()))


@app.command("category-groups")
def category_groups_cmd(budget_sync_id: SyncIdOption) -> None:
    """List category groups."""
    _emit(_run(budget_sync_id, lambda b: b.get_category_groups()))


@app.command("payees")
def payees_cmd(budget_sync_id: SyncIdOption) -> None:
    """List payees."""
    _emit(_run(budget_sync_id, lambda b: b.get_payees()))


@app.callback()
def _root(
    log_level: Annotated[str | None, typer.Option(help="Log level (falls back to BUDGET_FACADE_LOG_LEVEL)")] = None,
) -> None:
    """Root command: load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    app()
