"""Budgeting engine client contract and the client provider.

Usage
-----
from budget_facade.client import get_client

client = await get_client()  # one client per budget
await client.download_budget(sync_id)

The facade only relies on the :class:`BudgetClient` protocol below; any object
with these coroutine methods can be injected (tests use a recording fake).
Dates are ``YYYY-MM-DD`` strings and amounts are integer minor units.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .config import ClientSettings, load_settings
from .logging_setup import get_logger
from .models import Account, BudgetMonth, Category, CategoryGroup, EntityId, Payee, Transaction

if TYPE_CHECKING:
    import httpx

    from .http_client import HttpConnection

logger = get_logger(__name__)


@runtime_checkable
class BudgetClient(Protocol):
    """Method surface the facade consumes from the budgeting engine."""

    async def download_budget(self, sync_id: str) -> None: ...

    # Months
    async def get_budget_months(self) -> list[str]: ...
    async def get_budget_month(self, month: str) -> BudgetMonth: ...
    async def set_budget_amount(self, month: str, category_id: EntityId, amount: int | float) -> Any: ...
    async def set_budget_carryover(self, month: str, category_id: EntityId, flag: bool) -> Any: ...

    # Accounts
    async def get_accounts(self) -> list[Account]: ...
    async def create_account(self, account: Account, initial_balance: int | None = None) -> Any: ...
    async def update_account(self, account_id: EntityId, account: Account) -> Any: ...
    async def delete_account(self, account_id: EntityId) -> Any: ...
    async def close_account(
        self,
        account_id: EntityId,
        transfer_account_id: EntityId | None,
        transfer_category_id: EntityId | None,
    ) -> Any: ...
    async def reopen_account(self, account_id: EntityId) -> Any: ...

    # Transactions
    async def get_transactions(self, account_id: EntityId, since_date: str, until_date: str) -> list[Transaction]: ...
    async def add_transactions(self, account_id: EntityId, transactions: Sequence[Transaction]) -> Any: ...
    async def import_transactions(self, account_id: EntityId, transactions: Sequence[Transaction]) -> Any: ...
    async def update_transaction(self, transaction_id: EntityId, transaction: Transaction) -> Any: ...
    async def delete_transaction(self, transaction_id: EntityId) -> Any: ...

    # Categories and groups
    async def get_categories(self) -> list[Category]: ...
    async def create_category(self, category: Category) -> Any: ...
    async def update_category(self, category_id: EntityId, category: Category) -> Any: ...
    async def delete_category(self, category_id: EntityId, transfer_category_id: EntityId | None) -> Any: ...
    async def get_category_groups(self) -> list[CategoryGroup]: ...
    async def create_category_group(self, category_group: CategoryGroup) -> Any: ...
    async def update_category_group(self, category_group_id: EntityId, category_group: CategoryGroup) -> Any: ...
    async def delete_category_group(
        self, category_group_id: EntityId, transfer_category_id: EntityId | None
    ) -> Any: ...

    # Payees
    async def get_payees(self) -> list[Payee]: ...
    async def create_payee(self, payee: Payee) -> Any: ...
    async def update_payee(self, payee_id: EntityId, payee: Payee) -> Any: ...
    async def delete_payee(self, payee_id: EntityId) -> Any: ...

    async def shutdown(self) -> None: ...


_CONNECTION: HttpConnection | None = None
_SERVER_URL: str | None = None


async def get_client(
    *,
    settings: ClientSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BudgetClient:
    """Return a new client on the shared server connection.

    Every call hands out its own client, so each facade binds its own budget
    and shutting one down leaves the others usable. The pooled connection is
    created on first use and again after the last client has shut down.
    Asking for a different server than the live connection talks to is a
    caller error. ``transport`` only applies when a connection is created.
    """

    global _CONNECTION, _SERVER_URL
    resolved = settings or load_settings()

    if _CONNECTION is not None and not _CONNECTION.is_closed:
        if _SERVER_URL is not None and resolved.server_url != _SERVER_URL:
            raise RuntimeError(
                "get_client() already initialized for a different ACTUAL_SERVER_URL; "
                "shut the current clients down first"
            )
        return _CONNECTION.lease()

    # Deferred import keeps httpx off the import path of protocol-only users.
    from .http_client import HttpConnection

    logger.info("connecting to budget server %s", resolved.server_url)
    _CONNECTION = HttpConnection(resolved, transport=transport)
    _SERVER_URL = resolved.server_url
    return _CONNECTION.lease()


def reset_client() -> None:
    """Forget the shared connection without closing it (tests and host apps)."""

    global _CONNECTION, _SERVER_URL
    _CONNECTION = None
    _SERVER_URL = None


__all__ = [
    "BudgetClient",
    "get_client",
    "reset_client",
]
