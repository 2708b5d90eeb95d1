"""Budget facade: a loaded budget and the operations available on it.

:func:`create_budget_facade` obtains a client, downloads the budget identified
by its sync id, and returns a :class:`Budget` bound to that client. Every
operation either forwards to the client or derives a small result from what
the client returns; nothing is cached and errors raised by the client reach
the caller unchanged.

Multi-step operations (:meth:`Budget.update_month_category` with both fields,
:meth:`Budget.add_category_transfer`) are sequential awaits without rollback:
if a later step fails, earlier steps stay applied.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Self

from .client import BudgetClient, get_client
from .dates import today_iso
from .errors import BudgetValidationError, CategoryNotFoundError, FacadeClosedError
from .logging_setup import get_logger
from .models import (
    Account,
    AddTransactionResult,
    BudgetMonth,
    Category,
    CategoryGroup,
    CategoryTransfer,
    EntityId,
    MonthCategoryShape,
    MonthCategoryUpdate,
    Payee,
    Transaction,
    find_by_id,
    flatten_month_categories,
    month_category_groups,
    to_add_transaction_result,
)

logger = get_logger(__name__)


class Budget:
    """Operations on one downloaded budget.

    Build instances with :func:`create_budget_facade` (or :func:`open_budget`);
    the constructor does no I/O and assumes the budget is already downloaded.
    """

    def __init__(self, client: BudgetClient, budget_sync_id: str) -> None:
        self._client_ref: BudgetClient | None = client
        self.budget_sync_id = budget_sync_id

    @property
    def _client(self) -> BudgetClient:
        if self._client_ref is None:
            raise FacadeClosedError(f"budget {self.budget_sync_id} has been shut down")
        return self._client_ref

    @property
    def is_closed(self) -> bool:
        return self._client_ref is None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    # ---- months -------------------------------------------------------------

    async def get_months(self) -> list[str]:
        return await self._client.get_budget_months()

    async def get_month(self, month: str) -> BudgetMonth:
        return await self._client.get_budget_month(month)

    async def get_month_categories(self, month: str) -> list[Category]:
        """All categories of ``month``, in group order then in-group order."""

        return flatten_month_categories(await self.get_month(month))

    async def get_month_category(self, month: str, category_id: EntityId) -> Category | None:
        return find_by_id(await self.get_month_categories(month), category_id)

    async def update_month_category(
        self,
        month: str,
        category_id: EntityId,
        *,
        budgeted: int | float | None = None,
        carryover: bool | None = None,
    ) -> None:
        """Set the budgeted amount and/or the carryover flag of a month category.

        At least one field is required. When both are given the amount is set
        first; the two calls are independent and not transactional.
        """

        update = MonthCategoryUpdate(budgeted=budgeted, carryover=carryover)
        if update.is_empty:
            raise BudgetValidationError("At least one field is required: budgeted or carryover")
        if update.budgeted is not None:
            await self._client.set_budget_amount(month, category_id, update.budgeted)
        if update.carryover is not None:
            await self._client.set_budget_carryover(month, category_id, update.carryover)

    async def get_month_category_groups(self, month: str) -> list[CategoryGroup]:
        budget_month = await self._client.get_budget_month(month)
        return month_category_groups(budget_month)

    async def get_month_category_group(self, month: str, category_group_id: EntityId) -> CategoryGroup | None:
        return find_by_id(await self.get_month_category_groups(month), category_group_id)

    # ---- accounts -----------------------------------------------------------

    async def get_accounts(self) -> list[Account]:
        return await self._client.get_accounts()

    async def get_account(self, account_id: EntityId) -> Account | None:
        return find_by_id(await self.get_accounts(), account_id)

    async def create_account(self, account: Account, initial_balance: int | None = None) -> Any:
        return await self._client.create_account(account, initial_balance)

    async def update_account(self, account_id: EntityId, account: Account) -> Any:
        return await self._client.update_account(account_id, account)

    async def delete_account(self, account_id: EntityId) -> Any:
        return await self._client.delete_account(account_id)

    async def close_account(
        self,
        account_id: EntityId,
        *,
        transfer_account_id: EntityId | None = None,
        transfer_category_id: EntityId | None = None,
    ) -> Any:
        """Close an account; ``None`` transfer targets mean "no transfer"."""

        return await self._client.close_account(account_id, transfer_account_id, transfer_category_id)

    async def reopen_account(self, account_id: EntityId) -> Any:
        return await self._client.reopen_account(account_id)

    # ---- transactions -------------------------------------------------------

    async def get_transactions(
        self, account_id: EntityId, since_date: str, until_date: str | None = None
    ) -> list[Transaction]:
        """Transactions of ``account_id`` between two ``YYYY-MM-DD`` dates.

        ``until_date`` defaults to today's local calendar date.
        """

        return await self._client.get_transactions(account_id, since_date, until_date or today_iso())

    async def add_transaction(self, account_id: EntityId, transaction: Transaction) -> AddTransactionResult:
        """Add one transaction and tag what the engine returned.

        :class:`~budget_facade.models.SingleId` holds the new id when the engine
        answered with a non-empty id list; any other answer is wrapped as-is.
        """

        raw = await self.add_transactions(account_id, [transaction])
        return to_add_transaction_result(raw)

    async def add_transactions(self, account_id: EntityId, transactions: Sequence[Transaction]) -> Any:
        return await self._client.add_transactions(account_id, transactions)

    async def import_transactions(self, account_id: EntityId, transactions: Sequence[Transaction]) -> Any:
        return await self._client.import_transactions(account_id, transactions)

    async def update_transaction(self, transaction_id: EntityId, transaction: Transaction) -> Any:
        # The path id wins over any id carried in the payload.
        return await self._client.update_transaction(transaction_id, {**transaction, "id": transaction_id})

    async def delete_transaction(self, transaction_id: EntityId) -> Any:
        return await self._client.delete_transaction(transaction_id)

    # ---- categories and groups ----------------------------------------------

    async def get_categories(self) -> list[Category]:
        return await self._client.get_categories()

    async def get_category(self, category_id: EntityId) -> Category | None:
        return find_by_id(await self.get_categories(), category_id)

    async def create_category(self, category: Category) -> Any:
        return await self._client.create_category(category)

    async def update_category(self, category_id: EntityId, category: Category) -> Any:
        return await self._client.update_category(category_id, category)

    async def delete_category(self, category_id: EntityId, *, transfer_category_id: EntityId | None = None) -> Any:
        return await self._client.delete_category(category_id, transfer_category_id)

    async def get_category_groups(self) -> list[CategoryGroup]:
        return await self._client.get_category_groups()

    async def create_category_group(self, category_group: CategoryGroup) -> Any:
        return await self._client.create_category_group(category_group)

    async def update_category_group(self, category_group_id: EntityId, category_group: CategoryGroup) -> Any:
        return await self._client.update_category_group(category_group_id, category_group)

    async def delete_category_group(
        self, category_group_id: EntityId, *, transfer_category_id: EntityId | None = None
    ) -> Any:
        return await self._client.delete_category_group(category_group_id, transfer_category_id)

    # ---- payees -------------------------------------------------------------

    async def get_payees(self) -> list[Payee]:
        return await self._client.get_payees()

    async def create_payee(self, payee: Payee) -> Any:
        return await self._client.create_payee(payee)

    async def update_payee(self, payee_id: EntityId, payee: Payee) -> Any:
        return await self._client.update_payee(payee_id, payee)

    async def delete_payee(self, payee_id: EntityId) -> Any:
        return await self._client.delete_payee(payee_id)

    # ---- category transfer --------------------------------------------------

    async def add_category_transfer(
        self,
        month: str,
        transfer: CategoryTransfer | None = None,
        *,
        from_category_id: EntityId | None = None,
        to_category_id: EntityId | None = None,
        amount: int | float | None = None,
    ) -> None:
        """Move ``amount`` of budget from one category to another within ``month``.

        Accepts a :class:`CategoryTransfer` or the same fields as keywords.
        Either side may be omitted (a one-sided transfer just adjusts that
        category). Both categories are looked up before anything is written;
        the source update is then awaited before the destination update, and
        a failing destination update does not undo the source.
        """

        if transfer is None:
            transfer = CategoryTransfer(
                amount=amount, from_category_id=from_category_id, to_category_id=to_category_id
            )
        if not (transfer.from_category_id or transfer.to_category_id):
            raise BudgetValidationError(
                "At least one category id is required: from_category_id or to_category_id"
            )
        if transfer.amount is None:
            raise BudgetValidationError("Amount is required")

        updates: list[tuple[EntityId, int | float]] = []
        if transfer.from_category_id:
            source = await self.get_month_category(month, transfer.from_category_id)
            if source is None:
                raise CategoryNotFoundError(
                    f"Source category not found: {transfer.from_category_id}",
                    category_id=str(transfer.from_category_id),
                )
            budgeted = MonthCategoryShape.model_validate(source).budgeted
            updates.append((transfer.from_category_id, budgeted - transfer.amount))
        if transfer.to_category_id:
            destination = await self.get_month_category(month, transfer.to_category_id)
            if destination is None:
                raise CategoryNotFoundError(
                    f"Destination category not found: {transfer.to_category_id}",
                    category_id=str(transfer.to_category_id),
                )
            budgeted = MonthCategoryShape.model_validate(destination).budgeted
            updates.append((transfer.to_category_id, budgeted + transfer.amount))

        logger.debug(
            "category transfer %s: %s -> %s amount=%s",
            month,
            transfer.from_category_id,
            transfer.to_category_id,
            transfer.amount,
        )
        for category_id, budgeted in updates:
            await self.update_month_category(month, category_id, budgeted=budgeted)

    # ---- lifecycle ----------------------------------------------------------

    async def shutdown(self) -> None:
        """Release the client. Calling it again is a no-op."""

        if self._client_ref is None:
            logger.debug("budget %s already shut down", self.budget_sync_id)
            return
        client, self._client_ref = self._client_ref, None
        await client.shutdown()
        logger.info("budget %s shut down", self.budget_sync_id)


async def create_budget_facade(budget_sync_id: str, *, client: BudgetClient | None = None) -> Budget:
    """Download the budget ``budget_sync_id`` and return a :class:`Budget` for it.

    ``client`` defaults to a new client from
    :func:`~budget_facade.client.get_client`, owned by the returned facade.
    Failures while acquiring the client or downloading the budget propagate
    unchanged; a client acquired here is shut down before the error leaves.
    """

    if not budget_sync_id or not budget_sync_id.strip():
        raise BudgetValidationError("budget_sync_id must be a non-empty string")
    acquired = client is None
    if client is None:
        client = await get_client()
    logger.info("downloading budget %s", budget_sync_id)
    try:
        await client.download_budget(budget_sync_id)
    except Exception:
        if acquired:
            await client.shutdown()
        raise
    return Budget(client, budget_sync_id)


@asynccontextmanager
async def open_budget(budget_sync_id: str, *, client: BudgetClient | None = None) -> AsyncIterator[Budget]:
    """Async context manager around :func:`create_budget_facade`; shuts down on exit."""

    budget = await create_budget_facade(budget_sync_id, client=client)
    try:
        yield budget
    finally:
        await budget.shutdown()


__all__ = ["Budget", "create_budget_facade", "open_budget"]
