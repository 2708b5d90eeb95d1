"""Recording fake for the budgeting engine client used by the facade.

The fake keeps a small in-memory budget (months, accounts, categories, ...)
and appends ``(method_name, args)`` to ``calls`` for every coroutine invoked,
so tests can assert exactly which client calls an operation made. Set
``errors[method_name]`` to an exception to make that method raise it.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any


def make_month(month: str, groups: Sequence[tuple[str, Sequence[dict[str, Any]]]]) -> dict[str, Any]:
    """Build a month snapshot from ``(group_id, categories)`` pairs."""

    return {
        "month": month,
        "categoryGroups": [
            {"id": gid, "name": gid.title(), "categories": [dict(c) for c in cats]} for gid, cats in groups
        ],
    }


class FakeBudgetClient:
    """Minimal in-memory stand-in satisfying ``budget_facade.client.BudgetClient``."""

    def __init__(
        self,
        *,
        months: dict[str, dict[str, Any]] | None = None,
        accounts: list[dict[str, Any]] | None = None,
        categories: list[dict[str, Any]] | None = None,
        category_groups: list[dict[str, Any]] | None = None,
        payees: list[dict[str, Any]] | None = None,
        transactions: list[dict[str, Any]] | None = None,
        add_transactions_result: Any = None,
    ) -> None:
        self.months = months or {}
        self.accounts = accounts or []
        self.categories = categories or []
        self.category_groups = category_groups or []
        self.payees = payees or []
        self.transactions = transactions or []
        self.add_transactions_result = add_transactions_result
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.errors: dict[str, BaseException] = {}
        self.downloaded: str | None = None
        self.is_closed = False

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        err = self.errors.get(name)
        if err is not None:
            raise err

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    # ---- lifecycle ------------------------------------------------------

    async def download_budget(self, sync_id: str) -> None:
        self._record("download_budget", sync_id)
        self.downloaded = sync_id

    async def shutdown(self) -> None:
        self._record("shutdown")
        self.is_closed = True

    # ---- months ---------------------------------------------------------

    async def get_budget_months(self) -> list[str]:
        self._record("get_budget_months")
        return sorted(self.months)

    async def get_budget_month(self, month: str) -> dict[str, Any]:
        self._record("get_budget_month", month)
        # Hand out copies so callers cannot mutate the stored month.
        return copy.deepcopy(self.months[month])

    def _month_category(self, month: str, category_id: Any) -> dict[str, Any]:
        for group in self.months[month]["categoryGroups"]:
            for category in group["categories"]:
                if str(category["id"]) == str(category_id):
                    return category
        raise KeyError(category_id)

    async def set_budget_amount(self, month: str, category_id: Any, amount: Any) -> None:
        self._record("set_budget_amount", month, category_id, amount)
        self._month_category(month, category_id)["budgeted"] = amount

    async def set_budget_carryover(self, month: str, category_id: Any, flag: bool) -> None:
        self._record("set_budget_carryover", month, category_id, flag)
        self._month_category(month, category_id)["carryover"] = flag

    # ---- accounts -------------------------------------------------------

    async def get_accounts(self) -> list[dict[str, Any]]:
        self._record("get_accounts")
        return list(self.accounts)

    async def create_account(self, account: Any, initial_balance: Any = None) -> str:
        self._record("create_account", account, initial_balance)
        return f"acct-{len(self.accounts) + 1}"

    async def update_account(self, account_id: Any, account: Any) -> None:
        self._record("update_account", account_id, account)

    async def delete_account(self, account_id: Any) -> None:
        self._record("delete_account", account_id)

    async def close_account(self, account_id: Any, transfer_account_id: Any, transfer_category_id: Any) -> None:
        self._record("close_account", account_id, transfer_account_id, transfer_category_id)

    async def reopen_account(self, account_id: Any) -> None:
        self._record("reopen_account", account_id)

    # ---- transactions ---------------------------------------------------

    async def get_transactions(self, account_id: Any, since_date: str, until_date: str) -> list[dict[str, Any]]:
        self._record("get_transactions", account_id, since_date, until_date)
        return [t for t in self.transactions if t.get("account") == account_id]

    async def add_transactions(self, account_id: Any, transactions: Sequence[Any]) -> Any:
        self._record("add_transactions", account_id, list(transactions))
        return self.add_transactions_result

    async def import_transactions(self, account_id: Any, transactions: Sequence[Any]) -> Any:
        self._record("import_transactions", account_id, list(transactions))
        return {"added": [], "updated": []}

    async def update_transaction(self, transaction_id: Any, transaction: Any) -> None:
        self._record("update_transaction", transaction_id, transaction)

    async def delete_transaction(self, transaction_id: Any) -> None:
        self._record("delete_transaction", transaction_id)

    # ---- categories -----------------------------------------------------

    async def get_categories(self) -> list[dict[str, Any]]:
        self._record("get_categories")
        return list(self.categories)

    async def create_category(self, category: Any) -> str:
        self._record("create_category", category)
        return "cat-new"

    async def update_category(self, category_id: Any, category: Any) -> None:
        self._record("update_category", category_id, category)

    async def delete_category(self, category_id: Any, transfer_category_id: Any) -> None:
        self._record("delete_category", category_id, transfer_category_id)

    async def get_category_groups(self) -> list[dict[str, Any]]:
        self._record("get_category_groups")
        return list(self.category_groups)

    async def create_category_group(self, category_group: Any) -> str:
        self._record("create_category_group", category_group)
        return "group-new"

    async def update_category_group(self, category_group_id: Any, category_group: Any) -> None:
        self._record("update_category_group", category_group_id, category_group)

    async def delete_category_group(self, category_group_id: Any, transfer_category_id: Any) -> None:
        self._record("delete_category_group", category_group_id, transfer_category_id)

    # ---- payees ---------------------------------------------------------

    async def get_payees(self) -> list[dict[str, Any]]:
        self._record("get_payees")
        return list(self.payees)

    async def create_payee(self, payee: Any) -> str:
        self._record("create_payee", payee)
        return "payee-new"

    async def update_payee(self, payee_id: Any, payee: Any) -> None:
        self._record("update_payee", payee_id, payee)

    async def delete_payee(self, payee_id: Any) -> None:
        self._record("delete_payee", payee_id)
