"""Async HTTP client for an actual-http-api compatible budgeting server.

Every :class:`~budget_facade.client.BudgetClient` method maps to one REST call
under ``{server}/v1/budgets/{syncId}/...``. Successful responses wrap their
payload as ``{"data": ...}`` (unwrapped here); some mutations answer with only
``{"message": ...}``, which is returned as the message string. Non-2xx
responses raise :class:`~budget_facade.errors.BudgetClientError` carrying the
server's error text and status code.

The server owns download, sync and persistence of the budget file; this client
does not retry, cache, or interpret entities.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote

import httpx

from .config import ClientSettings
from .errors import BudgetClientError, BudgetDownloadError
from .logging_setup import get_logger
from .models import Account, BudgetMonth, Category, CategoryGroup, EntityId, Payee, Transaction

logger = get_logger(__name__)


def _seg(value: EntityId) -> str:
    return quote(str(value), safe="")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, Mapping):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return response.text.strip() or response.reason_phrase


def _unwrap(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        body = response.json()
    except ValueError as e:
        raise BudgetClientError(
            f"Budget server returned a non-JSON body for {response.request.method} "
            f"{response.request.url.path}",
            status_code=response.status_code,
        ) from e
    if isinstance(body, Mapping):
        if "data" in body:
            return body["data"]
        if "message" in body:
            return body["message"]
    return body


class HttpConnection:
    """Pooled ``httpx.AsyncClient`` shared by every client leased from it.

    Each :meth:`lease` returns a new :class:`HttpBudgetClient` with its own
    budget binding. The pool closes when the last leased client shuts down.

    Parameters
    ----------
    settings:
        Server URL, API key and optional encryption password.
    transport:
        Optional ``httpx`` transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"x-api-key": settings.api_key, "accept": "application/json"}
        if settings.encryption_password:
            headers["budget-encryption-password"] = settings.encryption_password
        self.settings = settings
        self.http = httpx.AsyncClient(
            base_url=settings.api_base_url,
            headers=headers,
            timeout=settings.timeout_seconds,
            transport=transport,
        )
        self._leases = 0

    @property
    def is_closed(self) -> bool:
        return self.http.is_closed

    @property
    def leases(self) -> int:
        return self._leases

    def lease(self) -> HttpBudgetClient:
        if self.is_closed:
            raise BudgetClientError("connection to the budget server is closed")
        self._leases += 1
        return HttpBudgetClient(self)

    async def release(self) -> None:
        self._leases -= 1
        if self._leases <= 0:
            await self.http.aclose()
            logger.debug("connection to %s closed", self.settings.server_url)


class HttpBudgetClient:
    """:class:`~budget_facade.client.BudgetClient` over HTTP, bound to one budget.

    Instances come from :meth:`HttpConnection.lease` (or :meth:`from_settings`
    for a private connection). The sync id bound by :meth:`download_budget`
    belongs to this instance only; other clients on the same connection are
    unaffected by it and by :meth:`shutdown`.
    """

    def __init__(self, connection: HttpConnection) -> None:
        self._connection = connection
        self._sync_id: str | None = None
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpBudgetClient:
        return HttpConnection(settings, transport=transport).lease()

    @property
    def connection(self) -> HttpConnection:
        return self._connection

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def sync_id(self) -> str | None:
        return self._sync_id

    # ---- transport helpers --------------------------------------------------

    def _budget_path(self, suffix: str) -> str:
        if self._closed:
            raise BudgetClientError("client has been shut down")
        if self._sync_id is None:
            raise BudgetClientError("No budget loaded; call download_budget() first")
        return f"/budgets/{_seg(self._sync_id)}/{suffix}"

    async def _request(
        self,
        method: str,
        suffix: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        path = self._budget_path(suffix)
        logger.debug("%s %s", method, path)
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}
        response = await self._connection.http.request(method, path, json=json, params=clean_params or None)
        if response.is_error:
            raise BudgetClientError(
                f"Budget server error: {response.status_code} {method} {path}: "
                f"{_error_message(response)}",
                status_code=response.status_code,
            )
        return _unwrap(response)

    # ---- lifecycle ----------------------------------------------------------

    async def download_budget(self, sync_id: str) -> None:
        """Bind ``sync_id`` and ask the server to load it.

        The server downloads/syncs the budget file on first access; a failed
        load is reported as :class:`BudgetDownloadError`.
        """

        self._sync_id = sync_id
        try:
            await self._request("GET", "months")
        except (BudgetClientError, httpx.HTTPError) as e:
            self._sync_id = None
            status = e.status_code if isinstance(e, BudgetClientError) else None
            raise BudgetDownloadError(
                f"Budget download/sync failed for {sync_id}: {e}", status_code=status
            ) from e
        logger.info("budget %s downloaded", sync_id)

    async def shutdown(self) -> None:
        """Release this client's lease; the pool closes with the last lease."""

        if self._closed:
            return
        self._closed = True
        self._sync_id = None
        await self._connection.release()

    # ---- months -------------------------------------------------------------

    async def get_budget_months(self) -> list[str]:
        return await self._request("GET", "months")

    async def get_budget_month(self, month: str) -> BudgetMonth:
        return await self._request("GET", f"months/{_seg(month)}")

    async def set_budget_amount(self, month: str, category_id: EntityId, amount: int | float) -> Any:
        return await self._request(
            "PATCH",
            f"months/{_seg(month)}/categories/{_seg(category_id)}",
            json={"category": {"budgeted": amount}},
        )

    async def set_budget_carryover(self, month: str, category_id: EntityId, flag: bool) -> Any:
        return await self._request(
            "PATCH",
            f"months/{_seg(month)}/categories/{_seg(category_id)}",
            json={"category": {"carryover": flag}},
        )

    # ---- accounts -----------------------------------------------------------

    async def get_accounts(self) -> list[Account]:
        return await self._request("GET", "accounts")

    async def create_account(self, account: Account, initial_balance: int | None = None) -> Any:
        payload: dict[str, Any] = {"account": dict(account)}
        if initial_balance is not None:
            payload["initialBalance"] = initial_balance
        return await self._request("POST", "accounts", json=payload)

    async def update_account(self, account_id: EntityId, account: Account) -> Any:
        return await self._request("PATCH", f"accounts/{_seg(account_id)}", json={"account": dict(account)})

    async def delete_account(self, account_id: EntityId) -> Any:
        return await self._request("DELETE", f"accounts/{_seg(account_id)}")

    async def close_account(
        self,
        account_id: EntityId,
        transfer_account_id: EntityId | None,
        transfer_category_id: EntityId | None,
    ) -> Any:
        payload = {
            k: v
            for k, v in (
                ("transferAccountId", transfer_account_id),
                ("transferCategoryId", transfer_category_id),
            )
            if v is not None
        }
        return await self._request("PUT", f"accounts/{_seg(account_id)}/close", json=payload)

    async def reopen_account(self, account_id: EntityId) -> Any:
        return await self._request("PUT", f"accounts/{_seg(account_id)}/reopen")

    # ---- transactions -------------------------------------------------------

    async def get_transactions(self, account_id: EntityId, since_date: str, until_date: str) -> list[Transaction]:
        return await self._request(
            "GET",
            f"accounts/{_seg(account_id)}/transactions",
            params={"since_date": since_date, "until_date": until_date},
        )

    async def add_transactions(self, account_id: EntityId, transactions: Sequence[Transaction]) -> Any:
        return await self._request(
            "POST",
            f"accounts/{_seg(account_id)}/transactions/batch",
            json={"transactions": [dict(t) for t in transactions]},
        )

    async def import_transactions(self, account_id: EntityId, transactions: Sequence[Transaction]) -> Any:
        return await self._request(
            "POST",
            f"accounts/{_seg(account_id)}/transactions/import",
            json={"transactions": [dict(t) for t in transactions]},
        )

    async def update_transaction(self, transaction_id: EntityId, transaction: Transaction) -> Any:
        return await self._request(
            "PATCH", f"transactions/{_seg(transaction_id)}", json={"transaction": dict(transaction)}
        )

    async def delete_transaction(self, transaction_id: EntityId) -> Any:
        return await self._request("DELETE", f"transactions/{_seg(transaction_id)}")

    # ---- categories ---------------------------------------------------------

    async def get_categories(self) -> list[Category]:
        return await self._request("GET", "categories")

    async def create_category(self, category: Category) -> Any:
        return await self._request("POST", "categories", json={"category": dict(category)})

    async def update_category(self, category_id: EntityId, category: Category) -> Any:
        return await self._request("PATCH", f"categories/{_seg(category_id)}", json={"category": dict(category)})

    async def delete_category(self, category_id: EntityId, transfer_category_id: EntityId | None) -> Any:
        return await self._request(
            "DELETE",
            f"categories/{_seg(category_id)}",
            params={"transfer_category_id": transfer_category_id},
        )

    async def get_category_groups(self) -> list[CategoryGroup]:
        return await self._request("GET", "categorygroups")

    async def create_category_group(self, category_group: CategoryGroup) -> Any:
        return await self._request("POST", "categorygroups", json={"category_group": dict(category_group)})

    async def update_category_group(self, category_group_id: EntityId, category_group: CategoryGroup) -> Any:
        return await self._request(
            "PATCH",
            f"categorygroups/{_seg(category_group_id)}",
            json={"category_group": dict(category_group)},
        )

    async def delete_category_group(
        self, category_group_id: EntityId, transfer_category_id: EntityId | None
    ) -> Any:
        return await self._request(
            "DELETE",
            f"categorygroups/{_seg(category_group_id)}",
            params={"transfer_category_id": transfer_category_id},
        )

    # ---- payees -------------------------------------------------------------

    async def get_payees(self) -> list[Payee]:
        return await self._request("GET", "payees")

    async def create_payee(self, payee: Payee) -> Any:
        return await self._request("POST", "payees", json={"payee": dict(payee)})

    async def update_payee(self, payee_id: EntityId, payee: Payee) -> Any:
        return await self._request("PATCH", f"payees/{_seg(payee_id)}", json={"payee": dict(payee)})

    async def delete_payee(self, payee_id: EntityId) -> Any:
        return await self._request("DELETE", f"payees/{_seg(payee_id)}")


__all__ = ["HttpConnection", "HttpBudgetClient"]
