"""Data models and type aliases for ``budget_facade``.

Entities (accounts, payees, transactions, categories, ...) are owned by the
budgeting engine. The facade keeps them opaque: records are plain mappings and
only the ``id`` field (plus ``budgeted``/``carryover`` on month categories) is
ever inspected here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Opaque records
# ---------------------------------------------------------------------------

type Record = Mapping[str, Any]
"""A single entity as returned by the budgeting engine (JSON object)."""

type Account = Record
type Payee = Record
type Category = Record
type CategoryGroup = Record
type Transaction = Record

type BudgetMonth = Record
"""A month snapshot with an ordered ``categoryGroups`` sequence.

Each group carries an ordered ``categories`` sequence; month categories expose
at least ``id``, ``budgeted`` (integer minor units) and ``carryover``.
"""

type EntityId = str | int
"""Identifier as accepted at the API boundary; normalized with :func:`normalize_id`."""


def normalize_id(value: EntityId) -> str:
    """Normalize an identifier to its string form for exact comparison."""

    return str(value)


def find_by_id(records: Sequence[Record], record_id: EntityId) -> Record | None:
    """Return the first record whose ``id`` matches ``record_id``, else ``None``."""

    wanted = normalize_id(record_id)
    for record in records:
        rid = record.get("id")
        if rid is not None and normalize_id(rid) == wanted:
            return record
    return None


# ---------------------------------------------------------------------------
# Month shape validation
# ---------------------------------------------------------------------------


class _GroupShape(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    categories: list[Mapping[str, Any]]


class _BudgetMonthShape(BaseModel):
    model_config = ConfigDict(extra="allow")

    categoryGroups: list[_GroupShape]


class MonthCategoryShape(BaseModel):
    """The part of a month category the transfer arithmetic depends on."""

    model_config = ConfigDict(extra="allow")

    id: str | int
    budgeted: int | float


def month_category_groups(budget_month: BudgetMonth) -> list[CategoryGroup]:
    """Return the month's ``categoryGroups`` in order, as the engine sent them.

    Raises ``pydantic.ValidationError`` (a ``ValueError``) when the month does
    not carry groups with a ``categories`` list.
    """

    _BudgetMonthShape.model_validate(budget_month)
    return list(budget_month["categoryGroups"])


def flatten_month_categories(budget_month: BudgetMonth) -> list[Category]:
    """Concatenate each group's ``categories``: group order, then in-group order."""

    categories: list[Category] = []
    for category_group in month_category_groups(budget_month):
        categories.extend(category_group["categories"])
    return categories


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryTransfer:
    """Move a budgeted amount between two categories within one month.

    Attributes
    ----------
    amount:
        Amount in minor units. Zero and negative values are forwarded as-is.
    from_category_id:
        Category to take the amount from (optional).
    to_category_id:
        Category to give the amount to (optional).

    At least one of the two ids must be set; the facade validates this.
    """

    amount: int | float | None
    from_category_id: EntityId | None = None
    to_category_id: EntityId | None = None


@dataclass(frozen=True, slots=True)
class MonthCategoryUpdate:
    """Fields of a month category that can be changed; ``None`` means unchanged."""

    budgeted: int | float | None = None
    carryover: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self.budgeted is None and self.carryover is None


# ---------------------------------------------------------------------------
# add_transaction result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SingleId:
    """The engine returned at least one id; this is the first one."""

    value: Any


@dataclass(frozen=True, slots=True)
class IdList:
    """The engine returned a list, but it was empty."""

    value: list[Any]


@dataclass(frozen=True, slots=True)
class OtherResult:
    """The engine returned something other than a list (e.g. ``"ok"`` or ``None``)."""

    value: Any


type AddTransactionResult = SingleId | IdList | OtherResult


def to_add_transaction_result(raw: Any) -> AddTransactionResult:
    """Tag the result of a single-element ``add_transactions`` call."""

    if isinstance(raw, list):
        if raw:
            return SingleId(raw[0])
        return IdList(raw)
    return OtherResult(raw)


__all__ = [
    "Record",
    "Account",
    "Payee",
    "Category",
    "CategoryGroup",
    "Transaction",
    "BudgetMonth",
    "EntityId",
    "normalize_id",
    "find_by_id",
    "MonthCategoryShape",
    "month_category_groups",
    "flatten_month_categories",
    "CategoryTransfer",
    "MonthCategoryUpdate",
    "SingleId",
    "IdList",
    "OtherResult",
    "AddTransactionResult",
    "to_add_transaction_result",
]
