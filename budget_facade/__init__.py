"""Public interface for the ``budget_facade`` package.

Symbol re-exports only; the facade lives in :mod:`budget_facade.budget`, the
client contract and provider in :mod:`budget_facade.client`.
"""

from .budget import Budget, create_budget_facade, open_budget
from .client import BudgetClient, get_client
from .errors import (
    BudgetClientError,
    BudgetDownloadError,
    BudgetFacadeError,
    BudgetValidationError,
    CategoryNotFoundError,
    ConfigError,
    FacadeClosedError,
)
from .models import (
    AddTransactionResult,
    CategoryTransfer,
    IdList,
    OtherResult,
    SingleId,
)

__all__ = [
    # Facade
    "Budget",
    "create_budget_facade",
    "open_budget",
    # Client
    "BudgetClient",
    "get_client",
    # Models / types
    "CategoryTransfer",
    "AddTransactionResult",
    "SingleId",
    "IdList",
    "OtherResult",
    # Errors
    "BudgetFacadeError",
    "BudgetValidationError",
    "CategoryNotFoundError",
    "FacadeClosedError",
    "ConfigError",
    "BudgetClientError",
    "BudgetDownloadError",
]
