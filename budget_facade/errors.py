"""Exception types raised by ``budget_facade``.

Errors raised by the budgeting engine client travel through the facade
unchanged; the classes here cover the checks the facade performs itself and
the failures of the bundled HTTP client.
"""

from __future__ import annotations


class BudgetFacadeError(Exception):
    """Base class for errors raised by this package."""


class BudgetValidationError(BudgetFacadeError, ValueError):
    """Raised before any client call when required arguments are missing."""


class CategoryNotFoundError(BudgetFacadeError, LookupError):
    """Raised when a category referenced by a transfer does not exist in the month."""

    def __init__(self, message: str, *, category_id: str) -> None:
        super().__init__(message)
        self.category_id = category_id


class FacadeClosedError(BudgetFacadeError, RuntimeError):
    """Raised when an operation is attempted on a facade after ``shutdown()``."""


class ConfigError(BudgetFacadeError, RuntimeError):
    """Raised when mandatory configuration is missing or malformed."""


class BudgetClientError(BudgetFacadeError):
    """A request to the budgeting server failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BudgetDownloadError(BudgetClientError):
    """The budget could not be downloaded/synced from the server."""


__all__ = [
    "BudgetFacadeError",
    "BudgetValidationError",
    "CategoryNotFoundError",
    "FacadeClosedError",
    "ConfigError",
    "BudgetClientError",
    "BudgetDownloadError",
]
