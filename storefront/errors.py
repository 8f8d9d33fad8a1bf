"""
Exception hierarchy for the storefront core.

Catalog and news failures are raised by the assemblers, order failures by the
composer. Storage-level failures live in ``storefront.storage``.
"""


class StorefrontError(Exception):
    """Base class for storefront errors."""


# ---------------------------------------------------------------------------
# Catalog / news
# ---------------------------------------------------------------------------


class CatalogError(StorefrontError):
    """Base class for catalog assembly errors."""


class CatalogUnavailableError(CatalogError):
    """A category listing or document could not be fetched."""


class CorruptedCatalogError(CatalogError):
    """A category document or price string does not have the expected shape."""


class NewsUnavailableError(StorefrontError):
    """The news feed document could not be fetched or parsed."""


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderError(StorefrontError):
    """Base class for order composition errors."""


class OrderValidationError(OrderError):
    """Required fields are missing. Raised before anything is submitted."""

    def __init__(self, group: str, message: str) -> None:
        super().__init__(message)
        self.group = group


class OrderSubmissionError(OrderError):
    """The document store rejected the order write."""
