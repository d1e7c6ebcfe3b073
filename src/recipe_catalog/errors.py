"""
Error kinds raised by the catalog.

Every error is a deterministic validation outcome, so nothing here is retried.
The HTTP adapter maps each kind to a status code through ``status_code``.
"""


class CatalogError(Exception):
    """Base class for all catalog failures."""
    status_code = 400

    def __init__(self, message: str = "catalog error"):
        super().__init__(message)
        self.message = message


class NotFound(CatalogError):
    """404 - entity id absent, or an archived recipe read through ``get``."""
    status_code = 404


class InvalidArgument(CatalogError):
    """400 - malformed or missing field, non-positive quantity/servings."""
    status_code = 400


class Conflict(CatalogError):
    """409 - duplicate normalized name, or category still in use."""
    status_code = 409


class InvalidState(CatalogError):
    """409 - illegal workflow transition or mutation of a locked recipe."""
    status_code = 409
