"""Catalog exceptions."""


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class CatalogLoadError(CatalogError):
    """Raised when the catalog source cannot be read or parsed."""
    pass
