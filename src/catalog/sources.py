"""
Catalog sources.

A source returns raw product, category and collection records (dicts in
the shape of the storefront's JSON export). The repository maps them into
models; sources do no interpretation beyond reading.

- JsonCatalogSource: products.json / categories.json / collections.json
- SupabaseCatalogSource: the same records from Supabase tables
- InMemoryCatalogSource: records handed in directly (tests, scripts)
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from catalog.exceptions import CatalogLoadError
from config.settings import Settings
from core.logging import get_logger

logger = get_logger(__name__)

RawRecord = Dict[str, Any]


class CatalogSource(ABC):
    """Where raw catalog records come from."""

    name: str = "unknown"

    @abstractmethod
    def load_products(self) -> List[RawRecord]:
        ...

    @abstractmethod
    def load_categories(self) -> List[RawRecord]:
        ...

    @abstractmethod
    def load_collections(self) -> List[RawRecord]:
        ...


# =============================================================================
# JSON files
# =============================================================================

def read_json_records(path: Path, required: bool = True) -> List[RawRecord]:
    """
    Read a JSON array of objects.

    Raises:
        CatalogLoadError: If the file is unreadable, not JSON, or not an
            array; or if it is missing and required.
    """
    if not path.exists():
        if required:
            raise CatalogLoadError(f"Catalog file not found: {path}")
        logger.warning("Optional catalog file missing", path=str(path))
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"Could not parse {path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogLoadError(f"Expected a JSON array in {path}, got {type(data).__name__}")
    return [record for record in data if isinstance(record, dict)]


class JsonCatalogSource(CatalogSource):
    """Reads the catalog export from a data directory."""

    name = "json"

    def __init__(
        self,
        products_file: Path,
        categories_file: Optional[Path] = None,
        collections_file: Optional[Path] = None,
    ):
        self.products_file = Path(products_file)
        self.categories_file = Path(categories_file) if categories_file else None
        self.collections_file = Path(collections_file) if collections_file else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "JsonCatalogSource":
        return cls(
            products_file=settings.products_file,
            categories_file=settings.categories_file,
            collections_file=settings.collections_file,
        )

    def load_products(self) -> List[RawRecord]:
        return read_json_records(self.products_file, required=True)

    def load_categories(self) -> List[RawRecord]:
        if self.categories_file is None:
            return []
        return read_json_records(self.categories_file, required=False)

    def load_collections(self) -> List[RawRecord]:
        if self.collections_file is None:
            return []
        return read_json_records(self.collections_file, required=False)


# =============================================================================
# Supabase
# =============================================================================

class SupabaseCatalogSource(CatalogSource):
    """
    Reads the catalog from Supabase tables.

    Expects tables `products`, `categories` (with nested `subcategories`
    and `aliases` JSON columns) and `collections`, holding the same
    record shapes as the JSON export.
    """

    name = "supabase"
    PAGE_SIZE = 1000

    def __init__(self, client=None):
        self.client = client

    def _get_client(self):
        """The injected client, else the shared one (created on first read)."""
        if self.client is None:
            from config.database import get_supabase_client
            self.client = get_supabase_client()
        return self.client

    def _fetch_all(self, table: str, order: str) -> List[RawRecord]:
        rows: List[RawRecord] = []
        start = 0
        try:
            client = self._get_client()
            while True:
                result = (
                    client.table(table)
                    .select("*")
                    .order(order)
                    .range(start, start + self.PAGE_SIZE - 1)
                    .execute()
                )
                page = result.data or []
                rows.extend(page)
                if len(page) < self.PAGE_SIZE:
                    break
                start += self.PAGE_SIZE
        except Exception as e:
            raise CatalogLoadError(f"Failed to read '{table}' from Supabase: {e}") from e
        return rows

    def load_products(self) -> List[RawRecord]:
        return self._fetch_all("products", order="name")

    def load_categories(self) -> List[RawRecord]:
        return self._fetch_all("categories", order="id")

    def load_collections(self) -> List[RawRecord]:
        return self._fetch_all("collections", order="slug")


# =============================================================================
# In memory
# =============================================================================

class InMemoryCatalogSource(CatalogSource):
    """Records passed in directly."""

    name = "memory"

    def __init__(
        self,
        products: List[RawRecord],
        categories: Optional[List[RawRecord]] = None,
        collections: Optional[List[RawRecord]] = None,
    ):
        self._products = products
        self._categories = categories or []
        self._collections = collections or []

    def load_products(self) -> List[RawRecord]:
        return list(self._products)

    def load_categories(self) -> List[RawRecord]:
        return list(self._categories)

    def load_collections(self) -> List[RawRecord]:
        return list(self._collections)


def build_catalog_source(settings: Settings) -> CatalogSource:
    """Source selected by settings.catalog_source."""
    if settings.catalog_source == "supabase":
        # Credentials are checked on first load, which reports a CatalogLoadError
        return SupabaseCatalogSource()
    return JsonCatalogSource.from_settings(settings)
