"""
In-memory catalog repository.

Loads raw records once from a CatalogSource, maps them into Product
models (sanitized description, normalized attributes, enriched tags,
taxonomy labels) and answers the storefront's catalog queries:
- all products / by slug / by slugs
- by category (including subcategories and aliases)
- offers, best sellers, new arrivals
- collections and filtered search with facet options
"""

import threading
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import ValidationError

from catalog.collections import CollectionRegistry
from catalog.exceptions import CatalogLoadError
from catalog.filters import collect_catalog_options, filter_catalog_products
from catalog.models import (
    CatalogFilters,
    CatalogSearchResult,
    Collection,
    Product,
    ProductBadge,
    Tag,
)
from catalog.sanitize import normalize_attributes, sanitize_description_html
from catalog.sources import CatalogSource, RawRecord, build_catalog_source
from catalog.tagging import TaggableProduct, enrich_tags, parse_tag_strings
from catalog.taxonomy import Taxonomy
from config.constants import BRAND_ATTRIBUTE
from config.settings import get_settings
from core.logging import LoggerMixin, get_logger
from core.utils import normalize_slug, spanish_sort_key

logger = get_logger(__name__)


# =============================================================================
# Record Mapping
# =============================================================================

def _field(raw: RawRecord, *names: str, default: Any = None) -> Any:
    """First present value among camelCase/snake_case spellings."""
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return default


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_str(value: Any) -> Optional[str]:
    """Exports carry numeric SKUs and statuses; empty values become None."""
    if value is None or value == "":
        return None
    return str(value)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable timestamp", value=value)
        return None


def _normalize_badge(value: Any) -> Optional[ProductBadge]:
    if not value or not isinstance(value, str):
        return None
    try:
        return ProductBadge(value.strip().lower())
    except ValueError:
        return None


def _parse_manual_tags(raw_tags: Any) -> List[Tag]:
    """Tags arrive as "type:value" strings (JSON export) or {type, value} rows (DB)."""
    if not raw_tags:
        return []
    strings: List[Optional[str]] = []
    for raw in raw_tags:
        if isinstance(raw, dict):
            tag_type, value = raw.get("type"), raw.get("value")
            strings.append(f"{tag_type}:{value}" if tag_type and value else value)
        else:
            strings.append(raw)
    return parse_tag_strings(strings)


def map_product(raw: RawRecord, taxonomy: Optional[Taxonomy] = None) -> Optional[Product]:
    """
    Map one raw product record into a Product.

    Returns:
        The product, or None when the record has no slug or no category.
    """
    slug = normalize_slug(raw.get("slug"))
    category = normalize_slug(_field(raw, "category", "categorySlug", "category_slug"))
    if not slug or not category:
        logger.warning("Skipping product without slug or category", slug=raw.get("slug"))
        return None

    sub_category = normalize_slug(_field(raw, "subCategory", "sub_category", "subcategory"))
    raw_html = _field(raw, "descriptionHtml", "description_html")
    short_description = _field(raw, "shortDescription", "short_description")
    description_text = _field(raw, "descriptionText", "description_text")
    name = (raw.get("name") or "").strip()

    attributes = normalize_attributes(raw.get("attributes"))
    brand_value = attributes.get(BRAND_ATTRIBUTE, raw.get("brand"))
    brand = brand_value.strip() if isinstance(brand_value, str) and brand_value.strip() else None

    tags = enrich_tags(TaggableProduct(
        category=category,
        sub_category=sub_category,
        name=name,
        short_description=short_description,
        description_html=raw_html,
        description_text=description_text,
        tags=_parse_manual_tags(raw.get("tags")),
    ))

    taxonomy = taxonomy or Taxonomy([])
    updated_at = _parse_datetime(_field(raw, "modifiedAt", "updatedAt", "updated_at"))

    return Product(
        id=raw.get("id"),
        slug=slug,
        name=name,
        description_html=sanitize_description_html(raw_html),
        description_text=description_text,
        short_description=short_description,
        regular_price=_to_float(_field(raw, "regularPrice", "regular_price")) or 0.0,
        sale_price=_to_float(_field(raw, "salePrice", "sale_price")),
        stock_status=_to_str(_field(raw, "stockStatus", "stock_status")),
        sku=_to_str(raw.get("sku")),
        brand=brand,
        category=category,
        category_label=taxonomy.label_for(category) or category,
        sub_category=sub_category,
        sub_category_label=(taxonomy.label_for(sub_category) or sub_category) if sub_category else None,
        attributes=attributes,
        tags=tags,
        badge=_normalize_badge(raw.get("badge")),
        best_seller=bool(_field(raw, "bestSeller", "best_seller", default=False)),
        nsfw=bool(raw.get("nsfw", True)),
        rating=_to_float(raw.get("rating")),
        review_count=_field(raw, "reviewCount", "review_count"),
        embedding_text=_field(raw, "embeddingText", "embedding_text"),
        created_at=_parse_datetime(_field(raw, "createdAt", "created_at")) or updated_at,
        updated_at=updated_at,
    )


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    """Local midnight `days` days before `now` (negative days count as 0)."""
    reference = (now or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
    return reference - timedelta(days=max(days, 0))


# =============================================================================
# Repository
# =============================================================================

class CatalogRepository(LoggerMixin):
    """
    Catalog loaded once from a source and queried in memory.

    Loading is lazy and thread-safe; call reload() to pick up source changes.
    """

    def __init__(self, source: CatalogSource):
        self.source = source
        self._lock = threading.Lock()
        self._products: Optional[List[Product]] = None
        self._taxonomy: Taxonomy = Taxonomy([])
        self._collections: CollectionRegistry = CollectionRegistry([])

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> None:
        with self._lock:
            if self._products is None:
                self._load_locked()

    def reload(self) -> None:
        with self._lock:
            self._load_locked()

    def _load_locked(self) -> None:
        try:
            taxonomy = Taxonomy.from_records(self.source.load_categories())
            collections = CollectionRegistry(self.source.load_collections())
            raw_products = self.source.load_products()
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid catalog record: {e}") from e

        products: List[Product] = []
        skipped = 0
        for raw in raw_products:
            try:
                product = map_product(raw, taxonomy)
            except (ValidationError, ValueError) as e:
                self.logger.warning("Invalid product record", slug=raw.get("slug"), error=str(e))
                product = None
            if product is None:
                skipped += 1
                continue
            products.append(product)

        products.sort(key=lambda p: spanish_sort_key(p.name))

        self._taxonomy = taxonomy
        self._collections = collections
        self._products = products

        self.logger.info(
            "Catalog loaded",
            source=self.source.name,
            products=len(products),
            skipped=skipped,
            categories=len(taxonomy.slug_sets),
            collections=len(collections),
        )

    @property
    def products(self) -> List[Product]:
        self.load()
        return self._products or []

    @property
    def taxonomy(self) -> Taxonomy:
        self.load()
        return self._taxonomy

    @property
    def collections(self) -> CollectionRegistry:
        self.load()
        return self._collections

    # -------------------------------------------------------------------------
    # Product queries
    # -------------------------------------------------------------------------

    def get_all_products(self) -> List[Product]:
        return list(self.products)

    def get_product_by_slug(self, slug: str) -> Optional[Product]:
        normalized = normalize_slug(slug)
        if not normalized:
            return None
        for product in self.products:
            if product.slug == normalized:
                return product
        return None

    def get_products_by_slugs(self, slugs: Sequence[str]) -> List[Product]:
        """Matching products in catalog order."""
        if not slugs:
            return []
        wanted = {normalize_slug(slug) for slug in slugs}
        return [product for product in self.products if product.slug in wanted]

    def get_products_by_category(self, slug: str) -> List[Product]:
        """
        Products in a category, subcategory or alias.

        A category slug includes its subcategories; a subcategory slug
        includes products filed directly under its parent category.
        """
        normalized = normalize_slug(slug) or ""
        related = self.taxonomy.related_slugs(normalized)

        def belongs(product: Product) -> bool:
            if product.category == normalized or product.sub_category == normalized:
                return True
            if product.category in related:
                return True
            return bool(product.sub_category and product.sub_category in related)

        return [product for product in self.products if belongs(product)]

    def get_category_label(self, slug: str) -> Optional[str]:
        normalized = normalize_slug(slug)
        if not normalized:
            return None
        label = self.taxonomy.label_for(normalized)
        if label:
            return label

        for product in self.products:
            if normalized in (product.category, product.sub_category):
                if product.sub_category:
                    return product.sub_category_label or product.sub_category
                return product.category_label or product.category
        return None

    def get_offers(self) -> List[Product]:
        return [product for product in self.products if product.is_on_sale]

    def get_best_sellers(self) -> List[Product]:
        return [product for product in self.products if product.best_seller]

    def get_new_arrivals(self, within_days: int = 30, now: Optional[datetime] = None) -> List[Product]:
        threshold = days_ago(within_days, now=now)
        aware_threshold = threshold.astimezone()

        def is_recent(product: Product) -> bool:
            updated = product.updated_at
            if updated is None:
                return False
            if updated.tzinfo is not None:
                return updated >= aware_threshold
            return updated >= threshold

        return [product for product in self.products if is_recent(product)]

    # -------------------------------------------------------------------------
    # Collections and search
    # -------------------------------------------------------------------------

    def list_collections(self) -> List[Collection]:
        return self.collections.all()

    def find_collection(self, slug: str) -> Optional[Collection]:
        return self.collections.find(slug)

    def get_products_for_collection(self, collection: Union[Collection, str]) -> List[Product]:
        """Products matching a collection (given as model or slug); [] for unknown slugs."""
        if isinstance(collection, str):
            found = self.find_collection(collection)
            if found is None:
                return []
            collection = found
        return self.collections.products_for(collection, self.products)

    def search(
        self,
        filters: CatalogFilters,
        scope: Optional[Iterable[Product]] = None,
    ) -> CatalogSearchResult:
        """
        Filter a product scope (default: whole catalog).

        Facet options describe the unfiltered scope so that selecting a
        value never hides the other values of the same facet.
        """
        scoped = list(self.products if scope is None else scope)
        matches = filter_catalog_products(scoped, filters)
        self.logger.debug("Catalog search", scope=len(scoped), matches=len(matches))
        return CatalogSearchResult(
            products=matches,
            options=collect_catalog_options(scoped),
            total=len(matches),
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "source": self.source.name,
            "products": len(self.products),
            "collections": len(self.collections),
            "taxonomy_slugs": len(self.taxonomy.slug_sets),
        }


@lru_cache(maxsize=1)
def get_catalog_repository() -> CatalogRepository:
    """Process-wide repository built from settings."""
    return CatalogRepository(build_catalog_source(get_settings()))
