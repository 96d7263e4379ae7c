"""
Catalog filtering and faceting.

Pure functions over an in-memory product list:
- parse/build the query-string form of CatalogFilters
- filter products by free-text query, brand, material, length and diameter
- collect the facet options offered in the filter panel

String comparisons are case- and accent-insensitive throughout.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qsl, urlencode

from catalog.models import AttributeValue, CatalogFilterOptions, CatalogFilters, Product
from config.constants import (
    DIAMETER_ATTRIBUTE,
    LENGTH_ATTRIBUTE,
    MATERIAL_ATTRIBUTE,
    PLACEHOLDER_ATTRIBUTE_MARKER,
    SEARCH_PARAMS,
)
from core.utils import spanish_sort_key, strip_diacritics


SearchParamsInput = Union[str, Mapping, Sequence[Tuple[str, str]], Any]


def normalize_catalog_text(value: str) -> str:
    """Lowercase and strip diacritics ("Silicóna" -> "silicona")."""
    return strip_diacritics(value.lower())


def _same_text(a: str, b: str) -> bool:
    return normalize_catalog_text(a) == normalize_catalog_text(b)


def is_meaningful_attribute(value: AttributeValue) -> bool:
    """
    Whether an attribute value is worth showing as a facet option.

    Booleans and numbers always are. Strings must be non-blank and not
    the importer's "valor por defecto" placeholder.
    """
    if value is None:
        return False
    if isinstance(value, (bool, int, float)):
        return True
    if not isinstance(value, str):
        return False
    normalized = value.strip()
    if not normalized:
        return False
    return PLACEHOLDER_ATTRIBUTE_MARKER not in normalized.lower()


# =============================================================================
# Query-string round trip
# =============================================================================

def _as_multi_mapping(params: SearchParamsInput) -> Any:
    """Coerce a query string or list of pairs into something with getlist()."""
    if isinstance(params, str):
        params = parse_qsl(params.lstrip("?"), keep_blank_values=True)
    if isinstance(params, (list, tuple)):
        grouped: dict = {}
        for key, value in params:
            grouped.setdefault(key, []).append(value)
        return grouped
    return params


def _get_all(params: Any, key: str) -> List[str]:
    if hasattr(params, "getlist"):
        return list(params.getlist(key))
    value = params.get(key) if isinstance(params, Mapping) else None
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _get_first(params: Any, key: str) -> Optional[str]:
    values = _get_all(params, key)
    return values[0] if values else None


def parse_catalog_search_params(params: SearchParamsInput) -> CatalogFilters:
    """
    Read filters from query parameters.

    Accepts a query string, a list of (key, value) pairs, a plain dict
    (values may be lists) or any multi-dict exposing getlist().
    """
    multi = _as_multi_mapping(params)
    return CatalogFilters(
        query=_get_first(multi, SEARCH_PARAMS.QUERY) or "",
        brands=_get_all(multi, SEARCH_PARAMS.BRAND),
        materials=_get_all(multi, SEARCH_PARAMS.MATERIAL),
        longitud=_get_first(multi, SEARCH_PARAMS.LENGTH),
        diametro=_get_first(multi, SEARCH_PARAMS.DIAMETER),
    )


def build_catalog_search_params(filters: CatalogFilters) -> List[Tuple[str, str]]:
    """Inverse of parse_catalog_search_params; empty values are omitted."""
    params: List[Tuple[str, str]] = []
    if filters.query:
        params.append((SEARCH_PARAMS.QUERY, filters.query))
    params.extend((SEARCH_PARAMS.BRAND, brand) for brand in filters.brands if brand)
    params.extend((SEARCH_PARAMS.MATERIAL, material) for material in filters.materials if material)
    if filters.longitud:
        params.append((SEARCH_PARAMS.LENGTH, filters.longitud))
    if filters.diametro:
        params.append((SEARCH_PARAMS.DIAMETER, filters.diametro))
    return params


def encode_catalog_search_params(filters: CatalogFilters) -> str:
    """URL-encoded query string for the filters (no leading '?')."""
    return urlencode(build_catalog_search_params(filters))


# =============================================================================
# Filtering
# =============================================================================

def _search_haystack(product: Product) -> str:
    values = [product.name, product.brand, *product.attributes.values()]
    return " ".join(normalize_catalog_text(v) for v in values if isinstance(v, str))


def _matches_any(value: Optional[str], selected: Sequence[str]) -> bool:
    if not value:
        return False
    return any(_same_text(candidate, value) for candidate in selected)


def _string_attribute(product: Product, key: str) -> Optional[str]:
    value = product.attributes.get(key)
    return value if isinstance(value, str) and value else None


def product_matches_filters(product: Product, filters: CatalogFilters) -> bool:
    """AND across dimensions, OR within brand and material selections."""
    normalized_query = normalize_catalog_text(filters.query).strip()
    if normalized_query and normalized_query not in _search_haystack(product):
        return False

    if filters.brands and not _matches_any(product.brand, filters.brands):
        return False

    if filters.materials and not _matches_any(
        _string_attribute(product, MATERIAL_ATTRIBUTE), filters.materials
    ):
        return False

    if filters.longitud:
        longitud = _string_attribute(product, LENGTH_ATTRIBUTE)
        if not longitud or not _same_text(longitud, filters.longitud):
            return False

    if filters.diametro:
        diametro = _string_attribute(product, DIAMETER_ATTRIBUTE)
        if not diametro or not _same_text(diametro, filters.diametro):
            return False

    return True


def filter_catalog_products(products: Iterable[Product], filters: CatalogFilters) -> List[Product]:
    """Products matching every active filter, in input order."""
    return [product for product in products if product_matches_filters(product, filters)]


# =============================================================================
# Facets
# =============================================================================

def _sorted_options(values: set) -> List[str]:
    return sorted(values, key=spanish_sort_key)


def collect_catalog_options(products: Iterable[Product]) -> CatalogFilterOptions:
    """Distinct brand, material, length and diameter values, Spanish-sorted."""
    brands: set = set()
    materials: set = set()
    longitudes: set = set()
    diametros: set = set()

    for product in products:
        if product.brand:
            brands.add(product.brand)

        for key, bucket in (
            (MATERIAL_ATTRIBUTE, materials),
            (LENGTH_ATTRIBUTE, longitudes),
            (DIAMETER_ATTRIBUTE, diametros),
        ):
            value = product.attributes.get(key)
            if isinstance(value, str) and is_meaningful_attribute(value):
                bucket.add(value)

    return CatalogFilterOptions(
        brands=_sorted_options(brands),
        materials=_sorted_options(materials),
        longitudes=_sorted_options(longitudes),
        diametros=_sorted_options(diametros),
    )
