"""
Catalog domain: tagging, filtering, collections and the product repository.
"""

from catalog.collections import CollectionRegistry, match_collection
from catalog.filters import (
    collect_catalog_options,
    filter_catalog_products,
    normalize_catalog_text,
    parse_catalog_search_params,
)
from catalog.models import CatalogFilters, Collection, Product, Tag, TagType
from catalog.repository import CatalogRepository, get_catalog_repository
from catalog.tagging import enrich_tags, parse_tag_strings

__all__ = [
    "CatalogFilters",
    "CatalogRepository",
    "Collection",
    "CollectionRegistry",
    "Product",
    "Tag",
    "TagType",
    "collect_catalog_options",
    "enrich_tags",
    "filter_catalog_products",
    "get_catalog_repository",
    "match_collection",
    "normalize_catalog_text",
    "parse_catalog_search_params",
    "parse_tag_strings",
]
