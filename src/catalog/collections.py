"""
Rule-defined product collections.

A collection ("para-ella", "principiantes", ...) selects products whose
tags or category membership match its rule. Rules come from JSON as raw
strings and are normalized once when the registry is built.
"""

from typing import Any, Dict, Iterable, List, Optional

from catalog.models import AnyOfRule, Collection, CollectionRule, Product, Tag
from catalog.tagging import TaggableProduct, enrich_tags, parse_tag_strings
from core.logging import get_logger
from core.utils import normalize_slug

logger = get_logger(__name__)


def normalize_category_slug(slug: Optional[str]) -> Optional[str]:
    return normalize_slug(slug)


def _normalize_any_of(raw_any_of: Optional[Dict[str, Any]]) -> Optional[AnyOfRule]:
    if not raw_any_of:
        return None
    tags = parse_tag_strings(raw_any_of.get("tags") or [])
    categories = [
        category for category in (
            normalize_category_slug(raw) for raw in raw_any_of.get("categories") or []
        )
        if category
    ]
    if not tags and not categories:
        return None
    return AnyOfRule(tags=tags, categories=categories)


def normalize_collection(raw: Dict[str, Any]) -> Collection:
    """
    Build a Collection from its JSON record.

    Rule tags are parsed from "type:value" strings and rule categories are
    trimmed and lowercased. A rule left with no tags and no categories
    matches every product.
    """
    raw_rule = raw.get("rule") or {}
    any_of = _normalize_any_of(raw_rule.get("anyOf") or raw_rule.get("any_of"))
    return Collection(
        slug=normalize_slug(raw.get("slug")) or "",
        title=raw.get("title") or raw.get("label") or raw.get("slug") or "",
        description=raw.get("description"),
        hero_image=raw.get("heroImage") or raw.get("hero_image"),
        rule=CollectionRule(any_of=any_of),
    )


# =============================================================================
# Matching
# =============================================================================

def get_product_tags(product: Product) -> List[Tag]:
    """Stored tags, or tags inferred from category and text when none are stored."""
    if product.tags:
        return product.tags
    return enrich_tags(TaggableProduct(
        category=product.category,
        sub_category=product.sub_category,
        name=product.name,
        short_description=product.short_description,
        description_html=product.description_html,
        description_text=product.description_text,
    ))


def _has_matching_tag(product_tags: List[Tag], rule_tags: List[Tag]) -> bool:
    if not rule_tags:
        return False
    product_keys = {tag.key for tag in product_tags}
    return any(tag.key in product_keys for tag in rule_tags)


def _has_matching_category(product: Product, categories: List[str]) -> bool:
    if not categories:
        return False
    product_categories = [
        slug for slug in (
            normalize_category_slug(product.category),
            normalize_category_slug(product.sub_category),
        )
        if slug
    ]
    return any(category in product_categories for category in categories)


def match_collection(product: Product, rule: CollectionRule) -> bool:
    """True when any rule tag or any rule category matches the product."""
    any_of = rule.any_of
    if any_of is None:
        return True
    if _has_matching_tag(get_product_tags(product), any_of.tags):
        return True
    return _has_matching_category(product, any_of.categories)


# =============================================================================
# Registry
# =============================================================================

class CollectionRegistry:
    """Normalized collections, looked up by slug."""

    def __init__(self, raw_collections: Iterable[Dict[str, Any]]):
        self._collections: List[Collection] = []
        for raw in raw_collections:
            collection = normalize_collection(raw)
            if not collection.slug:
                logger.warning("Skipping collection without slug", title=collection.title)
                continue
            self._collections.append(collection)

    def __len__(self) -> int:
        return len(self._collections)

    def all(self) -> List[Collection]:
        return list(self._collections)

    def find(self, slug: Optional[str]) -> Optional[Collection]:
        normalized = normalize_category_slug(slug)
        if not normalized:
            return None
        for collection in self._collections:
            if collection.slug == normalized:
                return collection
        return None

    def products_for(self, collection: Collection, products: Iterable[Product]) -> List[Product]:
        return [product for product in products if match_collection(product, collection.rule)]
