"""
Category taxonomy.

Resolves a category, subcategory or alias slug to the set of slugs a
category page should include, and to its display label.

- category slug or alias      -> {category, every child subcategory}
- subcategory slug or alias   -> {subcategory, parent category}
"""

from typing import Dict, Iterable, Optional, Set

from catalog.models import Category
from core.utils import normalize_slug


class Taxonomy:
    """Slug sets and labels built from Category records."""

    def __init__(self, categories: Iterable[Category]):
        self.slug_sets: Dict[str, Set[str]] = {}
        self.label_lookup: Dict[str, str] = {}

        for category in categories:
            category_label = category.label or category.slug
            base_set = {category.slug, *(child.slug for child in category.children)}
            self.label_lookup[category.slug] = category_label
            self.slug_sets[category.slug] = base_set

            for alias in category.aliases:
                self.slug_sets[alias] = set(base_set)
                self.label_lookup[alias] = category_label

            for subcategory in category.children:
                subcategory_label = subcategory.label or subcategory.slug
                self.label_lookup[subcategory.slug] = subcategory_label
                self.slug_sets[subcategory.slug] = {subcategory.slug, category.slug}

                for alias in subcategory.aliases:
                    self.slug_sets[alias] = {subcategory.slug, category.slug}
                    self.label_lookup[alias] = subcategory_label

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "Taxonomy":
        """Build from raw JSON/DB records (children and aliases optional)."""
        return cls(Category.model_validate(_normalize_record(record)) for record in records)

    def related_slugs(self, slug: str) -> Set[str]:
        normalized = normalize_slug(slug) or ""
        return set(self.slug_sets.get(normalized, {normalized}))

    def label_for(self, slug: str) -> Optional[str]:
        normalized = normalize_slug(slug)
        if not normalized:
            return None
        return self.label_lookup.get(normalized)

    def __contains__(self, slug: str) -> bool:
        return (normalize_slug(slug) or "") in self.slug_sets


def _normalize_record(record: dict) -> dict:
    # Aliases arrive either as plain slugs or as {"aliasSlug": ...} rows
    def aliases(raw) -> list:
        result = []
        for alias in raw or []:
            if isinstance(alias, dict):
                value = alias.get("aliasSlug") or alias.get("alias_slug")
            else:
                value = alias
            normalized = normalize_slug(value)
            if normalized:
                result.append(normalized)
        return result

    children = record.get("children") or record.get("subcategories") or []
    return {
        "slug": normalize_slug(record.get("slug")) or "",
        "label": record.get("label"),
        "aliases": aliases(record.get("aliases")),
        "children": [
            {
                "slug": normalize_slug(child.get("slug")) or "",
                "label": child.get("label"),
                "aliases": aliases(child.get("aliases")),
            }
            for child in children
        ],
    }
