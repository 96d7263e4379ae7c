"""
Rule-based product tagging.

Derives semantic tags for a product from three static rule tables:
- BY_CATEGORY: tags implied by the product's category slug
- BY_SUBCATEGORY: tags implied by the subcategory slug
- KEYWORDS: tags implied by a keyword appearing in the product text

Manual tags (typed in by merchandisers as "type:value" strings) always come
first; inferred tags are appended and duplicates are dropped, so enriching
is idempotent.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from catalog.models import Tag, TagType


class Taggable(Protocol):
    """Anything with the fields the tagger reads (Product satisfies it)."""
    category: str
    sub_category: Optional[str]
    name: str
    short_description: Optional[str]
    description_html: Optional[str]
    description_text: Optional[str]
    tags: List[Tag]


@dataclass
class TaggableProduct:
    """Raw product fields, before a Product exists."""
    category: str
    name: str
    sub_category: Optional[str] = None
    short_description: Optional[str] = None
    description_html: Optional[str] = None
    description_text: Optional[str] = None
    tags: List[Tag] = field(default_factory=list)


def _tag(tag_type: TagType, value: str) -> Tag:
    return Tag(type=tag_type, value=value)


# =============================================================================
# Rule Tables
# =============================================================================

BY_CATEGORY: Dict[str, Tuple[Tag, ...]] = {
    "feromonas": (_tag(TagType.FEATURE, "Feromonas"),),
    "vibradores": (_tag(TagType.USO, "Estimulación vibratoria"),),
    "lubricantes": (_tag(TagType.USO, "Lubricación"),),
}

BY_SUBCATEGORY: Dict[str, Tuple[Tag, ...]] = {
    "rabbits": (_tag(TagType.FEATURE, "Estimulación dual"),),
    "clasicos": (_tag(TagType.FEATURE, "Diseño clásico"),),
    "anales": (_tag(TagType.USO, "Estimulación anal"),),
}


@dataclass(frozen=True)
class KeywordRule:
    keyword: str
    tags: Tuple[Tag, ...]


# Order matters: keyword tags are appended in table order
KEYWORDS: Tuple[KeywordRule, ...] = (
    KeywordRule("silicona", (_tag(TagType.MATERIAL, "Silicona"),)),
    KeywordRule("feromona", (_tag(TagType.FEATURE, "Feromonas"),)),
    KeywordRule("vibrador", (_tag(TagType.USO, "Vibración"),)),
    KeywordRule("agua", (_tag(TagType.FEATURE, "Resistente al agua"),)),
)


# =============================================================================
# Parsing
# =============================================================================

TAG_SEPARATOR = ":"
_TAG_TYPES = {t.value: t for t in TagType}


def _normalize_tag_value(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    trimmed = value.strip()
    return trimmed or None


def parse_raw_tag(raw_tag: Optional[str]) -> Optional[Tag]:
    """
    Parse one "type:value" string.

    Untyped strings, strings starting with the separator and strings with
    an unknown type prefix all become feature tags carrying the whole text.
    A known type with an empty value yields None.
    """
    normalized = _normalize_tag_value(raw_tag)
    if not normalized:
        return None

    separator_index = normalized.find(TAG_SEPARATOR)
    if separator_index <= 0:
        return _tag(TagType.FEATURE, normalized)

    possible_type = normalized[:separator_index]
    raw_value = _normalize_tag_value(normalized[separator_index + len(TAG_SEPARATOR):])
    if not raw_value:
        return None

    tag_type = _TAG_TYPES.get(possible_type)
    if tag_type is not None:
        return _tag(tag_type, raw_value)

    return _tag(TagType.FEATURE, normalized)


def parse_tag_strings(raw_tags: Optional[Sequence[Optional[str]]]) -> List[Tag]:
    """Parse and dedupe a list of raw tag strings, skipping blanks."""
    if not raw_tags:
        return []
    parsed = [tag for tag in (parse_raw_tag(raw) for raw in raw_tags) if tag is not None]
    return dedupe_tags(parsed)


def format_tag(tag: Tag) -> str:
    """Inverse of parse_raw_tag for typed tags."""
    return f"{tag.type.value}{TAG_SEPARATOR}{tag.value}"


def dedupe_tags(tags: Iterable[Tag]) -> List[Tag]:
    """Keep the first tag per key (type + case-insensitive value), in order."""
    seen = set()
    deduped: List[Tag] = []
    for tag in tags:
        if tag.key in seen:
            continue
        seen.add(tag.key)
        deduped.append(tag)
    return deduped


# =============================================================================
# Enrichment
# =============================================================================

def gather_keyword_tags(product: Taggable) -> List[Tag]:
    """Tags for every keyword found in the product's name and descriptions."""
    haystack = " ".join(
        value for value in (
            product.name,
            product.short_description,
            product.description_text,
            product.description_html,
        )
        if value
    ).lower()

    if not haystack:
        return []

    keyword_tags: List[Tag] = []
    for rule in KEYWORDS:
        if rule.keyword.lower() in haystack:
            keyword_tags.extend(rule.tags)
    return keyword_tags


def enrich_tags(product: Taggable) -> List[Tag]:
    """
    Manual tags followed by category, subcategory and keyword tags, deduped.

    Manual tags win over inferred duplicates because the first occurrence
    is kept.
    """
    manual_tags = list(product.tags or [])
    category_tags = BY_CATEGORY.get(product.category, ())
    subcategory_tags = BY_SUBCATEGORY.get(product.sub_category, ()) if product.sub_category else ()
    keyword_tags = gather_keyword_tags(product)

    return dedupe_tags([*manual_tags, *category_tags, *subcategory_tags, *keyword_tags])
