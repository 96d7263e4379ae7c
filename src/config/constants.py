"""
Application constants and catalog configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet


# =============================================================================
# Description Sanitizer
# =============================================================================

@dataclass(frozen=True)
class SanitizerConfig:
    """Allow-list used when cleaning product description HTML."""

    ALLOWED_TAGS: FrozenSet[str] = frozenset({
        "p", "br", "strong", "em", "b", "i", "u",
        "ul", "ol", "li", "a", "h2", "h3", "h4",
        "blockquote", "span",
    })

    # Attributes kept per tag; anything not listed is stripped
    ALLOWED_ATTRIBUTES: Dict[str, FrozenSet[str]] = field(default_factory=lambda: {
        "a": frozenset({"href", "title"}),
    })

    ALLOWED_URL_SCHEMES: FrozenSet[str] = frozenset({"http", "https", "mailto"})

    # Removed together with their content (other disallowed tags are unwrapped)
    DROP_WITH_CONTENT: FrozenSet[str] = frozenset({
        "script", "style", "iframe", "object", "embed", "noscript", "template",
    })


DEFAULT_SANITIZER_CONFIG = SanitizerConfig()


# =============================================================================
# Catalog Facets
# =============================================================================

# Attribute keys exposed as facets in the filter panel
MATERIAL_ATTRIBUTE = "material"
LENGTH_ATTRIBUTE = "longitud"
DIAMETER_ATTRIBUTE = "diametro"
BRAND_ATTRIBUTE = "brand"

# Importer placeholder for "no value"; such attributes are not offered as options
PLACEHOLDER_ATTRIBUTE_MARKER = "valor por defecto"


# =============================================================================
# Search Parameters
# =============================================================================

@dataclass(frozen=True)
class SearchParamNames:
    """Query-string keys for catalog filters."""
    QUERY: str = "q"
    BRAND: str = "brand"
    MATERIAL: str = "material"
    LENGTH: str = "longitud"
    DIAMETER: str = "diametro"


SEARCH_PARAMS = SearchParamNames()
