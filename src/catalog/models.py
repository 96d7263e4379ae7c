"""
Pydantic models for the catalog.

Models cover:
- Tags (typed classification labels)
- Products as served by the API
- Catalog filters and facet options
- Collections and their matching rules
- Category taxonomy records
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class TagType(str, Enum):
    """Dimension a tag classifies a product along."""
    PERSONA = "persona"    # Who it is for (parejas, ella, él)
    USO = "uso"            # What it is used for
    FEATURE = "feature"    # Distinguishing characteristic
    MATERIAL = "material"  # What it is made of


class ProductBadge(str, Enum):
    """Merchandising badge shown on product cards."""
    NUEVO = "nuevo"
    TOP = "top"
    PROMO = "promo"


AttributeValue = Union[str, bool, int, float, None]


# =============================================================================
# Tags
# =============================================================================

class Tag(BaseModel):
    """A (type, value) classification label."""
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    type: TagType
    value: str

    @property
    def key(self) -> str:
        """Identity used for dedup and matching (value compared case-insensitively)."""
        return f"{self.type.value}:{self.value.lower()}"


# =============================================================================
# Products
# =============================================================================

class Product(BaseModel):
    """A catalog product after mapping, sanitizing and tag enrichment."""
    id: Optional[Union[int, str]] = None
    slug: str
    name: str
    description_html: Optional[str] = None
    description_text: Optional[str] = None
    short_description: Optional[str] = None

    regular_price: float = 0
    sale_price: Optional[float] = None
    stock_status: Optional[str] = None
    sku: Optional[str] = None
    brand: Optional[str] = None

    category: str
    category_label: Optional[str] = None
    sub_category: Optional[str] = None
    sub_category_label: Optional[str] = None

    attributes: Dict[str, AttributeValue] = Field(default_factory=dict)
    tags: List[Tag] = Field(default_factory=list)

    badge: Optional[ProductBadge] = None
    best_seller: bool = False
    nsfw: bool = False
    rating: Optional[float] = None
    review_count: Optional[int] = None
    embedding_text: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_on_sale(self) -> bool:
        return self.sale_price is not None and self.sale_price < self.regular_price


# =============================================================================
# Filters
# =============================================================================

class CatalogFilters(BaseModel):
    """User-selected filter values for a product listing."""
    query: str = ""
    brands: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    longitud: Optional[str] = None
    diametro: Optional[str] = None


class CatalogFilterOptions(BaseModel):
    """Facet values available in a product listing."""
    brands: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    longitudes: List[str] = Field(default_factory=list)
    diametros: List[str] = Field(default_factory=list)


class CatalogSearchResult(BaseModel):
    """Filtered products plus the facet options of the unfiltered scope."""
    products: List[Product]
    options: CatalogFilterOptions
    total: int


# =============================================================================
# Collections
# =============================================================================

class AnyOfRule(BaseModel):
    """Match when a product has any of the tags or belongs to any of the categories."""
    tags: List[Tag] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)


class CollectionRule(BaseModel):
    any_of: Optional[AnyOfRule] = None


class Collection(BaseModel):
    """A named, rule-defined subset of the catalog."""
    slug: str
    title: str
    description: Optional[str] = None
    hero_image: Optional[str] = None
    rule: CollectionRule = Field(default_factory=CollectionRule)


# =============================================================================
# Taxonomy
# =============================================================================

class Subcategory(BaseModel):
    slug: str
    label: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)


class Category(BaseModel):
    slug: str
    label: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)
    children: List[Subcategory] = Field(default_factory=list)
