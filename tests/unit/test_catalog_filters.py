"""
Unit tests for catalog filtering and facets.

Tests cover:
1. Text normalization (case + diacritics)
2. Query-string parsing/building
3. filter_catalog_products per dimension
4. collect_catalog_options (meaningful values, Spanish ordering)
"""

import pytest
from starlette.datastructures import QueryParams

from catalog.filters import (
    build_catalog_search_params,
    collect_catalog_options,
    encode_catalog_search_params,
    filter_catalog_products,
    is_meaningful_attribute,
    normalize_catalog_text,
    parse_catalog_search_params,
)
from catalog.models import CatalogFilters


@pytest.fixture
def products(make_product):
    return [
        make_product(
            "rabbit",
            name="Vibrador Rabbit",
            brand="Satisfyer",
            attributes={"material": "Silicóna", "longitud": "20 cm", "diametro": "3,5 cm", "color": "Rosa"},
        ),
        make_product(
            "bala",
            name="Bala clásica",
            brand="Lelo",
            attributes={"material": "ABS", "longitud": "9 cm", "diametro": "Valor por defecto"},
        ),
        make_product(
            "plug",
            name="Plug inicio",
            brand="Ánfora",
            attributes={"material": "silicona", "longitud": "12 cm", "sumergible": True},
        ),
        make_product("bolsa", name="Bolsa", brand=None, attributes={}),
    ]


def slugs(products):
    return [p.slug for p in products]


# =============================================================================
# Normalization
# =============================================================================

class TestNormalizeCatalogText:

    def test_lowercases_and_strips_accents(self):
        assert normalize_catalog_text("Silicóna MÉDICA") == "silicona medica"

    def test_enye_loses_tilde(self):
        assert normalize_catalog_text("Ñandú") == "nandu"


class TestIsMeaningfulAttribute:

    @pytest.mark.parametrize("value", ["Silicona", True, False, 0, 3.5])
    def test_meaningful(self, value):
        assert is_meaningful_attribute(value) is True

    @pytest.mark.parametrize("value", [None, "", "   ", "Valor por defecto", "valor por DEFECTO (10)"])
    def test_not_meaningful(self, value):
        assert is_meaningful_attribute(value) is False


# =============================================================================
# Query-string round trip
# =============================================================================

class TestSearchParams:

    def test_parse_query_string(self):
        filters = parse_catalog_search_params("?q=rabbit&brand=Lelo&brand=Satisfyer&material=ABS&longitud=9+cm")

        assert filters.query == "rabbit"
        assert filters.brands == ["Lelo", "Satisfyer"]
        assert filters.materials == ["ABS"]
        assert filters.longitud == "9 cm"
        assert filters.diametro is None

    def test_parse_starlette_query_params(self):
        params = QueryParams("brand=Lelo&brand=Womanizer&diametro=3%2C5+cm")
        filters = parse_catalog_search_params(params)

        assert filters.query == ""
        assert filters.brands == ["Lelo", "Womanizer"]
        assert filters.diametro == "3,5 cm"

    def test_parse_plain_dict(self):
        filters = parse_catalog_search_params({"q": "gel", "material": ["Silicona", "ABS"]})

        assert filters.query == "gel"
        assert filters.materials == ["Silicona", "ABS"]
        assert filters.brands == []

    def test_build_skips_empty_values(self):
        filters = CatalogFilters(query="", brands=["Lelo", ""], materials=["ABS"], longitud=None, diametro="2 cm")

        assert build_catalog_search_params(filters) == [
            ("brand", "Lelo"),
            ("material", "ABS"),
            ("diametro", "2 cm"),
        ]

    def test_encode_then_parse(self):
        filters = CatalogFilters(query="doble motor", brands=["Lelo"], longitud="9 cm")
        encoded = encode_catalog_search_params(filters)

        assert encoded == "q=doble+motor&brand=Lelo&longitud=9+cm"
        assert parse_catalog_search_params(encoded) == filters


# =============================================================================
# Filtering
# =============================================================================

class TestFilterCatalogProducts:

    def test_no_filters_returns_everything_in_order(self, products):
        assert slugs(filter_catalog_products(products, CatalogFilters())) == ["rabbit", "bala", "plug", "bolsa"]

    def test_query_matches_name_accent_insensitively(self, products):
        result = filter_catalog_products(products, CatalogFilters(query="  CLASICA "))
        assert slugs(result) == ["bala"]

    def test_query_matches_brand_and_string_attributes(self, products):
        assert slugs(filter_catalog_products(products, CatalogFilters(query="anfora"))) == ["plug"]
        assert slugs(filter_catalog_products(products, CatalogFilters(query="rosa"))) == ["rabbit"]

    def test_query_ignores_non_string_attributes(self, products):
        assert filter_catalog_products(products, CatalogFilters(query="true")) == []

    def test_brand_filter_is_or_within(self, products):
        result = filter_catalog_products(products, CatalogFilters(brands=["lelo", "ANFORA"]))
        assert slugs(result) == ["bala", "plug"]

    def test_brand_filter_excludes_products_without_brand(self, products):
        result = filter_catalog_products(products, CatalogFilters(brands=["Satisfyer"]))
        assert "bolsa" not in slugs(result)

    def test_material_filter_normalizes(self, products):
        result = filter_catalog_products(products, CatalogFilters(materials=["SILICONA"]))
        assert slugs(result) == ["rabbit", "plug"]

    def test_longitud_and_diametro_are_exact_after_normalization(self, products):
        assert slugs(filter_catalog_products(products, CatalogFilters(longitud="20 CM"))) == ["rabbit"]
        assert slugs(filter_catalog_products(products, CatalogFilters(diametro="3,5 cm"))) == ["rabbit"]
        assert filter_catalog_products(products, CatalogFilters(longitud="20")) == []

    def test_dimensions_combine_with_and(self, products):
        filters = CatalogFilters(brands=["Lelo", "Satisfyer"], materials=["silicona"])
        assert slugs(filter_catalog_products(products, filters)) == ["rabbit"]


# =============================================================================
# Facets
# =============================================================================

class TestCollectCatalogOptions:

    def test_collects_distinct_sorted_values(self, products):
        options = collect_catalog_options(products)

        assert options.brands == ["Ánfora", "Lelo", "Satisfyer"]
        # Equal ignoring accents and case: lowercase wins the tie
        assert options.materials == ["ABS", "silicona", "Silicóna"]
        assert options.longitudes == ["12 cm", "20 cm", "9 cm"]

    def test_placeholder_values_are_skipped(self, products):
        options = collect_catalog_options(products)
        assert options.diametros == ["3,5 cm"]

    def test_lowercase_sorts_before_uppercase(self, make_product):
        options = collect_catalog_options([
            make_product("a", brand="Lelo"),
            make_product("b", brand="lelo"),
        ])
        assert options.brands == ["lelo", "Lelo"]

    def test_enye_sorts_after_n(self, make_product):
        options = collect_catalog_options([
            make_product("a", brand="Ñandú"),
            make_product("b", brand="Nube"),
            make_product("c", brand="Oso"),
        ])
        assert options.brands == ["Nube", "Ñandú", "Oso"]

    def test_empty_catalog(self):
        options = collect_catalog_options([])
        assert options.brands == [] and options.materials == []
