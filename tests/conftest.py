"""
Pytest configuration and shared fixtures for the catalog tests.
"""
import os
import sys
from typing import AsyncGenerator, List

import pytest
from httpx import ASGITransport, AsyncClient

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Fixtures: Raw Catalog Records
# ============================================================================

@pytest.fixture
def raw_categories() -> List[dict]:
    """Category taxonomy as exported from the shop."""
    return [
        {
            "slug": "vibradores",
            "label": "Vibradores",
            "aliases": ["vibes"],
            "children": [
                {"slug": "rabbits", "label": "Vibradores rabbit", "aliases": ["conejitos"]},
                {"slug": "clasicos", "label": "Vibradores clásicos"},
            ],
        },
        {"slug": "lubricantes", "label": "Lubricantes íntimos", "children": []},
        {"slug": "accesorios", "children": []},
    ]


@pytest.fixture
def raw_collections() -> List[dict]:
    return [
        {
            "slug": "para-ella",
            "title": "Para ella",
            "rule": {"anyOf": {"tags": ["persona:ella"], "categories": ["clasicos"]}},
        },
        {
            "slug": "lubricacion",
            "title": "Lubricación",
            "rule": {"anyOf": {"categories": [" Lubricantes "]}},
        },
        {"slug": "todo", "title": "Todo", "rule": {}},
    ]


@pytest.fixture
def raw_products() -> List[dict]:
    """Product records in the JSON export shape (camelCase)."""
    return [
        {
            "id": 1,
            "slug": "rabbit-aqua",
            "name": "Vibrador rabbit Aqua",
            "shortDescription": "Vibrador de silicona doble estimulación",
            "descriptionHtml": '<p class="x">Resistente al agua.</p><script>alert(1)</script>',
            "regularPrice": 59990,
            "salePrice": 49990,
            "sku": "VIB-001",
            "category": "vibradores",
            "subCategory": "rabbits",
            "tags": ["persona:ella"],
            "attributes": {"brand": "Satisfyer", "material": "Silicona", "longitud": "20 cm", "diametro": "3,5 cm"},
            "bestSeller": True,
            "badge": "TOP",
            "modifiedAt": "2026-10-01T12:00:00",
        },
        {
            "id": 2,
            "slug": "bala-clasica",
            "name": "Bala clásica",
            "regularPrice": 19990,
            "sku": "VIB-002",
            "category": "vibradores",
            "subCategory": "clasicos",
            "attributes": {"brand": "Lelo", "material": "ABS", "diametro": "Valor por defecto"},
            "badge": "raro",
            "modifiedAt": "2025-01-15T09:30:00",
        },
        {
            "id": 3,
            "slug": "lubricante-aqua",
            "name": "Lubricante Aqua",
            "shortDescription": "Base agua",
            "regularPrice": 8990,
            "salePrice": 9990,
            "sku": "LUB-003",
            "category": "Lubricantes",
            "attributes": {"brand": "  Sistalia  ", "material": ""},
            "modifiedAt": "2026-09-30T00:00:00",
        },
        {
            "id": 4,
            "slug": "bolsa",
            "name": "Bolsa de almacenamiento",
            "regularPrice": 4990,
            "category": "accesorios",
        },
        {
            "id": 5,
            "slug": "sin-categoria",
            "name": "Producto huérfano",
            "regularPrice": 100,
        },
    ]


# ============================================================================
# Fixtures: Repository
# ============================================================================

@pytest.fixture
def catalog_source(raw_products, raw_categories, raw_collections):
    from catalog.sources import InMemoryCatalogSource
    return InMemoryCatalogSource(raw_products, raw_categories, raw_collections)


@pytest.fixture
def repository(catalog_source):
    """Repository over the in-memory sample catalog."""
    from catalog.repository import CatalogRepository
    return CatalogRepository(catalog_source)


@pytest.fixture
def make_product():
    """Factory for Product models with sensible defaults."""
    from catalog.models import Product

    def _make(slug: str = "producto", **overrides) -> Product:
        data = {
            "slug": slug,
            "name": overrides.pop("name", slug.replace("-", " ").title()),
            "category": overrides.pop("category", "vibradores"),
        }
        data.update(overrides)
        return Product(**data)

    return _make


@pytest.fixture
def supabase_without_credentials(monkeypatch):
    """Supabase selected as catalog source but SUPABASE_URL / key unset."""
    from config import database
    from config.settings import get_settings_for_testing

    settings = get_settings_for_testing(catalog_source="supabase", supabase_url=None, supabase_service_key=None)
    monkeypatch.setattr(database, "get_settings", lambda: settings)
    database.get_supabase_client.cache_clear()
    yield settings
    database.get_supabase_client.cache_clear()


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app(repository):
    """FastAPI application wired to the sample repository."""
    from api.app import create_app
    from catalog.repository import get_catalog_repository

    application = create_app()
    application.dependency_overrides[get_catalog_repository] = lambda: repository
    return application


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "supabase: marks tests that require Supabase")


def pytest_collection_modifyitems(config, items):
    """Auto-skip Supabase tests when no credentials are configured."""
    skip_supabase = pytest.mark.skip(reason="Supabase tests require credentials")
    if os.getenv("SUPABASE_URL"):
        return
    for item in items:
        if "supabase" in item.keywords:
            item.add_marker(skip_supabase)
