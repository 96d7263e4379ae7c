"""
Catalog API Routes.

Read-only endpoints over the in-memory catalog: product listings, single
product lookup, category pages, collections and faceted search.

Errors use the storefront's JSON shape: {"error": "..."} with 400 for a
missing required parameter and 404 for an unknown slug.

NOTE: Routes use `def` (not `async def`) because the repository is
synchronous; FastAPI runs them in its thread pool.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from catalog.filters import parse_catalog_search_params
from catalog.models import Product
from catalog.repository import CatalogRepository, get_catalog_repository
from config.settings import Settings, get_settings
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])


# =============================================================================
# Helpers
# =============================================================================

def _cache_headers(seconds: int) -> Dict[str, str]:
    return {"Cache-Control": f"public, s-maxage={seconds}, stale-while-revalidate={seconds}"}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _dump(products: List[Product]) -> List[Dict[str, Any]]:
    return [product.model_dump(mode="json") for product in products]


def _ok(content: Any, seconds: int) -> JSONResponse:
    return JSONResponse(content, headers=_cache_headers(seconds))


# =============================================================================
# Products
# =============================================================================

@router.get("/products", summary="All products")
def list_products(
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    return _ok(_dump(repo.get_all_products()), settings.products_cache_seconds)


@router.get("/product", summary="Single product by slug")
def get_product(
    slug: Optional[str] = Query(None, description="Product slug"),
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    if not slug:
        return _error(400, "Missing slug parameter")

    product = repo.get_product_by_slug(slug)
    if product is None:
        return _error(404, "Product not found")

    return _ok(product.model_dump(mode="json"), settings.product_cache_seconds)


@router.get("/category", summary="First products of a category")
def get_category_products(
    slug: Optional[str] = Query(None, description="Category, subcategory or alias slug"),
    limit: Optional[int] = Query(None, description="Number of products (minimum 1)"),
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    if not slug:
        return _error(400, "Missing slug parameter")

    effective_limit = max(1, limit) if limit is not None else settings.category_default_limit
    products = repo.get_products_by_category(slug)
    return _ok(_dump(products[:effective_limit]), settings.product_cache_seconds)


@router.get("/category-label", summary="Display label for a category slug")
def get_category_label(
    slug: Optional[str] = Query(None),
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    if not slug:
        return _error(400, "Missing slug parameter")

    label = repo.get_category_label(slug)
    if label is None:
        return _error(404, "Category not found")

    return _ok({"slug": slug.strip().lower(), "label": label}, settings.product_cache_seconds)


@router.get("/offers", summary="Products on sale")
def list_offers(
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    return _ok(_dump(repo.get_offers()), settings.products_cache_seconds)


@router.get("/best-sellers", summary="Best-selling products")
def list_best_sellers(
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    return _ok(_dump(repo.get_best_sellers()), settings.products_cache_seconds)


@router.get("/new-arrivals", summary="Recently updated products")
def list_new_arrivals(
    days: Optional[int] = Query(None, description="Window in days"),
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    within_days = days if days is not None else settings.new_arrivals_days
    return _ok(_dump(repo.get_new_arrivals(within_days)), settings.products_cache_seconds)


# =============================================================================
# Collections
# =============================================================================

@router.get("/collections", summary="All collections")
def list_collections(
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    collections = [c.model_dump(mode="json") for c in repo.list_collections()]
    return _ok(collections, settings.products_cache_seconds)


@router.get("/collections/{slug}", summary="Collection with its products")
def get_collection(
    slug: str,
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    collection = repo.find_collection(slug)
    if collection is None:
        return _error(404, "Collection not found")

    products = repo.get_products_for_collection(collection)
    return _ok(
        {"collection": collection.model_dump(mode="json"), "products": _dump(products)},
        settings.product_cache_seconds,
    )


# =============================================================================
# Search
# =============================================================================

@router.get("/search", summary="Faceted catalog search")
def search_catalog(
    request: Request,
    category: Optional[str] = Query(None, description="Restrict to a category slug"),
    collection: Optional[str] = Query(None, description="Restrict to a collection slug"),
    repo: CatalogRepository = Depends(get_catalog_repository),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Filter by q, brand (repeatable), material (repeatable), longitud and
    diametro. Options list the facet values of the scope before filtering.
    """
    filters = parse_catalog_search_params(request.query_params)

    scope = None
    if collection:
        found = repo.find_collection(collection)
        if found is None:
            return _error(404, "Collection not found")
        scope = repo.get_products_for_collection(found)
    if category:
        category_products = repo.get_products_by_category(category)
        if scope is None:
            scope = category_products
        else:
            in_category = {p.slug for p in category_products}
            scope = [p for p in scope if p.slug in in_category]

    result = repo.search(filters, scope=scope)
    logger.info(
        "Catalog search",
        query=filters.query or None,
        brands=filters.brands or None,
        materials=filters.materials or None,
        total=result.total,
    )
    return _ok(result.model_dump(mode="json"), settings.product_cache_seconds)
