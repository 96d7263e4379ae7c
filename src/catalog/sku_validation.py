"""
Duplicate SKU detection for the product export.

Used by scripts/validate_skus.py before a catalog file is published.
"""

from typing import Any, Dict, Iterable, List


def find_duplicate_skus(products: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Group products that share a non-empty SKU.

    Returns:
        SKU -> products carrying it (first occurrence included), in input
        order. SKUs used once are not included.
    """
    seen: Dict[str, Dict[str, Any]] = {}
    duplicates: Dict[str, List[Dict[str, Any]]] = {}

    for product in products:
        sku = product.get("sku") if isinstance(product, dict) else None
        if not sku:
            continue
        if sku in seen:
            duplicates.setdefault(sku, [seen[sku]]).append(product)
        else:
            seen[sku] = product

    return duplicates


def format_duplicate_report(duplicates: Dict[str, List[Dict[str, Any]]]) -> List[str]:
    """One line per SKU: '  SKU -> id:slug, id:slug'."""
    lines = []
    for sku, items in duplicates.items():
        ids = [
            f"{item.get('id') if item.get('id') is not None else 'unknown-id'}:"
            f"{item.get('slug') or 'unknown-slug'}"
            for item in items
        ]
        lines.append(f"  {sku} -> {', '.join(ids)}")
    return lines
