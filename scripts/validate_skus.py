#!/usr/bin/env python3
"""
Check the product export for duplicate SKUs.

Exits 1 when the file cannot be parsed or when any SKU is shared by more
than one product, 0 otherwise.

Usage:
    python scripts/validate_skus.py
    python scripts/validate_skus.py --path data/products.json
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from catalog.exceptions import CatalogLoadError
from catalog.sku_validation import find_duplicate_skus, format_duplicate_report
from catalog.sources import read_json_records


DEFAULT_PATH = Path(__file__).parent.parent / "data" / "products.json"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Detect duplicate SKUs in products.json")
    parser.add_argument("--path", type=Path, default=DEFAULT_PATH, help="Product export to check")
    args = parser.parse_args(argv)

    try:
        products = read_json_records(args.path, required=True)
    except CatalogLoadError as e:
        print(f"Could not parse {args.path.name}: {e}", file=sys.stderr)
        return 1

    duplicates = find_duplicate_skus(products)
    if duplicates:
        print("Duplicate SKUs found:", file=sys.stderr)
        for line in format_duplicate_report(duplicates):
            print(line, file=sys.stderr)
        return 1

    print("No duplicate SKUs detected.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
