#!/usr/bin/env python
"""
CSV Catalog Import Script

Creates categories and items in the TabPOS API from a CSV file with the
columns ``category,name,price`` and optionally ``sku,description,in_stock``.

Usage:
    python import_catalog.py data/menu.csv
    python import_catalog.py data/menu.csv --url http://localhost:8000
    python import_catalog.py data/menu.csv --limit 50
"""
import argparse
import csv
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List

import httpx

TRUE_VALUES = {"1", "true", "yes", "y"}


def normalize_price(price_str: str) -> str:
    """
    Normalize price to 2 decimal places.

    Raises:
        ValueError: if the price is not a number or is negative
    """
    try:
        price = Decimal(price_str.strip())
    except InvalidOperation:
        raise ValueError(f"Invalid price: {price_str!r}")
    if price < 0:
        raise ValueError(f"Negative price: {price_str!r}")
    return str(price.quantize(Decimal("0.01")))


def csv_row_to_item(row: Dict[str, str]) -> Dict[str, Any]:
    """
    Convert CSV row to an item payload (without category_id).

    Args:
        row: Dictionary with CSV column headers as keys

    Returns:
        Item dictionary with a ``category`` name to resolve later
    """
    category = (row.get("category") or "").strip()
    name = (row.get("name") or "").strip()
    if not category:
        raise ValueError("Missing category")
    if not name:
        raise ValueError("Missing name")

    in_stock_raw = (row.get("in_stock") or "").strip().lower()

    return {
        "category": category[:128],
        "name": name[:256],
        "price": normalize_price(row.get("price") or ""),
        "sku": (row.get("sku") or "").strip()[:64] or None,
        "description": (row.get("description") or "").strip() or None,
        "in_stock": in_stock_raw in TRUE_VALUES if in_stock_raw else True,
    }


def read_csv_items(file_path: Path, limit: int = None) -> List[Dict[str, Any]]:
    """Read item rows from CSV, skipping malformed ones."""
    items = []
    with open(file_path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader):
            if limit and i >= limit:
                break
            try:
                items.append(csv_row_to_item(row))
            except ValueError as e:
                print(f"Skipping row {i + 2}: {e}", file=sys.stderr)
    return items


def import_items(client: httpx.Client, items: List[Dict[str, Any]]) -> Dict[str, int]:
    """
    Create missing categories, then every item.

    Existing categories are matched by name.

    Raises:
        httpx.HTTPError: If an API request fails
    """
    response = client.get("/api/categories")
    response.raise_for_status()
    category_ids = {c["name"]: c["id"] for c in response.json()}

    created_categories = 0
    created_items = 0
    for item in items:
        category_name = item["category"]
        if category_name not in category_ids:
            response = client.post("/api/categories", json={"name": category_name})
            response.raise_for_status()
            category_ids[category_name] = response.json()["id"]
            created_categories += 1

        payload = {k: v for k, v in item.items() if k != "category"}
        payload["category_id"] = category_ids[category_name]
        response = client.post("/api/items", json=payload)
        response.raise_for_status()
        created_items += 1

    return {"categories": created_categories, "items": created_items}


def main():
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(
        description="Import catalog items from CSV into the TabPOS API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/menu.csv
  %(prog)s data/menu.csv --limit 50 --url http://localhost:8000
        """
    )
    parser.add_argument("csv_file", type=Path, help="Path to CSV file with catalog data")
    parser.add_argument(
        "--url",
        type=str,
        default="http://localhost:8000",
        help="Base API URL (default: http://localhost:8000)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of rows to import (default: all)"
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)"
    )
    args = parser.parse_args()

    if not args.csv_file.is_file():
        print(f"Error: File not found: {args.csv_file}", file=sys.stderr)
        sys.exit(1)

    items = read_csv_items(args.csv_file, args.limit)
    if not items:
        print("No valid items found in CSV", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {len(items)} item(s) from {args.csv_file}")

    try:
        with httpx.Client(base_url=args.url, timeout=args.timeout) as client:
            result = import_items(client, items)
    except httpx.HTTPError as e:
        print(f"Import failed: {e}", file=sys.stderr)
        if isinstance(e, httpx.HTTPStatusError):
            print(f"API Response: {e.response.text}", file=sys.stderr)
        sys.exit(1)

    print(f"Import complete: {result['categories']} categories, {result['items']} items created")


if __name__ == "__main__":
    main()
