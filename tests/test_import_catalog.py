"""Tests for the CSV catalog import script."""
import json

import httpx
import pytest

from import_catalog import csv_row_to_item, import_items, normalize_price, read_csv_items


class TestNormalizePrice:
    """Tests for normalize_price."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("3.5", "3.50"), (" 1 ", "1.00"), ("2.255", "2.26"), ("0", "0.00")],
    )
    def test_valid(self, raw, expected):
        assert normalize_price(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "-1.00"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            normalize_price(raw)


class TestCsvRowToItem:
    """Tests for csv_row_to_item."""

    def test_minimal_row(self):
        """Optional columns fall back to None / in stock."""
        item = csv_row_to_item({"category": "Drinks", "name": "Coffee", "price": "3.5"})

        assert item == {
            "category": "Drinks",
            "name": "Coffee",
            "price": "3.50",
            "sku": None,
            "description": None,
            "in_stock": True,
        }

    @pytest.mark.parametrize("flag,expected", [("yes", True), ("0", False), ("no", False)])
    def test_in_stock_flag(self, flag, expected):
        row = {"category": "Snacks", "name": "Cake", "price": "4", "in_stock": flag}
        assert csv_row_to_item(row)["in_stock"] is expected

    def test_missing_name(self):
        with pytest.raises(ValueError):
            csv_row_to_item({"category": "Drinks", "name": " ", "price": "1"})


def test_read_csv_items_skips_bad_rows(tmp_path):
    """Malformed rows are reported and skipped; the limit caps rows read."""
    path = tmp_path / "menu.csv"
    path.write_text(
        "category,name,price\n"
        "Drinks,Coffee,3.50\n"
        "Drinks,Broken,n/a\n"
        "Snacks,Cookie,2.25\n"
        "Snacks,Cake,4.00\n",
        encoding="utf-8",
    )

    assert [i["name"] for i in read_csv_items(path)] == ["Coffee", "Cookie", "Cake"]
    assert [i["name"] for i in read_csv_items(path, limit=2)] == ["Coffee"]


def test_import_items_creates_missing_categories():
    """Existing categories are reused; new ones are created once."""
    posted = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=[{"id": "cat-drinks", "name": "Drinks"}])
        body = json.loads(request.content)
        posted.append((request.url.path, body))
        if request.url.path == "/api/categories":
            return httpx.Response(201, json={"id": f"cat-{body['name'].lower()}", **body})
        return httpx.Response(201, json={"id": "item", **body})

    items = [
        csv_row_to_item({"category": "Drinks", "name": "Coffee", "price": "3.50"}),
        csv_row_to_item({"category": "Snacks", "name": "Cookie", "price": "2.25"}),
        csv_row_to_item({"category": "Snacks", "name": "Cake", "price": "4.00"}),
    ]

    with httpx.Client(transport=httpx.MockTransport(handler), base_url="http://test") as client:
        result = import_items(client, items)

    assert result == {"categories": 1, "items": 3}
    category_posts = [body for path, body in posted if path == "/api/categories"]
    assert category_posts == [{"name": "Snacks"}]
    item_posts = [body for path, body in posted if path == "/api/items"]
    assert [(b["name"], b["category_id"]) for b in item_posts] == [
        ("Coffee", "cat-drinks"),
        ("Cookie", "cat-snacks"),
        ("Cake", "cat-snacks"),
    ]
    assert all("category" not in b for b in item_posts)


def test_import_items_raises_on_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=[])
        return httpx.Response(503, json={"detail": "down", "error": "StoreFailure"})

    items = [csv_row_to_item({"category": "Drinks", "name": "Coffee", "price": "3.50"})]
    with httpx.Client(transport=httpx.MockTransport(handler), base_url="http://test") as client:
        with pytest.raises(httpx.HTTPStatusError):
            import_items(client, items)
