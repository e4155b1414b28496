import unittest
from unittest.mock import MagicMock, patch
from urllib import error
from urllib.parse import parse_qs, urlparse

from stockledger.services.catalog_client import (
    CatalogAPIError,
    CatalogClient,
    extract_items,
    extract_total,
    validate_base_url,
)


def _page_of(url):
    return int(parse_qs(urlparse(url).query)["page"][0])


def _fake_catalog(total_items, page_size, report_total=True):
    def _get_json(url):
        page = _page_of(url)
        start = (page - 1) * page_size
        count = max(0, min(page_size, total_items - start))
        payload = {"results": [{"id": start + i, "availableQuantity": 1} for i in range(count)]}
        if report_total:
            payload["total"] = total_items
        return payload

    return _get_json


class CatalogClientTest(unittest.TestCase):
    def test_walks_pages_until_short_page(self):
        client = CatalogClient("https://api.example.com/", "token", page_size=100, max_pages=50)
        with patch.object(CatalogClient, "_get_json", side_effect=_fake_catalog(120, 100)) as fetch:
            products, pages = client.fetch_all_products()

        self.assertEqual(len(products), 120)
        self.assertEqual(pages, 2)
        self.assertEqual(fetch.call_count, 2)

    def test_stops_once_reported_total_is_reached(self):
        client = CatalogClient("https://api.example.com", "token", page_size=100, max_pages=50)
        with patch.object(CatalogClient, "_get_json", side_effect=_fake_catalog(200, 100)) as fetch:
            products, pages = client.fetch_all_products()

        self.assertEqual(len(products), 200)
        self.assertEqual(pages, 2)
        self.assertEqual(fetch.call_count, 2)

    def test_page_cap_bounds_the_walk(self):
        client = CatalogClient("https://api.example.com", "token", page_size=2, max_pages=50)
        with patch.object(
            CatalogClient, "_get_json", side_effect=_fake_catalog(10_000, 2, report_total=False)
        ) as fetch:
            products, pages = client.fetch_all_products()

        self.assertEqual(pages, 50)
        self.assertEqual(fetch.call_count, 50)
        self.assertEqual(len(products), 100)

    def test_catalog_url_carries_paging_and_order(self):
        client = CatalogClient("https://api.example.com/v1/", "token", page_size=100)
        url = client.catalog_url(3, 100)
        parsed = urlparse(url)
        query = parse_qs(parsed.query)

        self.assertEqual(parsed.path, "/v1/catalog")
        self.assertEqual(query["limit"], ["100"])
        self.assertEqual(query["offset"], ["200"])
        self.assertEqual(query["page"], ["3"])
        self.assertEqual(query["orderBy"], ["id|desc"])

    def test_zero_total_does_not_stop_the_walk(self):
        client = CatalogClient("https://api.example.com", "token", page_size=2, max_pages=50)

        def _get_json(url):
            page = _page_of(url)
            items = [{"id": page * 10 + i} for i in range(2 if page < 3 else 1)]
            return {"results": items, "total": 0}

        with patch.object(CatalogClient, "_get_json", side_effect=_get_json):
            products, pages = client.fetch_all_products()

        self.assertEqual(pages, 3)
        self.assertEqual(len(products), 5)

    def test_empty_first_page_with_metadata_yields_no_products(self):
        client = CatalogClient("https://api.example.com", "token")
        with patch.object(
            CatalogClient, "_get_json", return_value={"results": [], "data": {"page": 1}, "total": 0}
        ):
            products, pages = client.fetch_all_products()

        self.assertEqual(products, [])
        self.assertEqual(pages, 1)

    def test_invalid_url_is_rejected_before_any_request(self):
        with patch("stockledger.services.catalog_client.request.urlopen") as urlopen:
            with self.assertRaises(ValueError) as ctx:
                CatalogClient("not-a-url", "token")

        self.assertEqual(str(ctx.exception), "Invalid API URL format")
        urlopen.assert_not_called()

    def test_missing_credentials(self):
        with self.assertRaises(ValueError):
            CatalogClient("", "token")
        with self.assertRaises(ValueError):
            CatalogClient("https://api.example.com", "  ")

    def test_http_error_keeps_only_the_status(self):
        client = CatalogClient("https://api.example.com", "token")
        http_error = error.HTTPError(
            "https://api.example.com/catalog", 503, "secret upstream detail", hdrs=None, fp=None
        )
        with patch("stockledger.services.catalog_client.request.urlopen", side_effect=http_error):
            with self.assertRaises(CatalogAPIError) as ctx:
                client.fetch_page(1)

        self.assertEqual(ctx.exception.status_code, 503)
        self.assertNotIn("secret", str(ctx.exception))

    def test_sends_bearer_token(self):
        client = CatalogClient("https://api.example.com", "abc123")
        response = MagicMock()
        response.getcode.return_value = 200
        response.read.return_value = b'{"results": [], "total": 0}'
        urlopen = MagicMock()
        urlopen.return_value.__enter__.return_value = response

        with patch("stockledger.services.catalog_client.request.urlopen", urlopen):
            payload = client.fetch_page(1)

        sent = urlopen.call_args[0][0]
        self.assertEqual(sent.get_header("Authorization"), "Bearer abc123")
        self.assertEqual(payload, {"results": [], "total": 0})

    def test_invalid_json_is_an_api_error(self):
        client = CatalogClient("https://api.example.com", "abc123")
        response = MagicMock()
        response.getcode.return_value = 200
        response.read.return_value = b"<html>"
        urlopen = MagicMock()
        urlopen.return_value.__enter__.return_value = response

        with patch("stockledger.services.catalog_client.request.urlopen", urlopen):
            with self.assertRaises(CatalogAPIError):
                client.fetch_page(1)


class ProductMovementsTest(unittest.TestCase):
    def test_reads_movement_list_for_product(self):
        client = CatalogClient("https://api.example.com", "token")
        movements = [
            {"id": 7, "type": "entry", "quantity": 10, "previousStock": 2, "newStock": 12},
            {"id": 8, "type": "exit", "quantity": 3, "previousStock": 12, "newStock": 9},
        ]
        with patch.object(CatalogClient, "_get_json", return_value={"data": movements}) as fetch:
            result = client.fetch_product_movements("SKU 42")

        self.assertEqual(result, movements)
        fetch.assert_called_once_with("https://api.example.com/catalog/SKU%2042/movements")

    def test_accepts_bare_list(self):
        client = CatalogClient("https://api.example.com", "token")
        with patch.object(CatalogClient, "_get_json", return_value=[{"id": 1, "type": "adjustment"}, "junk"]):
            self.assertEqual(client.fetch_product_movements(5), [{"id": 1, "type": "adjustment"}])

    def test_missing_history_is_empty(self):
        client = CatalogClient("https://api.example.com", "token")
        with patch.object(CatalogClient, "_get_json", side_effect=CatalogAPIError("HTTP 404", status_code=404)):
            self.assertEqual(client.fetch_product_movements(5), [])
        with patch.object(CatalogClient, "_get_json", side_effect=CatalogAPIError("HTTP 500", status_code=500)):
            with self.assertRaises(CatalogAPIError):
                client.fetch_product_movements(5)


class PayloadHelpersTest(unittest.TestCase):
    def test_extract_items_accepts_known_keys(self):
        self.assertEqual(extract_items({"data": [{"id": 1}]}), [{"id": 1}])
        self.assertEqual(extract_items({"products": [{"id": 2}]}), [{"id": 2}])
        self.assertEqual(extract_items({"other": [1]}), [])
        self.assertEqual(extract_items(["not", "a", "dict"]), [])

    def test_empty_results_page_is_not_skipped(self):
        payload = {"results": [], "data": {"page": 3, "pages": 3}}
        self.assertEqual(extract_items(payload), [])
        self.assertEqual(extract_items({"results": None, "data": [{"id": 1}]}), [{"id": 1}])

    def test_extract_total(self):
        self.assertEqual(extract_total({"total": "42"}), 42)
        self.assertIsNone(extract_total({"total": True}))
        self.assertIsNone(extract_total({"total": "many"}))
        self.assertIsNone(extract_total({}))
        self.assertIsNone(extract_total({"total": 0}))

    def test_validate_base_url_strips_trailing_slash(self):
        self.assertEqual(validate_base_url(" https://api.example.com/ "), "https://api.example.com")
        with self.assertRaises(ValueError):
            validate_base_url("ftp://api.example.com")


if __name__ == "__main__":
    unittest.main()
