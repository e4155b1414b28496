import json
import logging
from typing import Optional
from urllib import error, request
from urllib.parse import quote, urlencode, urlparse

from stockledger.config import get_settings
from stockledger.core.constants import (
    CATALOG_ENDPOINT,
    CATALOG_ITEM_KEYS,
    CATALOG_MOVEMENTS_PATH,
    MOVEMENT_ITEM_KEYS,
)

logger = logging.getLogger(__name__)

_ALLOWED_HTTP_SCHEMES = {"http", "https"}


class CatalogAPIError(RuntimeError):
    """The catalog API could not be reached or answered with an error."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def validate_base_url(base_url):
    if base_url is None:
        raise ValueError("API URL and Token are required")
    base_url = str(base_url).strip()
    if not base_url:
        raise ValueError("API URL and Token are required")
    parsed = urlparse(base_url)
    if parsed.scheme.lower() not in _ALLOWED_HTTP_SCHEMES or not parsed.netloc:
        raise ValueError("Invalid API URL format")
    return base_url.rstrip("/")


def _authorization_header(token):
    if token.lower().startswith("bearer "):
        return token
    return "Bearer {}".format(token)


def extract_items(payload, keys=CATALOG_ITEM_KEYS):
    """Items from the first of ``keys`` holding a list, even an empty one."""
    if not isinstance(payload, dict):
        return []
    for key in keys:
        items = payload.get(key)
        if isinstance(items, list):
            return items
    return []


def extract_total(payload) -> Optional[int]:
    # 0 or a missing total means the API did not report one.
    if not isinstance(payload, dict):
        return None
    total = payload.get("total")
    if total is None or isinstance(total, bool):
        return None
    try:
        total = int(total)
    except (TypeError, ValueError):
        return None
    return total if total > 0 else None


class CatalogClient:
    """Read-only client for the third-party catalog API.

    One instance is bound to a base URL and bearer token. Page fetches are
    sequential; there is no retry, the caller decides what a failure means.
    """

    def __init__(
        self,
        base_url,
        token,
        *,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
        timeout: Optional[int] = None,
    ):
        settings = get_settings()
        self.base_url = validate_base_url(base_url)
        token = str(token or "").strip()
        if not token:
            raise ValueError("API URL and Token are required")
        self._token = token
        self.page_size = max(1, int(page_size or settings.CATALOG_PAGE_SIZE))
        self.max_pages = max(1, int(max_pages or settings.CATALOG_MAX_PAGES))
        self.timeout = timeout or settings.CATALOG_TIMEOUT_SECONDS

    def catalog_url(self, page: int, limit: int, search: str = "") -> str:
        query = urlencode(
            {
                "limit": limit,
                "offset": (page - 1) * limit,
                "page": page,
                "search": search,
                "categoryId": 0,
                "suplierId": "",
                "brand": "",
                "orderBy": "id|desc",
            }
        )
        return "{}/{}?{}".format(self.base_url, CATALOG_ENDPOINT, query)

    def _get_json(self, url):
        req = request.Request(
            url,
            method="GET",
            headers={
                "Content-Type": "application/json",
                "Authorization": _authorization_header(self._token),
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout) as response:  # nosec B310
                status_code = response.getcode()
                if status_code < 200 or status_code >= 300:
                    raise CatalogAPIError(
                        "Catalog API error: HTTP {}".format(status_code),
                        status_code=status_code,
                    )
                body = response.read()
        except error.HTTPError as exc:
            # The body may echo credentials or internals; keep only the status.
            raise CatalogAPIError(
                "Catalog API error: HTTP {}".format(exc.code),
                status_code=exc.code,
            ) from exc
        except error.URLError as exc:
            raise CatalogAPIError("Catalog API error: {}".format(exc.reason)) from exc
        except OSError as exc:
            raise CatalogAPIError("Catalog API error: {}".format(exc)) from exc

        try:
            return json.loads(body.decode("utf-8")) if body else {}
        except (UnicodeDecodeError, ValueError) as exc:
            raise CatalogAPIError("Catalog API returned invalid JSON") from exc

    def fetch_page(self, page: int, limit: Optional[int] = None, search: str = ""):
        return self._get_json(self.catalog_url(page, limit or self.page_size, search))

    def fetch_all_products(self):
        """Walk the catalog page by page.

        Stops on a short page, once the API-reported ``total`` is reached, or
        after ``max_pages`` pages. Returns ``(items, pages_fetched)``.
        """
        products = []
        page = 1
        pages_fetched = 0
        while page <= self.max_pages:
            payload = self.fetch_page(page)
            pages_fetched += 1
            items = extract_items(payload)
            products.extend(items)

            total = extract_total(payload)
            if len(items) < self.page_size:
                break
            if total is not None and len(products) >= total:
                break
            page += 1

        logger.info("Fetched %d catalog products in %d page(s)", len(products), pages_fetched)
        return products, pages_fetched

    def list_products(self, page: int = 1, limit: Optional[int] = None, search: str = ""):
        limit = limit or self.page_size
        payload = self.fetch_page(page, limit, search)
        return {
            "page": page,
            "limit": limit,
            "total": extract_total(payload),
            "items": extract_items(payload),
        }

    def _product_url(self, product_id, *parts) -> str:
        product_id = str(product_id).strip()
        if not product_id:
            raise ValueError("product_id is required")
        segments = [self.base_url, CATALOG_ENDPOINT, quote(product_id, safe=""), *parts]
        return "/".join(segments)

    def fetch_product(self, product_id):
        payload = self._get_json(self._product_url(product_id))
        if isinstance(payload, dict):
            for key in ("result", "data", "product"):
                value = payload.get(key)
                if isinstance(value, dict):
                    return value
        return payload

    def fetch_product_movements(self, product_id):
        """Stock movement history for one product, in the order the API sends it.

        A 404 means the API keeps no history for the product and yields ``[]``.
        """
        url = self._product_url(product_id, CATALOG_MOVEMENTS_PATH)
        try:
            payload = self._get_json(url)
        except CatalogAPIError as exc:
            if exc.status_code == 404:
                return []
            raise
        if isinstance(payload, list):
            return [item for item in payload if isinstance(item, dict)]
        return [item for item in extract_items(payload, MOVEMENT_ITEM_KEYS) if isinstance(item, dict)]
