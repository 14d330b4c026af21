"""Shared fakes: an aiohttp-like session and GraphQL clients for both APIs."""
from typing import Any, Dict, List, Optional

import pytest

from catalog_sync.load.admin_mutations import (
    METAFIELDS_SET_MUTATION,
    PRODUCT_BY_HANDLE_QUERY,
    PRODUCT_UPDATE_MUTATION,
)
from catalog_sync.utils.config import Settings


class FakeResponse:
    def __init__(self, status: int = 200, body: str = "", headers: Optional[Dict[str, str]] = None):
        self.status = status
        self.headers = headers or {"Content-Type": "application/json"}
        self._body = body

    async def text(self, errors: str = "strict") -> str:
        return self._body


class _RequestContext:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Plays back queued responses (or exceptions) and records every request."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: List[Dict[str, Any]] = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        return _RequestContext(self.outcomes.pop(0))


def product_node(pid, title="Album", vendor="Artist", skus=("CAT-1",), image="https://cdn.example.com/a.jpg",
                 description="Great record"):
    return {
        "id": pid,
        "title": title,
        "handle": title.lower().replace(" ", "-"),
        "vendor": vendor,
        "description": description,
        "featuredImage": {"originalSrc": image} if image else None,
        "variants": {
            "edges": [
                {"node": {"id": f"{pid}/v{i}", "title": "Default Title", "sku": sku}}
                for i, sku in enumerate(skus)
            ]
        },
    }


def products_connection(nodes, has_next_page, end_cursor):
    return {
        "edges": [{"cursor": f"c-{n['id']}", "node": n} for n in nodes],
        "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
    }


class FakeStorefrontClient:
    """Serves queued products connections, or raises a queued exception."""

    def __init__(self, *pages):
        self.pages = list(pages)
        self.calls: List[Dict[str, Any]] = []

    async def query(self, document, variables=None):
        self.calls.append(variables)
        page = self.pages.pop(0)
        if isinstance(page, BaseException):
            raise page
        return {"products": page}

    async def mutate(self, document, variables=None):
        raise AssertionError("catalog export never mutates")


class FakeAdminClient:
    """Admin API fake: products by handle, optional userErrors per mutation."""

    def __init__(self, products=None, description_errors=None, metafield_errors=None, fail_on=None):
        self.products = dict(products or {})
        self.description_errors = description_errors or []
        self.metafield_errors = metafield_errors or []
        self.fail_on = fail_on or {}
        self.calls: List[tuple] = []

    def _maybe_fail(self, name):
        if name in self.fail_on:
            raise self.fail_on[name]

    async def query(self, document, variables=None):
        assert document == PRODUCT_BY_HANDLE_QUERY
        self.calls.append(("productByHandle", variables))
        self._maybe_fail("productByHandle")
        pid = self.products.get(variables["handle"])
        return {"productByHandle": {"id": pid} if pid else None}

    async def mutate(self, document, variables=None):
        if document == PRODUCT_UPDATE_MUTATION:
            self.calls.append(("productUpdate", variables))
            self._maybe_fail("productUpdate")
            return {"productUpdate": {"product": {"id": variables["input"]["id"], "title": "x"},
                                      "userErrors": self.description_errors}}
        if document == METAFIELDS_SET_MUTATION:
            self.calls.append(("metafieldsSet", variables))
            self._maybe_fail("metafieldsSet")
            return {"metafieldsSet": {"metafields": [], "userErrors": self.metafield_errors}}
        raise AssertionError("unexpected mutation")

    @property
    def mutations(self):
        return [c for c in self.calls if c[0] != "productByHandle"]


class RecordingSink:
    def __init__(self, fail_with: Optional[BaseException] = None):
        self.pushes: List[list] = []
        self.fail_with = fail_with

    async def push(self, records):
        self.pushes.append(records)
        if self.fail_with is not None:
            raise self.fail_with
        return "OK"


async def no_sleep(seconds):
    return None


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        SHOPIFY_SHOP="shop.example.com",
        SHOPIFY_STOREFRONT_ACCESS_TOKEN="storefront-token",
        SHOPIFY_ADMIN_API_TOKEN="admin-token",
        SHEETS_SPREADSHEET_ID="sheet-123",
        MONGO_URI=None,
        PAGE_DELAY_SECONDS=1.0,
    )
