"""Tests for the Shopify GraphQL client."""
import json

import pytest

from catalog_sync.errors import QueryError, RemoteStatusError
from catalog_sync.graphql import (
    ADMIN_TOKEN_HEADER,
    STOREFRONT_TOKEN_HEADER,
    ShopifyGraphQLClient,
    admin_client,
    storefront_client,
)
from catalog_sync.load.admin_mutations import PRODUCT_UPDATE_MUTATION

from conftest import FakeResponse, FakeSession


@pytest.mark.asyncio
async def test_storefront_client_posts_query_and_variables(test_settings):
    session = FakeSession(FakeResponse(200, '{"data": {"products": {}}}'))
    client = storefront_client(session, test_settings)

    data = await client.query("query Q { products { x } }", {"first": 20, "after": None})

    assert data == {"products": {}}
    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == "https://shop.example.com/api/2023-10/graphql.json"
    assert request["headers"][STOREFRONT_TOKEN_HEADER] == "storefront-token"
    assert request["json"] == {"query": "query Q { products { x } }", "variables": {"first": 20, "after": None}}


@pytest.mark.asyncio
async def test_admin_client_endpoint_and_header(test_settings):
    session = FakeSession(FakeResponse(200, '{"data": {}}'))
    client = admin_client(session, test_settings)

    await client.mutate("mutation { x }")

    request = session.requests[0]
    assert request["url"] == "https://shop.example.com/admin/api/2023-07/graphql.json"
    assert request["headers"][ADMIN_TOKEN_HEADER] == "admin-token"
    assert request["json"]["variables"] == {}


@pytest.mark.asyncio
async def test_quotes_travel_in_variables_not_document():
    session = FakeSession(FakeResponse(200, '{"data": {"productUpdate": {"userErrors": []}}}'))
    client = ShopifyGraphQLClient(session, "https://shop/admin/graphql.json", ADMIN_TOKEN_HEADER, "t")
    html = '<p class="lead">12" single \\ "quoted"</p>'

    await client.mutate(PRODUCT_UPDATE_MUTATION, {"input": {"id": "gid://shopify/Product/1", "descriptionHtml": html}})

    payload = session.requests[0]["json"]
    assert payload["query"] == PRODUCT_UPDATE_MUTATION
    assert html not in payload["query"]
    # Encoded and decoded by the transport without loss
    assert json.loads(json.dumps(payload))["variables"]["input"]["descriptionHtml"] == html


@pytest.mark.asyncio
async def test_graphql_errors_raise_query_error(caplog):
    body = {"errors": [{"message": "Field 'prodcts' doesn't exist"}]}
    session = FakeSession(FakeResponse(200, json.dumps(body)))
    client = ShopifyGraphQLClient(session, "https://shop/api/graphql.json", STOREFRONT_TOKEN_HEADER, "t")

    with pytest.raises(QueryError) as excinfo:
        await client.query("{ prodcts }")

    assert excinfo.value.errors == body["errors"]
    assert "prodcts" in str(excinfo.value)
    assert isinstance(excinfo.value, RemoteStatusError)
    assert "GraphQL errors" in caplog.text


@pytest.mark.asyncio
async def test_missing_data_raises_query_error():
    session = FakeSession(FakeResponse(200, '{"data": null}'))
    client = ShopifyGraphQLClient(session, "https://shop/api/graphql.json", STOREFRONT_TOKEN_HEADER, "t")
    with pytest.raises(QueryError):
        await client.query("{ shop { name } }")


@pytest.mark.asyncio
async def test_http_failure_propagates_as_remote_status_error():
    session = FakeSession(FakeResponse(402, "Payment Required"))
    client = ShopifyGraphQLClient(session, "https://shop/api/graphql.json", STOREFRONT_TOKEN_HEADER, "t")
    with pytest.raises(RemoteStatusError) as excinfo:
        await client.query("{ shop { name } }")
    assert excinfo.value.status == 402
    assert not isinstance(excinfo.value, QueryError)
