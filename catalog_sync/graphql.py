"""
Shopify GraphQL client.

Both pipelines talk to Shopify through the same small capability:

    query(document, variables)  -> data
    mutate(document, variables) -> data

``ShopifyGraphQLClient`` implements it over an aiohttp session for one
endpoint (Storefront or Admin API). Values always travel in ``variables`` and
are JSON-encoded by the transport, never spliced into the document text, so
quotes or backslashes in product content cannot corrupt the request.

Tests swap in a fake object with the same two coroutines.
"""
import json
import logging
from typing import Any, Dict, Optional, Protocol

import aiohttp

from .errors import QueryError
from .utils.http import NO_RETRY, RetryPolicy, request_with_retries

logger = logging.getLogger(__name__)

STOREFRONT_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"
ADMIN_TOKEN_HEADER = "X-Shopify-Access-Token"


class GraphQLClient(Protocol):
    async def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    async def mutate(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...


class ShopifyGraphQLClient:
    """GraphQL client bound to one Shopify endpoint and access token.

    Attributes:
        endpoint: Full ``graphql.json`` URL.
        token_header: Name of the header carrying the access token.
        retry: Retry policy applied at the HTTP boundary.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        endpoint: str,
        token_header: str,
        token: str,
        retry: RetryPolicy = NO_RETRY,
    ):
        self.endpoint = endpoint
        self.token_header = token_header
        self.retry = retry
        self._session = session
        self._token = token

    async def execute(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST a GraphQL document and return the ``data`` portion of the response.

        Raises:
            QueryError: If the response carries a GraphQL ``errors`` list or no ``data``.
            RemoteStatusError: If the HTTP status is a failure.
            TransportError: If no response was received.
        """
        payload = {"query": document, "variables": variables or {}}
        headers = {
            "Content-Type": "application/json",
            self.token_header: self._token,
        }

        result = await request_with_retries(
            self._session, "POST", self.endpoint, retry=self.retry, json=payload, headers=headers
        )

        if not isinstance(result, dict):
            raise QueryError(
                "GraphQL response is not an object", body=json.dumps(result), url=self.endpoint
            )
        if result.get("errors"):
            errors = result["errors"]
            logger.error("❌ GraphQL errors: %s", json.dumps(errors, indent=2, ensure_ascii=False))
            messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
            raise QueryError(
                f"GraphQL errors: {'; '.join(messages)}",
                errors=errors,
                body=json.dumps(result, ensure_ascii=False),
                url=self.endpoint,
            )
        data = result.get("data")
        if not isinstance(data, dict):
            raise QueryError(
                "GraphQL response has no data", body=json.dumps(result, ensure_ascii=False), url=self.endpoint
            )
        return data

    async def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.execute(document, variables)

    async def mutate(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.execute(document, variables)


def storefront_client(session: aiohttp.ClientSession, settings) -> ShopifyGraphQLClient:
    return ShopifyGraphQLClient(
        session,
        settings.storefront_endpoint,
        STOREFRONT_TOKEN_HEADER,
        settings.SHOPIFY_STOREFRONT_ACCESS_TOKEN,
        retry=RetryPolicy.from_settings(settings),
    )


def admin_client(session: aiohttp.ClientSession, settings) -> ShopifyGraphQLClient:
    return ShopifyGraphQLClient(
        session,
        settings.admin_endpoint,
        ADMIN_TOKEN_HEADER,
        settings.SHOPIFY_ADMIN_API_TOKEN,
        retry=RetryPolicy.from_settings(settings),
    )
