import logging
from typing import AsyncIterator, Optional

from ..errors import QueryError
from ..graphql import GraphQLClient
from ..models import ProductPage

logger = logging.getLogger(__name__)


PRODUCTS_QUERY = """
query GetProducts($first: Int!, $after: String, $variantsFirst: Int!) {
  products(first: $first, after: $after) {
    edges {
      cursor
      node {
        id
        title
        handle
        vendor
        description
        featuredImage {
          originalSrc
        }
        variants(first: $variantsFirst) {
          edges {
            node {
              id
              title
              sku
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""


async def fetch_product_page(
    client: GraphQLClient, first: int, after: Optional[str], variants_first: int = 10
) -> ProductPage:
    data = await client.query(
        PRODUCTS_QUERY, {"first": first, "after": after, "variantsFirst": variants_first}
    )
    connection = data.get("products")
    if not isinstance(connection, dict) or "pageInfo" not in connection:
        raise QueryError("Response has no products connection", body=str(data))
    try:
        return ProductPage.from_connection(connection)
    except (KeyError, TypeError, AttributeError) as exc:
        raise QueryError(f"Malformed products connection: {exc!r}", body=str(data)) from exc


async def fetch_product_pages(
    client: GraphQLClient, page_size: int = 20, variants_per_product: int = 10
) -> AsyncIterator[ProductPage]:
    """
    Yield the catalog one page at a time, following the opaque end cursor.

    Stops right after the page that reports ``hasNextPage = false``.
    """
    cursor: Optional[str] = None
    has_next_page = True
    while has_next_page:
        page = await fetch_product_page(client, page_size, cursor, variants_per_product)
        yield page
        has_next_page = page.page_info.has_next_page
        cursor = page.page_info.end_cursor
