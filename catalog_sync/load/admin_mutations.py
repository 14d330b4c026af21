"""Admin API lookups and mutations used by the metafield import."""
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..errors import QueryError
from ..graphql import GraphQLClient
from ..models import MetafieldAssignment, UserError

logger = logging.getLogger(__name__)


PRODUCT_BY_HANDLE_QUERY = """
query ProductByHandle($handle: String!) {
  productByHandle(handle: $handle) {
    id
  }
}
"""

PRODUCT_UPDATE_MUTATION = """
mutation ProductUpdate($input: ProductInput!) {
  productUpdate(input: $input) {
    product {
      id
      title
    }
    userErrors {
      field
      message
    }
  }
}
"""

METAFIELDS_SET_MUTATION = """
mutation MetafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      id
      key
    }
    userErrors {
      field
      message
    }
  }
}
"""


def _user_errors(payload: Optional[Dict[str, Any]]) -> List[UserError]:
    return [UserError.model_validate(e) for e in (payload or {}).get("userErrors") or []]


def _query_errors(exc: QueryError) -> List[UserError]:
    """Turn a GraphQL ``errors`` list into UserErrors so the row can carry on."""
    errors = []
    for entry in exc.errors or [{"message": str(exc)}]:
        if not isinstance(entry, dict):
            entry = {"message": str(entry)}
        path = entry.get("path")
        errors.append(UserError(
            field=[str(p) for p in path] if path else None,
            message=str(entry.get("message") or exc),
        ))
    return errors


async def resolve_product_id(client: GraphQLClient, handle: str) -> Optional[str]:
    """Return the product GID for ``handle``, or None when the shop has no such product."""
    data = await client.query(PRODUCT_BY_HANDLE_QUERY, {"handle": handle})
    product = data.get("productByHandle")
    if not product:
        return None
    return product.get("id")


async def update_description(client: GraphQLClient, product_id: str, html: str) -> List[UserError]:
    """
    Replace the product's description HTML.

    Returns:
        The userErrors reported by the shop (empty on success), including any
        GraphQL ``errors`` returned in place of data
    """
    try:
        data = await client.mutate(
            PRODUCT_UPDATE_MUTATION, {"input": {"id": product_id, "descriptionHtml": html}}
        )
        errors = _user_errors(data.get("productUpdate"))
    except QueryError as exc:
        errors = _query_errors(exc)
    if errors:
        logger.error("❌ Description update errors for %s: %s", product_id, "; ".join(map(str, errors)))
    else:
        logger.info("✅ Updated description for %s", product_id)
    return errors


async def set_metafields(
    client: GraphQLClient,
    product_id: str,
    assignments: Sequence[MetafieldAssignment],
    namespace: str = "custom",
) -> List[UserError]:
    """
    Set all of a row's metafields in one metafieldsSet call.

    The shop may reject individual values; those come back as userErrors and
    are returned rather than raised. A GraphQL ``errors`` list (e.g. a value that
    fails input coercion) is reported the same way. HTTP and transport failures
    still propagate.
    """
    metafields = [a.to_input(product_id, namespace) for a in assignments]
    try:
        data = await client.mutate(METAFIELDS_SET_MUTATION, {"metafields": metafields})
        errors = _user_errors(data.get("metafieldsSet"))
    except QueryError as exc:
        errors = _query_errors(exc)
    if errors:
        logger.error("❌ Metafield errors for %s: %s", product_id, "; ".join(map(str, errors)))
    else:
        logger.info("✅ Updated metafields for %s", product_id)
    return errors
