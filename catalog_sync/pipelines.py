"""
The two sync pipelines.

Catalog export:
    storefront products (paged) -> flattened rows -> sheet service, cumulative batch per page

Metafield import:
    CSV rows -> product id by handle -> description update + metafieldsSet per row

Both run strictly in series and make a single pass; nothing is retried unless
a retry policy is configured at the HTTP boundary.
"""
import asyncio
import json
import logging
import time
from contextlib import aclosing
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

import aiohttp
from pydantic import ValidationError

from .db import close_document_store, init_document_store
from .errors import CatalogSyncError, RemoteStatusError, RequestSetupError, TransportError
from .export.sheets_export import SheetsSink
from .extract.csv_rows import read_import_rows
from .extract.storefront import fetch_product_pages
from .graphql import GraphQLClient, admin_client, storefront_client
from .load.admin_mutations import resolve_product_id, set_metafields, update_description
from .models import ExportRecord, ImportRow, ImportSummary, RowResult, RowState
from .transform import build_description_html, build_metafields, to_export_record
from .utils.config import EXPORT_REQUIRED, IMPORT_REQUIRED

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    async def push(self, records: Sequence[ExportRecord]) -> object:
        ...


# --- Catalog export ---

def _log_export_failure(exc: Exception) -> None:
    logger.error(f"❌ Error fetching products: {exc}")
    if isinstance(exc, RemoteStatusError):
        # The server responded, but with a failure
        logger.error("Error Response Status: %s", exc.status)
        logger.error("Error Response Headers: %s", json.dumps(exc.headers, ensure_ascii=False))
        logger.error("Error Response Data: %s", exc.body)
    elif isinstance(exc, RequestSetupError):
        logger.error("Error Message: request could not be constructed (%s %s)", exc.method, exc.url)
    elif isinstance(exc, TransportError):
        logger.error("Error Request: no response received for %s %s", exc.method, exc.url)
    else:
        logger.error("Error Message: unexpected response shape", exc_info=exc)


async def fetch_all_products(
    settings,
    client: GraphQLClient,
    sink: RecordSink,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """
    Export the whole catalog to the sheet service.

    After every page the *entire* list exported so far is posted, because the
    sheet service overwrites the sheet on each call. Any failure aborts the run
    (logged, not raised); there is no resumption from the last cursor.
    """
    exported: List[ExportRecord] = []
    logger.info("🚀 Starting to fetch products...")
    start_time = time.time()

    try:
        pages = fetch_product_pages(client, settings.PRODUCTS_PER_PAGE, settings.VARIANTS_PER_PRODUCT)
        async with aclosing(pages):
            async for page in pages:
                exported.extend(to_export_record(product) for product in page.products)

                await sink.push(list(exported))
                await sleep(settings.PAGE_DELAY_SECONDS)

                if page.page_info.has_next_page:
                    logger.info(
                        f"Fetched {len(page.products)} products. "
                        f"Total fetched: {len(exported)}. Fetching next batch..."
                    )
                else:
                    logger.info(
                        f"🎉 Finished fetching all products. Total products retrieved: {len(exported)} "
                        f"({time.time() - start_time:.1f}s)"
                    )
    except (CatalogSyncError, ValidationError) as exc:
        _log_export_failure(exc)


async def run_catalog_export(settings) -> None:
    """Validate configuration, open one HTTP session and run the export."""
    settings.require(*EXPORT_REQUIRED)
    timeout = aiohttp.ClientTimeout(total=settings.HTTP_TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        client = storefront_client(session, settings)
        sink = SheetsSink.from_settings(session, settings)
        await fetch_all_products(settings, client, sink)


# --- Metafield import ---

async def process_row(client: GraphQLClient, row: ImportRow, namespace: str = "custom") -> RowResult:
    """
    Apply one CSV row to its product.

    PENDING -> RESOLVED -> DESCRIPTION_SKIPPED | DESCRIPTION_DONE -> DONE
    PENDING -> UNRESOLVED -> SKIPPED

    userErrors and GraphQL ``errors`` on a mutation are recorded on the result;
    transport and HTTP status failures propagate to the caller.
    """
    result = RowResult(handle=row.handle)

    product_id = await resolve_product_id(client, row.handle) if row.handle.strip() else None
    if not product_id:
        result.state = RowState.UNRESOLVED
        logger.error("❌ Product not found: %s", row.handle)
        result.state = RowState.SKIPPED
        return result

    result.product_id = product_id
    result.state = RowState.RESOLVED

    description_html = build_description_html(row)
    if description_html is None:
        result.description_state = RowState.DESCRIPTION_SKIPPED
        logger.debug("No description content for %s", row.handle)
    else:
        result.description_errors = await update_description(client, product_id, description_html)
        result.description_state = RowState.DESCRIPTION_DONE

    assignments = build_metafields(row)
    if assignments:
        result.metafield_errors = await set_metafields(client, product_id, assignments, namespace)
        result.metafields_sent = len(assignments)
    else:
        logger.info("No metafields to set for %s", row.handle)

    result.state = RowState.DONE
    return result


async def import_metafields(
    settings,
    client: GraphQLClient,
    rows: Optional[Sequence[ImportRow]] = None,
) -> ImportSummary:
    """
    Apply every CSV row to the shop, one row at a time.

    The CSV is read in full before anything remote happens. The document store
    (when configured) is opened before the first row and closed after the
    last, including when a transport or status error ends the run early.
    """
    if rows is None:
        rows = read_import_rows(settings.METAFIELDS_CSV_PATH)

    if settings.MONGO_URI:
        await init_document_store(settings.MONGO_URI, settings.MONGO_DB_NAME)
        logger.info("✅ Connected to document store (db=%s)", settings.MONGO_DB_NAME)
    else:
        logger.warning("⚠️ MONGO_URI not set, continuing without the document store")

    summary = ImportSummary()
    start_time = time.time()
    try:
        for idx, row in enumerate(rows, 1):
            logger.debug("Row %s/%s: %s", idx, len(rows), row.handle)
            summary.add(await process_row(client, row, settings.METAFIELD_NAMESPACE))

        logger.info("🎉 All rows processed")
        logger.info(
            f"📊 Rows: {summary.total} | Done: {summary.done} | Skipped: {summary.skipped} | "
            f"Description errors: {summary.description_errors} | "
            f"Metafield errors: {summary.metafield_errors} | {time.time() - start_time:.1f}s"
        )
    finally:
        await close_document_store()

    return summary


async def run_metafield_import(settings) -> ImportSummary:
    """Validate configuration, open one HTTP session and run the import."""
    settings.require(*IMPORT_REQUIRED)
    timeout = aiohttp.ClientTimeout(total=settings.HTTP_TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        client = admin_client(session, settings)
        return await import_metafields(settings, client)
