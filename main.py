#!/usr/bin/env python3
"""
Catalog sync between the Shopify storefront, the sheet service and the document store.

1. export: pages the storefront catalog and pushes the flattened rows to the sheet service
2. import-metafields: applies the metafield template CSV to products by handle
3. check: reports which settings are present and pings the document store

Usage:
    python main.py export                      # Full catalog export
    python main.py export --page-size 50       # Override page size
    python main.py import-metafields [CSV]     # Apply the metafield CSV
    python main.py check                       # Check the environment
"""
import sys
import asyncio
import argparse
import logging
import os

from catalog_sync.db import close_document_store, init_document_store
from catalog_sync.errors import ConfigError
from catalog_sync.logger import setup_logging
from catalog_sync.pipelines import run_catalog_export, run_metafield_import
from catalog_sync.utils.config import EXPORT_REQUIRED, IMPORT_REQUIRED, settings


logger = logging.getLogger(__name__)


async def run_check_env(cfg) -> bool:
    """Check .env, required settings and the document store connection."""
    logger.info("Checking environment...")
    ok = True

    if not os.path.exists('.env'):
        logger.warning("⚠️ .env not found")
    else:
        logger.info("✅ .env found")

    for pipeline, names in (("export", EXPORT_REQUIRED), ("import-metafields", IMPORT_REQUIRED)):
        missing = cfg.missing(*names)
        if missing:
            ok = False
            logger.error(f"❌ {pipeline}: missing {', '.join(missing)}")
        else:
            logger.info(f"✅ {pipeline}: settings present")

    if not cfg.MONGO_URI:
        logger.warning("⚠️ MONGO_URI not set")
        return ok

    try:
        await init_document_store(cfg.MONGO_URI, cfg.MONGO_DB_NAME)
        logger.info("✅ Document store connection successful")
    except Exception as e:
        ok = False
        logger.error(f"❌ Document store connection failed: {e}")
    finally:
        await close_document_store()

    return ok


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Catalog sync: Shopify storefront ⇄ sheet service, metafield CSV → Shopify admin"
    )
    parser.add_argument("--debug", action="store_true", help="Set log level to DEBUG")
    parser.add_argument("--json-logs", action="store_true", help="Enable JSON logging format")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_export = subparsers.add_parser('export', help='Export the product catalog to the sheet service')
    p_export.add_argument('--page-size', type=int, help='Products per page (default: PRODUCTS_PER_PAGE)')
    p_export.add_argument('--delay', type=float, help='Seconds to wait after each page (default: PAGE_DELAY_SECONDS)')

    p_import = subparsers.add_parser('import-metafields', help='Apply the metafield CSV to products')
    p_import.add_argument('csv_path', nargs='?', help='CSV file (default: METAFIELDS_CSV_PATH)')

    subparsers.add_parser('check', help='Check environment')
    return parser


def apply_overrides(args: argparse.Namespace, cfg):
    """Return a copy of the settings with CLI overrides applied."""
    update = {}
    if getattr(args, 'page_size', None):
        update['PRODUCTS_PER_PAGE'] = args.page_size
    if getattr(args, 'delay', None) is not None:
        update['PAGE_DELAY_SECONDS'] = args.delay
    if getattr(args, 'csv_path', None):
        update['METAFIELDS_CSV_PATH'] = args.csv_path
    return cfg.model_copy(update=update) if update else cfg


def main():
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    log_level = "DEBUG" if args.debug else settings.LOG_LEVEL
    setup_logging(level=log_level, json_format=args.json_logs, command=args.command)

    cfg = apply_overrides(args, settings)

    try:
        if args.command == 'export':
            asyncio.run(run_catalog_export(cfg))
        elif args.command == 'import-metafields':
            asyncio.run(run_metafield_import(cfg))
        elif args.command == 'check':
            if not asyncio.run(run_check_env(cfg)):
                sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        sys.exit(1)
    except ConfigError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
