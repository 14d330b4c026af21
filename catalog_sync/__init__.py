"""Catalog synchronisation between the storefront, the sheet service and the document store."""

__version__ = "0.1.0"
