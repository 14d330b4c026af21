"""Error kinds shared by both pipelines.

``TransportError`` means no response was received, ``RemoteStatusError`` means
one was received but it reports failure. Remote ``userErrors`` are not
exceptions; see ``catalog_sync.models.UserError``.
"""
from typing import Any, Dict, List, Optional


class CatalogSyncError(Exception):
    """Base class for every error raised by catalog_sync."""


class ConfigError(CatalogSyncError):
    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required settings: {', '.join(self.missing)}")


class SourceFormatError(CatalogSyncError):
    """The tabular source cannot be processed (e.g. a required column is absent)."""


class TransportError(CatalogSyncError):
    """The request was sent but no response came back."""

    def __init__(self, message: str, method: str = "", url: str = ""):
        self.method = method
        self.url = url
        super().__init__(message)


class RequestSetupError(TransportError):
    """The request could not be constructed, so nothing was sent."""


class RemoteStatusError(CatalogSyncError):
    """A response arrived but it reports failure."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: str = "",
        headers: Optional[Dict[str, str]] = None,
        url: str = "",
    ):
        self.status = status
        self.body = body
        self.headers = dict(headers or {})
        self.url = url
        super().__init__(message)


class QueryError(RemoteStatusError):
    """A successful HTTP response whose GraphQL body carries an ``errors`` list."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None, **kwargs):
        self.errors = list(errors or [])
        super().__init__(message, **kwargs)
