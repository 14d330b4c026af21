import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Tuple

import aiohttp

from ..errors import RemoteStatusError, RequestSetupError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times a request is attempted and how long to wait in between.

    The default is a single attempt. Only ``TransportError`` and statuses in
    ``retry_statuses`` are retried; a request that could not be built never is.
    """

    max_attempts: int = 1
    backoff: float = 1.0
    retry_statuses: Tuple[int, ...] = (429, 500, 502, 503, 504)

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(max_attempts=max(1, settings.HTTP_MAX_ATTEMPTS), backoff=settings.HTTP_BACKOFF)

    def should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RequestSetupError):
            return False
        if isinstance(exc, TransportError):
            return True
        if isinstance(exc, RemoteStatusError):
            return exc.status in self.retry_statuses
        return False


NO_RETRY = RetryPolicy()


async def _request_once(session: aiohttp.ClientSession, method: str, url: str, parse_json: bool, **kwargs) -> Any:
    try:
        async with session.request(method, url, **kwargs) as resp:
            status = resp.status
            headers = dict(resp.headers)
            text = await resp.text(errors="replace")
    except aiohttp.InvalidURL as exc:
        raise RequestSetupError(f"Invalid URL: {exc}", method=method, url=url) from exc
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise TransportError(f"No response from {url}: {exc!r}", method=method, url=url) from exc
    except (TypeError, ValueError) as exc:
        # aiohttp serialises ``json=`` payloads before anything is sent
        raise RequestSetupError(f"Could not build request: {exc}", method=method, url=url) from exc

    if status >= 400:
        raise RemoteStatusError(
            f"HTTP {status} from {url}", status=status, body=text, headers=headers, url=url
        )
    if not parse_json:
        return text
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError as exc:
        raise RemoteStatusError(
            f"Response from {url} is not valid JSON", status=status, body=text, headers=headers, url=url
        ) from exc


async def request_with_retries(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    retry: RetryPolicy = NO_RETRY,
    parse_json: bool = True,
    **kwargs,
) -> Any:
    """Send one logical request, classifying failures into the catalog_sync error kinds.

    Returns the decoded JSON body (``None`` when empty), or the raw text when
    ``parse_json`` is False.
    """
    attempts = max(1, retry.max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await _request_once(session, method, url, parse_json, **kwargs)
        except (TransportError, RemoteStatusError) as exc:
            if attempt == attempts or not retry.should_retry(exc):
                raise
            logger.warning("HTTP request failed (attempt %s/%s) %s: %s", attempt, attempts, url, exc)
            await asyncio.sleep(retry.backoff * attempt)
