import json
import logging
from typing import Sequence

import aiohttp

from ..models import ExportRecord
from ..utils.http import NO_RETRY, RetryPolicy, request_with_retries

logger = logging.getLogger(__name__)


def serialize_records(records: Sequence[ExportRecord]) -> str:
    """Deterministic JSON body: same records in, same bytes out."""
    return json.dumps([r.to_sheet_row() for r in records], ensure_ascii=False)


class SheetsSink:
    """Pushes export rows to the sheet service.

    The service replaces the sheet contents on every POST, so callers send the
    complete set of rows each time rather than a delta.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        spreadsheet_id: str,
        sheet_name: str,
        retry: RetryPolicy = NO_RETRY,
    ):
        self.url = f"{base_url.rstrip('/')}/data"
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.retry = retry
        self._session = session

    @classmethod
    def from_settings(cls, session: aiohttp.ClientSession, settings) -> "SheetsSink":
        return cls(
            session,
            settings.SHEETS_SERVICE_URL,
            settings.SHEETS_SPREADSHEET_ID,
            settings.SHEETS_SHEET_NAME,
            retry=RetryPolicy.from_settings(settings),
        )

    async def push(self, records: Sequence[ExportRecord]) -> str:
        body = serialize_records(records)
        params = {"id": self.spreadsheet_id, "sheet": self.sheet_name}
        headers = {"Content-Type": "application/json"}
        logger.debug("Posting %s rows to %s (sheet=%s)", len(records), self.url, self.sheet_name)
        return await request_with_retries(
            self._session,
            "POST",
            self.url,
            retry=self.retry,
            parse_json=False,
            params=params,
            data=body.encode("utf-8"),
            headers=headers,
        )
